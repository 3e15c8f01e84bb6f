"""Umbrella Journal: metadata, parts and fingerprints from journaled email envelopes."""

from .config import ParserConfig, RetryConfig, TextExtractionConfig
from .envelope import EnvelopeParser, parse_envelope
from .exceptions import (
    EnvelopeParseError,
    JournalError,
    MalformedMessageError,
    MalformedOuterMessage,
    MimeDecodeError,
    OuterBodyDecodeFailure,
    ParseStage,
    TextExtractionError,
    UnexpectedAttachmentCount,
    WrappedMessageDecodeFailure,
)
from .hashing import content_hash
from .logging import setup_logging
from .metadata import extract_metadata, normalize_recipients, split_header_line, split_recipients
from .models import Diagnostic, DiagnosticKind, Message, Metadata, Part
from .parts import extract_parts
from .text_extraction import PartText, TextExtractionClient, extract_part_texts

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "EnvelopeParseError",
    "EnvelopeParser",
    "JournalError",
    "MalformedMessageError",
    "MalformedOuterMessage",
    "Message",
    "Metadata",
    "MimeDecodeError",
    "OuterBodyDecodeFailure",
    "Part",
    "ParseStage",
    "ParserConfig",
    "PartText",
    "RetryConfig",
    "TextExtractionClient",
    "TextExtractionConfig",
    "TextExtractionError",
    "UnexpectedAttachmentCount",
    "WrappedMessageDecodeFailure",
    "content_hash",
    "extract_metadata",
    "extract_part_texts",
    "extract_parts",
    "normalize_recipients",
    "parse_envelope",
    "setup_logging",
    "split_header_line",
    "split_recipients",
]
