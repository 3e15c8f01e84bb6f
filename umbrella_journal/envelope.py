"""Journal envelope parser.

A journal envelope is an email generated by the mail server: its text
body lists delivery facts (sender, every recipient including Bcc) and the
original message rides along as its single non-text part.  Parsing runs
through the stages of :class:`~umbrella_journal.exceptions.ParseStage` in
order; any fatal failure raises an :class:`EnvelopeParseError` naming the
stage, and no partial result is returned.
"""

from __future__ import annotations

from typing import BinaryIO

import structlog

from .config import ParserConfig
from .exceptions import (
    MalformedMessageError,
    MalformedOuterMessage,
    MimeDecodeError,
    OuterBodyDecodeFailure,
    ParseStage,
    UnexpectedAttachmentCount,
    WrappedMessageDecodeFailure,
)
from .hashing import content_hash
from .metadata import extract_metadata
from .mime import DecodedBody, decode_body, message_date, read_message
from .models import Diagnostic, DiagnosticKind, Message
from .parts import extract_parts

logger = structlog.get_logger()


class EnvelopeParser:
    """Stateless parser: journal envelope bytes → :class:`Message`.

    Safe to share between threads; each call owns its own result.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self._config = config or ParserConfig()

    def parse(self, source: bytes | BinaryIO) -> Message:
        raw = bytes(source) if isinstance(source, (bytes, bytearray, memoryview)) else source.read()
        diagnostics: list[Diagnostic] = []

        try:
            envelope = read_message(raw)
        except MalformedMessageError as exc:
            raise MalformedOuterMessage(ParseStage.READ_OUTER, exc.message) from exc

        try:
            received = message_date(envelope)
        except MalformedMessageError as exc:
            raise MalformedOuterMessage(ParseStage.READ_TIMESTAMP, exc.message) from exc

        try:
            outer = decode_body(envelope)
        except MimeDecodeError as exc:
            raise OuterBodyDecodeFailure(exc.message) from exc

        metadata = extract_metadata(outer.text, diagnostics)

        if len(outer.other_parts) != 1:
            raise UnexpectedAttachmentCount(len(outer.other_parts))
        wrapped_raw = outer.other_parts[0].content()

        message_hash = content_hash(wrapped_raw)

        wrapped = self._decode_wrapped(wrapped_raw)
        parts = extract_parts(
            wrapped.root,
            diagnostics,
            pipelined=self._config.pipelined_hashing,
            queue_size=self._config.collector_queue_size,
        )

        message = Message(
            metadata=metadata.model_copy(update={"journal_timestamp": received}),
            message_hash=message_hash,
            body=wrapped.text,
            parts=parts,
            diagnostics=diagnostics,
        )

        _log_diagnostics(diagnostics, message_hash)
        logger.info(
            "journal_parsed",
            message_id=metadata.message_id,
            message_hash=message_hash,
            parts=len(parts),
            recipients=len(metadata.to) + len(metadata.cc) + len(metadata.bcc),
        )
        return message

    @staticmethod
    def _decode_wrapped(raw: bytes) -> DecodedBody:
        try:
            return decode_body(read_message(raw))
        except (MalformedMessageError, MimeDecodeError) as exc:
            raise WrappedMessageDecodeFailure(f"wrapped message: {exc.message}") from exc


def _log_diagnostics(diagnostics: list[Diagnostic], message_hash: str) -> None:
    for diagnostic in diagnostics:
        if diagnostic.kind is DiagnosticKind.UNHANDLED_METADATA_HEADER:
            logger.debug(
                "unhandled_envelope_header",
                header=diagnostic.detail,
                message_hash=message_hash,
            )
        else:
            logger.warning(
                "nested_message_skipped",
                reason=diagnostic.detail,
                message_hash=message_hash,
            )


def parse_envelope(source: bytes | BinaryIO, config: ParserConfig | None = None) -> Message:
    """Parse one journal envelope with a throwaway :class:`EnvelopeParser`."""
    return EnvelopeParser(config).parse(source)
