"""Exception hierarchy for journal envelope parsing.

Fatal parse failures derive from :class:`EnvelopeParseError` and carry the
:class:`ParseStage` that failed, so callers can report *where* a journal
broke without inspecting the message text.
"""

from __future__ import annotations

from enum import Enum


class ParseStage(str, Enum):
    """States of the envelope parser, in execution order."""

    READ_OUTER = "read_outer"
    READ_TIMESTAMP = "read_timestamp"
    DECODE_OUTER_BODY = "decode_outer_body"
    EXTRACT_METADATA = "extract_metadata"
    LOCATE_WRAPPED_MESSAGE = "locate_wrapped_message"
    HASH_WRAPPED_MESSAGE = "hash_wrapped_message"
    EXTRACT_PARTS = "extract_parts"
    ASSEMBLE = "assemble"


class JournalError(Exception):
    """Base exception for all umbrella_journal errors."""

    def __init__(self, message: str = "Journal processing error") -> None:
        self.message = message
        super().__init__(self.message)


# ------------------------------------------------------------------
# MIME collaborator failures
# ------------------------------------------------------------------


class MalformedMessageError(JournalError):
    """Raw bytes could not be read as an RFC 2822 message."""


class MimeDecodeError(JournalError):
    """A parsed message could not be MIME-decoded."""


# ------------------------------------------------------------------
# Fatal envelope parse failures
# ------------------------------------------------------------------


class EnvelopeParseError(JournalError):
    """A journal envelope could not be parsed.

    Attributes:
        stage: The parser state that failed.
        reason: Human-readable description of the failure.
    """

    def __init__(self, stage: ParseStage, reason: str) -> None:
        self.stage = stage
        self.reason = reason
        super().__init__(f"{stage.value}: {reason}")


class MalformedOuterMessage(EnvelopeParseError):
    """The envelope is not valid RFC 2822, or its Date header is unusable."""


class OuterBodyDecodeFailure(EnvelopeParseError):
    """The envelope body could not be MIME-decoded."""

    def __init__(self, reason: str) -> None:
        super().__init__(ParseStage.DECODE_OUTER_BODY, reason)


class UnexpectedAttachmentCount(EnvelopeParseError):
    """The envelope does not wrap exactly one original message."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            ParseStage.LOCATE_WRAPPED_MESSAGE,
            f"expected 1 wrapped message in the envelope, but got {count}",
        )


class WrappedMessageDecodeFailure(EnvelopeParseError):
    """The wrapped message (or a nested re-wrapped one) could not be read."""

    def __init__(self, reason: str) -> None:
        super().__init__(ParseStage.EXTRACT_PARTS, reason)


# ------------------------------------------------------------------
# Downstream text extraction
# ------------------------------------------------------------------


class TextExtractionError(JournalError):
    """The document-to-text service failed or was unavailable."""
