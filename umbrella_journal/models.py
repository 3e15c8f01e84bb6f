"""Data models for parsed journal envelopes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DiagnosticKind(str, Enum):
    """Non-fatal observations recorded while parsing a journal."""

    UNHANDLED_METADATA_HEADER = "unhandled_metadata_header"
    NESTED_MESSAGE_SKIPPED = "nested_message_skipped"


class Diagnostic(BaseModel):
    """A non-fatal observation; never alters the parse result."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind = Field(description="What was observed")
    detail: str = Field(description="Header name, or the reason a subtree was skipped")


class Metadata(BaseModel):
    """Delivery facts about the wrapped message, read from the envelope body.

    Filled incrementally by the metadata extractor; the parser stamps
    ``journal_timestamp`` from the envelope's Date header.
    """

    sender: str | None = Field(default=None, description="Lower-cased sender address")
    on_behalf_of: str | None = Field(default=None, description="On-Behalf-Of value, verbatim")
    subject: str | None = Field(default=None, description="Subject, verbatim")
    message_id: str | None = Field(
        default=None,
        description="Message-Id of the wrapped message without angle brackets",
    )
    to: list[str] = Field(default_factory=list, description="Lower-cased, de-duplicated To recipients")
    cc: list[str] = Field(default_factory=list, description="Lower-cased, de-duplicated Cc recipients")
    bcc: list[str] = Field(default_factory=list, description="Lower-cased, de-duplicated Bcc recipients")
    journal_timestamp: datetime | None = Field(
        default=None,
        description="Date header of the journal envelope",
    )


class Part(BaseModel):
    """One leaf content unit of the wrapped message."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    file_name: str = Field(default="", description="Declared filename, empty if none")
    content_type: str = Field(description="MIME type (e.g. text/plain)")
    content: bytes = Field(description="Transfer-decoded content")
    content_hash: str = Field(description="SHA-256 hex digest of content")


class Message(BaseModel):
    """The result of parsing one journal envelope."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    metadata: Metadata = Field(description="Envelope-level delivery metadata")
    message_hash: str = Field(description="SHA-256 hex digest of the wrapped message's raw bytes")
    body: str = Field(default="", description="Plain-text body of the wrapped message")
    parts: list[Part] = Field(default_factory=list, description="Leaf parts in traversal order")
    diagnostics: list[Diagnostic] = Field(
        default_factory=list,
        description="Non-fatal observations made while parsing",
    )

    @model_validator(mode="after")
    def _require_timestamp(self) -> Message:
        if self.metadata.journal_timestamp is None:
            raise ValueError("metadata.journal_timestamp is required")
        return self
