"""Shared test fixtures for the journal parser test suite."""

from __future__ import annotations

import email
import logging
from email import encoders
from email.mime.base import MIMEBase
from email.mime.message import MIMEMessage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import pytest
import structlog

from umbrella_journal.config import ParserConfig
from umbrella_journal.envelope import EnvelopeParser

JOURNAL_DATE = "Mon, 02 Jun 2025 09:30:00 +0000"

JOURNAL_BODY = (
    "Sender: Alice@Example.com\r\n"
    "Subject: Quarterly numbers\r\n"
    "Message-Id: <orig-001@mail.example.com>\r\n"
    "To: bob@example.com, Expanded: Team@example.com\r\n"
    "Cc: carol@example.com\r\n"
    "Bcc: dave@example.com\r\n"
)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Remove log handlers installed by the test."""
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


# ------------------------------------------------------------------
# Sample EML builders
# ------------------------------------------------------------------


def _attachment(filename: str, content_type: str, payload: bytes) -> MIMEBase:
    maintype, subtype = content_type.split("/", 1)
    part = MIMEBase(maintype, subtype)
    part.set_payload(payload)
    encoders.encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=filename)
    return part


def _build_original_message(
    *,
    body: str = "Hello, World!",
    subject: str = "Quarterly numbers",
    message_id: str = "<orig-001@mail.example.com>",
    attachments: list[tuple[str, str, bytes]] | None = None,
    forwarded: list[bytes] | None = None,
) -> bytes:
    """Build the message a journal wraps, with optional forwarded sub-messages."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = "alice@example.com"
    msg["To"] = "bob@example.com"
    msg["Message-ID"] = message_id
    msg["Date"] = "Mon, 02 Jun 2025 09:29:00 +0000"
    msg.attach(MIMEText(body, "plain"))

    for filename, content_type, payload in attachments or []:
        msg.attach(_attachment(filename, content_type, payload))
    for raw in forwarded or []:
        msg.attach(MIMEMessage(email.message_from_bytes(raw)))

    return msg.as_bytes()


def _build_journal(
    *,
    body_text: str = JOURNAL_BODY,
    wrapped: list[bytes] | None = None,
    extra_parts: list[tuple[str, str, bytes]] | None = None,
    date: str | None = JOURNAL_DATE,
) -> bytes:
    """Build a journal envelope wrapping each of *wrapped* as message/rfc822."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Journal report"
    msg["From"] = "journal@mail.example.com"
    msg["To"] = "archive@example.com"
    msg["Message-ID"] = "<journal-001@mail.example.com>"
    if date is not None:
        msg["Date"] = date
    msg.attach(MIMEText(body_text, "plain"))

    for raw in wrapped if wrapped is not None else [_build_original_message()]:
        msg.attach(MIMEMessage(email.message_from_bytes(raw)))
    for filename, content_type, payload in extra_parts or []:
        msg.attach(_attachment(filename, content_type, payload))

    return msg.as_bytes()


def _build_forwarded_message(
    *,
    body: str = "Forwarded body",
    attachment: tuple[str, str, bytes] = ("report.pdf", "application/pdf", b"%PDF-1.4 fake pdf"),
) -> bytes:
    """A two-leaf message suitable for nesting as message/rfc822."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Fwd: report"
    msg["From"] = "erin@partner.example"
    msg["To"] = "alice@example.com"
    msg["Date"] = "Sun, 01 Jun 2025 17:00:00 +0000"
    msg.attach(MIMEText(body, "plain"))
    msg.attach(_attachment(*attachment))
    return msg.as_bytes()


@pytest.fixture
def parser() -> EnvelopeParser:
    return EnvelopeParser(ParserConfig())


@pytest.fixture
def journal_eml_bytes() -> bytes:
    return _build_journal()


@pytest.fixture
def forwarded_journal_bytes() -> bytes:
    """Journal whose wrapped message has a text leaf and a forwarded message with two leaves."""
    original = _build_original_message(forwarded=[_build_forwarded_message()])
    return _build_journal(wrapped=[original])
