"""Delivery metadata from the body of a journal envelope.

The envelope body is a block of header-like lines written by the
journaling mail server::

    Sender: alice@example.com
    Subject: Quarterly numbers
    Message-Id: <abc123@mail.example.com>
    To: bob@example.com, Expanded: team@example.com

Recipient lines may list several representations of the same delivery,
joined by an ``Expanded`` or ``Forwarded`` marker depending on the server.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .models import Diagnostic, DiagnosticKind, Metadata

HEADER_SEPARATOR = ": "

FORWARDED_SEPARATOR = ", Forwarded: "
# Later servers put a comma before the Expanded marker; older ones don't.
EXPANDED_SEPARATORS = (", Expanded: ", " Expanded: ")


def split_header_line(line: str) -> tuple[str, str] | None:
    """Split *line* on the first ``": "`` into ``(key, value)``.

    Returns None when the line is not a header line.  Neither side is
    trimmed; keys are matched case-sensitively by the caller.
    """
    key, sep, value = line.partition(HEADER_SEPARATOR)
    if not sep:
        return None
    return key, value


def split_recipients(value: str) -> list[str]:
    """Split a recipient header value on its dialect separator.

    The Forwarded dialect wins when its marker is present.
    """
    if FORWARDED_SEPARATOR in value:
        return value.split(FORWARDED_SEPARATOR)
    for separator in EXPANDED_SEPARATORS:
        if separator in value:
            return value.split(separator)
    return [value]


def normalize_recipients(existing: list[str], candidates: Iterable[str]) -> list[str]:
    """Append lower-cased *candidates* to *existing*, skipping duplicates.

    First-seen order is kept.  Empty candidates are dropped.  Returns a new
    list; *existing* is not modified.
    """
    result = list(existing)
    seen = set(result)
    for candidate in candidates:
        address = candidate.lower()
        if not address or address in seen:
            continue
        seen.add(address)
        result.append(address)
    return result


# ------------------------------------------------------------------
# Field setters
# ------------------------------------------------------------------


def _set_sender(md: Metadata, value: str) -> None:
    md.sender = value.lower()


def _set_on_behalf_of(md: Metadata, value: str) -> None:
    md.on_behalf_of = value


def _set_subject(md: Metadata, value: str) -> None:
    md.subject = value


def _set_message_id(md: Metadata, value: str) -> None:
    value = value.removeprefix("<")
    md.message_id = value.removesuffix(">")


def _add_to(md: Metadata, value: str) -> None:
    md.to = normalize_recipients(md.to, split_recipients(value))


def _add_cc(md: Metadata, value: str) -> None:
    md.cc = normalize_recipients(md.cc, split_recipients(value))


def _add_bcc(md: Metadata, value: str) -> None:
    md.bcc = normalize_recipients(md.bcc, split_recipients(value))


FIELD_SETTERS: dict[str, Callable[[Metadata, str], None]] = {
    "Sender": _set_sender,
    "On-Behalf-Of": _set_on_behalf_of,
    "Subject": _set_subject,
    "Message-Id": _set_message_id,
    "Recipient": _add_to,
    "To": _add_to,
    "Cc": _add_cc,
    "Bcc": _add_bcc,
}

RECOGNIZED_HEADERS = frozenset(FIELD_SETTERS)


def extract_metadata(
    body_text: str,
    diagnostics: list[Diagnostic] | None = None,
) -> Metadata:
    """Scan an envelope body and return the metadata it describes.

    Lines that are not header lines are skipped.  Unrecognised keys are
    appended to *diagnostics* (when given) and otherwise ignored.
    ``journal_timestamp`` is left unset; it comes from the envelope itself.
    """
    md = Metadata()
    for line in body_text.splitlines():
        header = split_header_line(line)
        if header is None:
            continue
        key, value = header
        setter = FIELD_SETTERS.get(key)
        if setter is None:
            if diagnostics is not None:
                diagnostics.append(
                    Diagnostic(kind=DiagnosticKind.UNHANDLED_METADATA_HEADER, detail=key)
                )
            continue
        setter(md, value)
    return md
