"""Adapter over the standard-library ``email`` package.

Provides the two MIME collaborators the envelope parser needs:

* :func:`read_message` turns raw bytes into a structured RFC 2822 message
  (with :func:`message_date` as the typed Date accessor).
* :func:`decode_body` splits a parsed message into its text body and its
  other (non-text) parts, and :func:`walk` is the pre-order
  "match all descendants" primitive over the resulting tree.

Every node is parsed headers-only, so its body stays the exact bytes of the
input; multipart bodies are split on their boundary here.  A
``message/rfc822`` part is therefore a leaf whose content is the embedded
message byte-for-byte (after transfer decoding), which callers re-read with
:func:`read_message` when they want to descend into it.
"""

from __future__ import annotations

import email.errors
import email.parser
import email.policy
import email.utils
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import Message as _EmailMessage

from .exceptions import MalformedMessageError, MimeDecodeError

RFC822 = "message/rfc822"

_FATAL_HEADER_DEFECTS = (email.errors.MissingHeaderBodySeparatorDefect,)


def _parse_headers(raw: bytes) -> _EmailMessage:
    # headersonly keeps the body as the undecoded input text
    return email.parser.BytesParser(policy=email.policy.default).parsebytes(raw, headersonly=True)


def _delimiter_re(boundary: str) -> re.Pattern[bytes]:
    # RFC 2046: the line break before a delimiter belongs to the delimiter.
    return re.compile(
        rb"(?:\A|\r?\n)--" + re.escape(boundary.encode("ascii", "surrogateescape"))
        + rb"(?P<close>--)?[ \t]*(?P<eol>\r?\n|\Z)"
    )


def split_multipart(body: bytes, boundary: str) -> list[bytes]:
    """Split a multipart *body* into the raw bytes of each body part.

    Preamble and epilogue are dropped.  A missing close delimiter is
    tolerated; a missing first delimiter raises :class:`MimeDecodeError`.
    """
    parts: list[bytes] = []
    start: int | None = None
    for match in _delimiter_re(boundary).finditer(body):
        if start is not None:
            parts.append(body[start : match.start()])
        if match.group("close"):
            return parts
        start = match.end()
    if start is None:
        raise MimeDecodeError(f"start boundary {boundary!r} not found")
    parts.append(body[start:])
    return parts


class MimePart:
    """Read-only view of one node of a MIME tree."""

    __slots__ = ("_part", "_children")

    def __init__(self, part: _EmailMessage) -> None:
        self._part = part
        self._children: list[MimePart] | None = None

    def __repr__(self) -> str:
        return f"MimePart({self.content_type()!r}, file_name={self.file_name()!r})"

    def file_name(self) -> str:
        return self._part.get_filename() or ""

    def content_type(self) -> str:
        return self._part.get_content_type()

    def is_container(self) -> bool:
        return self._part.get_content_maintype() == "multipart"

    def is_attachment(self) -> bool:
        return self._part.get_content_disposition() == "attachment"

    def _body(self) -> bytes:
        # the payload is still the input text; decode=True only undoes the transfer encoding
        return self._part.get_payload(decode=True) or b""

    def content(self) -> bytes:
        """Transfer-decoded bytes of this part.

        For ``message/rfc822`` this is the embedded message exactly as sent;
        for containers it is empty.
        """
        if self.is_container():
            return b""
        return self._body()

    def text(self) -> str:
        """Decode a ``text/*`` part to str using its declared charset."""
        content = self.content()
        charset = self._part.get_content_charset() or "us-ascii"
        try:
            return content.decode(charset, errors="replace")
        except LookupError:
            return content.decode("utf-8", errors="replace")

    def children(self) -> list[MimePart]:
        """Body parts of a multipart container; empty for anything else.

        Raises :class:`MimeDecodeError` when a container cannot be split.
        """
        if self._children is None:
            self._children = self._split() if self.is_container() else []
        return self._children

    def _split(self) -> list[MimePart]:
        boundary = self._part.get_boundary()
        if not boundary:
            raise MimeDecodeError(f"broken {self.content_type()} container: no boundary parameter")
        try:
            raw_parts = split_multipart(self._body(), boundary)
        except MimeDecodeError as exc:
            raise MimeDecodeError(f"broken {self.content_type()} container: {exc.message}") from exc
        return [MimePart(_parse_headers(raw)) for raw in raw_parts]


@dataclass
class DecodedBody:
    """A MIME-decoded message, split the way the envelope parser consumes it."""

    root: MimePart
    text: str = ""
    html: str | None = None
    other_parts: list[MimePart] = field(default_factory=list)
    attachments: list[MimePart] = field(default_factory=list)


def read_message(raw: bytes) -> _EmailMessage:
    """Parse *raw* bytes as one RFC 2822 message.

    Raises :class:`MalformedMessageError` when there is no usable header
    block (no headers at all, or a non-header line inside the header block).
    """
    msg = _parse_headers(raw)
    if not msg.keys():
        raise MalformedMessageError("no RFC 2822 header block found")
    for defect in msg.defects:
        if isinstance(defect, _FATAL_HEADER_DEFECTS):
            raise MalformedMessageError(f"malformed header block: {defect.__class__.__name__}")
    return msg


def message_date(msg: _EmailMessage) -> datetime:
    """Return the message's Date header as an aware datetime (naive → UTC)."""
    value = msg.get("Date")
    if value is None:
        raise MalformedMessageError("missing Date header")
    try:
        dt = email.utils.parsedate_to_datetime(str(value))
    except (TypeError, ValueError, IndexError) as exc:
        raise MalformedMessageError(f"unparsable Date header: {value!s}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def walk(
    part: MimePart,
    predicate: Callable[[MimePart], bool] = lambda _: True,
) -> Iterator[MimePart]:
    """Yield *part* and all its descendants in pre-order, filtered by *predicate*.

    Does not descend into ``message/rfc822`` payloads.
    """
    stack = [part]
    while stack:
        node = stack.pop()
        if predicate(node):
            yield node
        stack.extend(reversed(node.children()))


def decode_body(msg: _EmailMessage) -> DecodedBody:
    """MIME-decode *msg* into its text body and its non-text parts.

    Raises :class:`MimeDecodeError` when a multipart container's structure
    cannot be recovered.
    """
    root = MimePart(msg)
    decoded = DecodedBody(root=root)
    seen_text = False

    for part in walk(root):
        if part.is_container():
            continue

        if part.is_attachment():
            decoded.attachments.append(part)

        content_type = part.content_type()
        if not content_type.startswith("text/"):
            decoded.other_parts.append(part)
            continue
        if part.is_attachment():
            continue

        if content_type == "text/plain" and not seen_text:
            decoded.text = part.text()
            seen_text = True
        elif content_type == "text/html" and decoded.html is None:
            decoded.html = part.text()

    return decoded
