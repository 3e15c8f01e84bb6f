"""Flatten a wrapped message's MIME tree into its leaf parts.

Re-wrapped ``message/rfc822`` parts (typically forwarded mail) are read
and decoded again and their leaves spliced in where the wrapper stood.
``multipart/mixed`` containers contribute only their children; any other
multipart node is emitted as a part of its own, with empty content.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator

from .exceptions import MalformedMessageError, MimeDecodeError, WrappedMessageDecodeFailure
from .hashing import content_hash
from .mime import RFC822, MimePart, decode_body, read_message, walk
from .models import Diagnostic, DiagnosticKind, Part

MIXED = "multipart/mixed"
_DONE = None


def iter_leaves(root: MimePart, diagnostics: list[Diagnostic] | None = None) -> Iterator[MimePart]:
    """Yield every emitted node under *root*, in pre-order, across nesting levels.

    A nested message that is not valid RFC 2822 aborts the traversal with
    :class:`WrappedMessageDecodeFailure`.  One that cannot be MIME-decoded
    is skipped and noted in *diagnostics*.
    """
    for node in walk(root):
        if node.content_type() == RFC822:
            nested = _decode_nested(node, diagnostics)
            if nested is not None:
                yield from iter_leaves(nested, diagnostics)
        elif node.content_type() == MIXED:
            continue
        else:
            yield node


def _decode_nested(node: MimePart, diagnostics: list[Diagnostic] | None) -> MimePart | None:
    try:
        msg = read_message(node.content())
    except MalformedMessageError as exc:
        raise WrappedMessageDecodeFailure(f"nested message/rfc822 is not RFC 2822: {exc}") from exc
    try:
        return decode_body(msg).root
    except MimeDecodeError as exc:
        if diagnostics is not None:
            diagnostics.append(
                Diagnostic(kind=DiagnosticKind.NESTED_MESSAGE_SKIPPED, detail=str(exc))
            )
        return None


def _to_part(file_name: str, content_type: str, content: bytes) -> Part:
    return Part(
        file_name=file_name,
        content_type=content_type,
        content=content,
        content_hash=content_hash(content),
    )


def extract_parts(
    root: MimePart,
    diagnostics: list[Diagnostic] | None = None,
    *,
    pipelined: bool = False,
    queue_size: int = 1,
) -> list[Part]:
    """Return the leaf parts under *root* with their content hashes.

    With *pipelined*, hashing runs on a collector thread fed through a
    bounded queue of *queue_size* while traversal continues; the result is
    still in traversal order.
    """
    leaves = iter_leaves(root, diagnostics)
    if not pipelined:
        return [_to_part(leaf.file_name(), leaf.content_type(), leaf.content()) for leaf in leaves]
    return _collect_pipelined(leaves, queue_size)


def _collect_pipelined(leaves: Iterator[MimePart], queue_size: int) -> list[Part]:
    handoff: queue.Queue[tuple[int, str, str, bytes] | None] = queue.Queue(maxsize=queue_size)
    collected: list[tuple[int, Part]] = []

    def collector() -> None:
        while (item := handoff.get()) is not _DONE:
            index, file_name, content_type, content = item
            collected.append((index, _to_part(file_name, content_type, content)))

    thread = threading.Thread(target=collector, name="part-collector", daemon=True)
    thread.start()
    try:
        for index, leaf in enumerate(leaves):
            handoff.put((index, leaf.file_name(), leaf.content_type(), leaf.content()))
    finally:
        handoff.put(_DONE)
        thread.join()

    collected.sort(key=lambda item: item[0])
    return [part for _, part in collected]
