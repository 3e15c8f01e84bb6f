"""Content fingerprints for deduplication and audit."""

from __future__ import annotations

import hashlib

DIGEST_SIZE_HEX = 64


def content_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of *data* (defined for empty input too)."""
    return hashlib.sha256(data).hexdigest()
