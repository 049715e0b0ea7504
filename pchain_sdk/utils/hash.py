from __future__ import annotations

import hashlib

from .bytes import BytesLike


def sha256(*parts: BytesLike) -> bytes:
    """SHA-256 over the concatenation of *parts*."""
    h = hashlib.sha256()
    for p in parts:
        h.update(bytes(p))
    return h.digest()


__all__ = ["sha256"]
