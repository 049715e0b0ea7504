"""
Byte helpers shared by the codec, the identifiers and the CLI.

Addresses, hashes and keys travel as unpadded URL-safe base64 text. Decoding
also tolerates the standard alphabet ('+', '/') and trailing '=' padding, as
emitted by generic base64 tooling.
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def b64url_encode(b: BytesLike) -> str:
    """Bytes -> unpadded base64url string."""
    return base64.urlsafe_b64encode(bytes(b)).decode("ascii").rstrip("=")


def b64url_decode(s: str) -> bytes:
    """
    base64url text (padded or not) -> bytes.

    Raises ValueError on characters outside the alphabet or an impossible length.
    """
    if not isinstance(s, str):
        raise TypeError(f"b64url_decode expects str, got {type(s).__name__}")
    t = s.strip().rstrip("=").replace("+", "-").replace("/", "_")
    if len(t) % 4 == 1:
        raise ValueError(f"invalid base64url length: {len(t)}")
    padded = t + "=" * (-len(t) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64url text: {e}") from e


__all__ = ["BytesLike", "to_hex", "b64url_encode", "b64url_decode"]
