"""
Utility helpers for the Python SDK.

Re-exports:
- bytes: hex and base64url helpers
- hash: SHA-256
- borsh: binary writer/reader used by every wire type
- retry: bounded poll and retry-with-backoff
"""

from .borsh import BinaryReader, BinaryWriter
from .bytes import b64url_decode, b64url_encode, to_hex
from .hash import sha256
from .retry import RETRY, poll, retry_with_backoff

__all__ = [
    "to_hex",
    "b64url_encode",
    "b64url_decode",
    "sha256",
    "BinaryWriter",
    "BinaryReader",
    "RETRY",
    "poll",
    "retry_with_backoff",
]
