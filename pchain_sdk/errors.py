"""
Typed error classes for the Python SDK.

These are raised by the builder, the reader/writer, the RPC transport and the
wire codec so callers can catch specific failure modes while still being able
to catch the base `PChainSdkError`.

Taxonomy
--------
- ValidationError     : caller-supplied input violates a local invariant
- NonceError          : the network rejected the transaction nonce
- NotFoundError       : a looked-up identifier (block height) is unknown
- IntegrityError      : a trusted collaborator returned a structurally broken answer
- PChainTimeoutError  : a bounded retry or poll ran out of attempts
- DomainError         : the transaction confirmed but its outcome is a failure
- RpcError            : HTTP/transport failure talking to the node
- CodecError          : bytes that do not decode as the expected wire type
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "PChainSdkError",
    "ValidationError",
    "NonceError",
    "NotFoundError",
    "IntegrityError",
    "PChainTimeoutError",
    "DomainError",
    "TransferFailedError",
    "RpcError",
    "CodecError",
]


class PChainSdkError(Exception):
    """Base class for all SDK errors."""


class ValidationError(PChainSdkError, ValueError):
    """Raised before any network I/O when an argument is out of bounds or malformed."""


class NonceError(PChainSdkError):
    """
    Raised when the node rejects a transaction because its nonce is stale or
    otherwise unacceptable. Never retried: fetch a fresh nonce and rebuild.
    """


class NotFoundError(PChainSdkError, LookupError):
    """Raised when an identifier the caller asked about (e.g. a block height) does not exist."""


class IntegrityError(PChainSdkError):
    """Raised when a node response violates an invariant it must always hold."""


class PChainTimeoutError(PChainSdkError, TimeoutError):
    """
    Raised when a bounded retry or poll exhausts its attempts.

    For confirmation this means the transaction's fate is still unknown, not
    that it failed.
    """

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class DomainError(PChainSdkError):
    """The transaction was accepted and confirmed, but did not do what was asked."""


@dataclass(slots=True)
class TransferFailedError(DomainError):
    """
    Raised by `transfer_token` when the confirmed receipt carries a non-success
    exit status.
    """

    tx_hash: Any
    exit_status: Any
    message: str = (
        "Transaction processed but token transfer failed, "
        "please check your parameters and try again"
    )

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.message} (tx={self.tx_hash}, exit_status={self.exit_status!r})"


@dataclass(slots=True)
class RpcError(PChainSdkError):
    """Raised when an RPC route answers with a non-2xx status or cannot be reached."""

    route: str
    message: str
    http_status: Optional[int] = None
    body: Optional[bytes] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[/{self.route}] {self.message}"]
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.body:
            parts.append(f"body={self.body[:128]!r}")
        return " ".join(parts)


class CodecError(PChainSdkError, ValueError):
    """Raised when bytes cannot be encoded to or decoded from a wire type."""
