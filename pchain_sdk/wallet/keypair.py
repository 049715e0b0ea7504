"""
pchain_sdk.wallet.keypair
=========================

Ed25519 keypairs for signing ParallelChain transactions.

Accounts are identified by their raw 32-byte Ed25519 public key, so a
keypair's :attr:`Keypair.address` is just the public key wrapped as a
:class:`~pchain_sdk.types.core.PublicAddress`.

Notes
-----
- The public key given to the constructor is kept as-is and never re-derived
  from the private key. A mismatched pair therefore signs with one key and
  claims another, which the transaction builder's verify step catches.
- Private keys are 32-byte seeds. 64-byte "secret keys" (seed || public key)
  as produced by NaCl-style tooling are accepted and truncated to the seed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey, Ed25519PublicKey)

from ..errors import ValidationError
from ..types.core import PublicAddress
from ..utils.bytes import BytesLike, b64url_decode, b64url_encode

__all__ = ["Keypair", "verify_ed25519"]

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32


def _raw_public(pk: Ed25519PublicKey) -> bytes:
    return pk.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _load_private(private_key: BytesLike) -> Ed25519PrivateKey:
    raw = bytes(private_key)
    if len(raw) == 2 * SEED_LENGTH:
        raw = raw[:SEED_LENGTH]
    if len(raw) != SEED_LENGTH:
        raise ValidationError(f"Ed25519 private key must be 32 or 64 bytes, got {len(raw)}")
    return Ed25519PrivateKey.from_private_bytes(raw)


@dataclass(frozen=True)
class Keypair:
    public_key: bytes
    private_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        pub = bytes(self.public_key)
        if len(pub) != PUBLIC_KEY_LENGTH:
            raise ValidationError(f"Ed25519 public key must be 32 bytes, got {len(pub)}")
        object.__setattr__(self, "public_key", pub)
        object.__setattr__(self, "private_key", bytes(self.private_key))
        # fail early on an unusable seed
        _load_private(self.private_key)

    # ---- constructors ---------------------------------------------------------

    @classmethod
    def generate(cls) -> "Keypair":
        sk = Ed25519PrivateKey.generate()
        seed = sk.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return cls(_raw_public(sk.public_key()), seed)

    @classmethod
    def from_private_key(cls, private_key: BytesLike) -> "Keypair":
        """Derive the public key from a 32-byte seed (or 64-byte secret key)."""
        sk = _load_private(private_key)
        return cls(_raw_public(sk.public_key()), bytes(private_key))

    @classmethod
    def from_base64url(cls, public_key: str, private_key: str) -> "Keypair":
        try:
            return cls(b64url_decode(public_key), b64url_decode(private_key))
        except ValueError as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"invalid base64url key material: {e}") from e

    # ---- properties -----------------------------------------------------------

    @property
    def address(self) -> PublicAddress:
        return PublicAddress(self.public_key)

    def public_key_base64url(self) -> str:
        return b64url_encode(self.public_key)

    # ---- operations -----------------------------------------------------------

    def sign(self, message: BytesLike) -> bytes:
        """Return the 64-byte Ed25519 signature over *message*."""
        return _load_private(self.private_key).sign(bytes(message))

    def verify(self, message: BytesLike, signature: BytesLike) -> bool:
        return verify_ed25519(self.public_key, message, signature)


def verify_ed25519(public_key: BytesLike, message: BytesLike, signature: BytesLike) -> bool:
    """Return True iff *signature* is a valid Ed25519 signature of *message* under *public_key*."""
    try:
        pk = Ed25519PublicKey.from_public_bytes(bytes(public_key))
        pk.verify(bytes(signature), bytes(message))
    except (InvalidSignature, ValueError):
        return False
    return True
