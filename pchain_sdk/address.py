"""
pchain_sdk.address
==================

Address parsing and contract address derivation.

Format
------
An address is 32 raw bytes (an Ed25519 public key for externally owned
accounts), written as unpadded base64url text.

A contract deployed by account `A` in the transaction with nonce `n` lives at:

    sha256(A || u64_le(n))

so its address can be computed before or after the Deploy command confirms.

This module provides:
- as_public_address(addr) -> PublicAddress
- as_sha256_hash(h) -> Sha256Hash
- derive_contract_address(deployer, nonce) -> PublicAddress
- is_valid(addr) -> bool
"""

from __future__ import annotations

import struct

from .errors import ValidationError
from .types.core import AddressLike, HashLike, PublicAddress, Sha256Hash
from .utils.hash import sha256

__all__ = [
    "as_public_address",
    "as_sha256_hash",
    "derive_contract_address",
    "is_valid",
]

_U64_MAX = (1 << 64) - 1


def as_public_address(addr: AddressLike) -> PublicAddress:
    """
    Normalize *addr* (base64url text, raw bytes or PublicAddress) to a PublicAddress.

    Raises ValidationError unless the result is exactly 32 bytes.
    """
    if isinstance(addr, PublicAddress):
        return addr
    if isinstance(addr, str):
        return PublicAddress.from_base64url(addr)
    if isinstance(addr, (bytes, bytearray, memoryview)):
        return PublicAddress(bytes(addr))
    raise ValidationError(f"unsupported address type: {type(addr).__name__}")


def as_sha256_hash(h: HashLike) -> Sha256Hash:
    if isinstance(h, Sha256Hash):
        return h
    if isinstance(h, str):
        return Sha256Hash.from_base64url(h)
    if isinstance(h, (bytes, bytearray, memoryview)):
        return Sha256Hash(bytes(h))
    raise ValidationError(f"unsupported hash type: {type(h).__name__}")


def derive_contract_address(deployer: AddressLike, nonce: int) -> PublicAddress:
    if not isinstance(nonce, int) or isinstance(nonce, bool):
        raise ValidationError(f"nonce must be an int, got {type(nonce).__name__}")
    if nonce < 0:
        raise ValidationError("Cannot compute contract address with invalid nonce")
    if nonce > _U64_MAX:
        raise ValidationError("nonce does not fit in 64 bits")
    pre_image = bytes(as_public_address(deployer)) + struct.pack("<Q", nonce)
    return PublicAddress(sha256(pre_image))


def is_valid(addr: object) -> bool:
    try:
        as_public_address(addr)  # type: ignore[arg-type]
    except ValidationError:
        return False
    return True
