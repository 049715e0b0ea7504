"""
pchain_sdk.tx.encode
====================

Signing and hashing for ParallelChain transactions.

- `sign_bytes(tx)` → the bytes an Ed25519 signature covers
- `tx_hash(signature)` → the transaction hash, SHA-256 of the signature
- `sign_transaction(tx, keypair)` → a `SignedTx` with signature and hash filled in
- `verify_signature(signed_tx, public_key)` → re-check a `SignedTx`

The signed message is the Borsh encoding of the full SignedTx layout with the
signature (64 bytes) and hash (32 bytes) zeroed, so the signer, nonce, fees and
the ordered command list are all covered.
"""

from __future__ import annotations

from typing import Optional

from ..types.core import SignedTx, Sha256Hash, Transaction
from ..utils.bytes import BytesLike
from ..utils.hash import sha256
from ..wallet.keypair import Keypair, verify_ed25519

__all__ = ["sign_bytes", "tx_hash", "sign_transaction", "verify_signature"]


def sign_bytes(tx: Transaction) -> bytes:
    return tx.signing_bytes()


def tx_hash(signature: BytesLike) -> Sha256Hash:
    return Sha256Hash(sha256(signature))


def sign_transaction(tx: Transaction, keypair: Keypair) -> SignedTx:
    signature = keypair.sign(sign_bytes(tx))
    return SignedTx(transaction=tx, signature=signature, hash=tx_hash(signature))


def verify_signature(signed_tx: SignedTx, public_key: Optional[BytesLike] = None) -> bool:
    """
    Verify *signed_tx* against *public_key* (defaults to the transaction's signer).

    Also checks that the stored hash matches the signature.
    """
    pk = bytes(public_key) if public_key is not None else bytes(signed_tx.transaction.signer)
    if tx_hash(signed_tx.signature) != signed_tx.hash:
        return False
    return verify_ed25519(pk, sign_bytes(signed_tx.transaction), signed_tx.signature)
