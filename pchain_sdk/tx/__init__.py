"""
pchain_sdk.tx
=============

Transaction helpers: build and sign.

Submodules
----------
- build : fluent `TransactionBuilder` enforcing the fee/gas bounds.
- encode: sign-bytes, hashing, signing and signature verification.

Typical usage
-------------
    from pchain_sdk.tx import TransactionBuilder

    signed = TransactionBuilder(keypair, nonce).add_command(cmd).build()
    # then: await writer.submit_and_confirm_transaction(signed)
"""

from __future__ import annotations

from . import build as build
from . import encode as encode
from .build import (DEFAULT_GAS_LIMIT, MAX_GAS_LIMIT, MIN_BASE_FEE_PER_GAS,
                    TransactionBuilder)
from .encode import sign_transaction, verify_signature

__all__ = [
    "build",
    "encode",
    "TransactionBuilder",
    "MIN_BASE_FEE_PER_GAS",
    "MAX_GAS_LIMIT",
    "DEFAULT_GAS_LIMIT",
    "sign_transaction",
    "verify_signature",
]
