"""
pchain_sdk.tx.build
===================

Fluent builder for signed ParallelChain transactions.

    from pchain_sdk.tx.build import TransactionBuilder
    from pchain_sdk.types.core import Transfer

    signed = (
        TransactionBuilder(keypair, nonce)
        .add_command(Transfer(recipient, 100))
        .set_gas_limit(500_000)
        .build()
    )

Fee/gas bounds
--------------
- gas limit defaults to 300_000 (enough for a plain transfer) and may not
  exceed MAX_GAS_LIMIT
- max base fee per gas defaults to, and may not go below, MIN_BASE_FEE_PER_GAS
- priority fee per gas defaults to 0 and is not bounded

`build()` signs, then verifies its own signature before handing the transaction
back; a keypair whose halves do not match raises `IntegrityError`.
"""

from __future__ import annotations

import logging
from typing import List

from ..errors import IntegrityError, ValidationError
from ..types.core import USER_COMMAND_TYPES, Command, SignedTx, Transaction
from ..wallet.keypair import Keypair
from .encode import sign_transaction, verify_signature

__all__ = [
    "MIN_BASE_FEE_PER_GAS",
    "MAX_GAS_LIMIT",
    "DEFAULT_GAS_LIMIT",
    "DEFAULT_PRIORITY_FEE_PER_GAS",
    "TransactionBuilder",
]

log = logging.getLogger(__name__)

MIN_BASE_FEE_PER_GAS = 8
MAX_GAS_LIMIT = 250_000_000
DEFAULT_GAS_LIMIT = 300_000
DEFAULT_PRIORITY_FEE_PER_GAS = 0


def _check_amount(name: str, amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError(f"{name} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValidationError(f"{name} cannot be negative")
    return amount


class TransactionBuilder:
    def __init__(self, keypair: Keypair, nonce: int) -> None:
        self._keypair = keypair
        self._nonce = _check_amount("nonce", nonce)
        self._commands: List[Command] = []
        self._gas_limit = DEFAULT_GAS_LIMIT
        self._max_base_fee_per_gas = MIN_BASE_FEE_PER_GAS
        self._priority_fee_per_gas = DEFAULT_PRIORITY_FEE_PER_GAS

    # ---- accumulators -----------------------------------------------------------

    def add_command(self, command: Command) -> "TransactionBuilder":
        if not isinstance(command, USER_COMMAND_TYPES):
            raise ValidationError(f"unsupported command type: {type(command).__name__}")
        self._commands.append(command)
        return self

    def set_gas_limit(self, amount: int) -> "TransactionBuilder":
        _check_amount("gas limit", amount)
        if amount > MAX_GAS_LIMIT:
            raise ValidationError(f"Gas limit cannot be greater than {MAX_GAS_LIMIT}")
        self._gas_limit = amount
        return self

    def set_max_base_fee_per_gas(self, amount: int) -> "TransactionBuilder":
        _check_amount("max base fee per gas", amount)
        if amount < MIN_BASE_FEE_PER_GAS:
            raise ValidationError(f"Base fee per gas cannot be less than {MIN_BASE_FEE_PER_GAS}")
        self._max_base_fee_per_gas = amount
        return self

    def set_priority_fee_per_gas(self, amount: int) -> "TransactionBuilder":
        self._priority_fee_per_gas = _check_amount("priority fee per gas", amount)
        return self

    # ---- read-only views ----------------------------------------------------------

    @property
    def commands(self) -> tuple:
        return tuple(self._commands)

    @property
    def gas_limit(self) -> int:
        return self._gas_limit

    @property
    def max_base_fee_per_gas(self) -> int:
        return self._max_base_fee_per_gas

    @property
    def priority_fee_per_gas(self) -> int:
        return self._priority_fee_per_gas

    # ---- build --------------------------------------------------------------------

    def build(self) -> SignedTx:
        if not self._commands:
            raise ValidationError("Transaction needs to include at least one command")

        tx = Transaction(
            signer=self._keypair.address,
            nonce=self._nonce,
            commands=tuple(self._commands),
            gas_limit=self._gas_limit,
            max_base_fee_per_gas=self._max_base_fee_per_gas,
            priority_fee_per_gas=self._priority_fee_per_gas,
        )
        signed = sign_transaction(tx, self._keypair)
        if not verify_signature(signed, self._keypair.public_key):
            raise IntegrityError("Unable to sign transaction with keypair, keypair possibly invalid")
        log.debug(
            "build: signer=%s nonce=%d commands=%d hash=%s",
            tx.signer, tx.nonce, len(tx.commands), signed.hash,
        )
        return signed
