"""
pchain_sdk.writer
=================

Write-side operations: submit signed transactions, wait for them to be
confirmed, and a few convenience flows on top (token transfer, contract view
and contract state-changing calls).

Submission policy
-----------------
`submit_transaction` retries only while the node reports its mempool full
(10 attempts, 0.5 s first wait, x1.8 per retry). An unacceptable nonce raises
`NonceError`, any other rejection raises `ValidationError`.

Confirmation policy
-------------------
`submit_and_confirm_transaction` polls the receipt route every 6 s, 30 times
(a 180 s window). `PChainTimeoutError` from the poll means the transaction is
still pending, not that it failed.

Nonces are read fresh for every convenience call and are not coordinated
across concurrent callers sharing a signer; a lost race surfaces as
`NonceError`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union, cast

from .address import as_public_address
from .errors import (IntegrityError, NonceError, TransferFailedError,
                     ValidationError)
from .reader import PChainReader
from .rpc.http import DEFAULT_TIMEOUT, RpcClient
from .tx.build import DEFAULT_GAS_LIMIT, TransactionBuilder
from .types.core import (AddressLike, Call, CommandReceipt, ExitStatus,
                         Receipt, Sha256Hash, SignedTx, Transfer)
from .types.rpc import (ReceiptRequest, ReceiptResponse,
                        SubmitTransactionError, SubmitTransactionRequest,
                        SubmitTransactionResponse, ViewRequest)
from .utils.retry import RETRY, Retry, poll, retry_with_backoff
from .wallet.keypair import Keypair

__all__ = [
    "PChainWriter",
    "SUBMIT_MAX_ATTEMPTS",
    "SUBMIT_INITIAL_INTERVAL_S",
    "SUBMIT_BACKOFF_MULTIPLIER",
    "CONFIRM_MAX_ATTEMPTS",
    "CONFIRM_INTERVAL_S",
]

log = logging.getLogger(__name__)

SUBMIT_MAX_ATTEMPTS = 10
SUBMIT_INITIAL_INTERVAL_S = 0.5
SUBMIT_BACKOFF_MULTIPLIER = 1.8

CONFIRM_MAX_ATTEMPTS = 30
CONFIRM_INTERVAL_S = 6.0

Arguments = Optional[Sequence[bytes]]


def _args_tuple(args: Arguments):
    return tuple(bytes(a) for a in args) if args is not None else None


class PChainWriter:
    def __init__(
        self,
        endpoint: Optional[str] = None,
        *,
        client: Optional[RpcClient] = None,
        reader: Optional[PChainReader] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if client is None:
            if not endpoint:
                raise ValueError("either endpoint or client is required")
            client = RpcClient(endpoint, timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client
        self._reader = reader if reader is not None else PChainReader(client=client)

    @property
    def client(self) -> RpcClient:
        return self._client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PChainWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ---------- submission ----------

    async def submit_transaction(self, signed_tx: SignedTx) -> Sha256Hash:
        """Submit *signed_tx* to the mempool and return its hash once accepted."""
        request = SubmitTransactionRequest(signed_tx)

        async def _attempt() -> Union[Sha256Hash, Retry]:
            response: SubmitTransactionResponse = await self._client.submit_transaction(request)
            error = response.error
            if error is None:
                return signed_tx.hash
            if error == SubmitTransactionError.MEMPOOL_FULL:
                log.info("submit: mempool full, will retry tx=%s", signed_tx.hash)
                return RETRY
            if error == SubmitTransactionError.UNACCEPTABLE_NONCE:
                raise NonceError(
                    f"Nonce {signed_tx.nonce} is no longer valid for {signed_tx.signer}, "
                    "fetch a fresh nonce and rebuild"
                )
            raise ValidationError(f"Error with transaction payload ({error.name}), please check and retry")

        tx_hash = await retry_with_backoff(
            SUBMIT_MAX_ATTEMPTS,
            SUBMIT_INITIAL_INTERVAL_S,
            SUBMIT_BACKOFF_MULTIPLIER,
            _attempt,
        )
        log.info("submit: accepted tx=%s", tx_hash)
        return tx_hash

    async def submit_and_confirm_transaction(self, signed_tx: SignedTx) -> Receipt:
        """Submit *signed_tx*, then wait until it is included in a committed block."""
        tx_hash = await self.submit_transaction(signed_tx)
        log.info("confirm: waiting for tx=%s", tx_hash)
        request = ReceiptRequest(tx_hash)

        def _confirmed(resp: ReceiptResponse) -> bool:
            return resp.block_hash is not None and resp.receipt is not None

        result = await poll(
            CONFIRM_MAX_ATTEMPTS,
            CONFIRM_INTERVAL_S,
            lambda: self._client.receipt(request),
            _confirmed,
        )
        log.info("confirm: tx=%s included in block=%s", tx_hash, result.block_hash)
        return cast(Receipt, result.receipt)

    # ---------- convenience ----------

    async def call_contract_view(
        self,
        address: AddressLike,
        method: str,
        args: Arguments = None,
    ) -> CommandReceipt:
        """Simulate a call without a transaction. Inspect the exit status yourself."""
        request = ViewRequest(
            target=as_public_address(address),
            method=method,
            arguments=_args_tuple(args),
        )
        response = await self._client.view(request)
        return response.receipt

    async def call_contract_state_change(
        self,
        address: AddressLike,
        method: str,
        args: Arguments,
        amount: Optional[int],
        keypair: Keypair,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> CommandReceipt:
        target = as_public_address(address)
        nonce = await self._reader.get_account_nonce(keypair.address)
        signed_tx = (
            TransactionBuilder(keypair, nonce)
            .add_command(Call(target=target, method=method, arguments=_args_tuple(args), amount=amount))
            .set_gas_limit(gas_limit)
            .build()
        )
        receipt = await self.submit_and_confirm_transaction(signed_tx)
        return _first_command_receipt(receipt, signed_tx)

    async def transfer_token(
        self,
        to_address: AddressLike,
        amount: int,
        keypair: Keypair,
    ) -> Sha256Hash:
        recipient = as_public_address(to_address)
        nonce = await self._reader.get_account_nonce(keypair.address)
        signed_tx = (
            TransactionBuilder(keypair, nonce)
            .add_command(Transfer(recipient=recipient, amount=amount))
            .build()
        )
        receipt = await self.submit_and_confirm_transaction(signed_tx)
        command_receipt = _first_command_receipt(receipt, signed_tx)
        if command_receipt.exit_status == ExitStatus.SUCCESS:
            return signed_tx.hash
        raise TransferFailedError(tx_hash=signed_tx.hash, exit_status=command_receipt.exit_status)


def _first_command_receipt(receipt: Receipt, signed_tx: SignedTx) -> CommandReceipt:
    if len(receipt) == 0:
        raise IntegrityError(f"confirmed receipt for tx={signed_tx.hash} has no command receipts")
    return receipt[0]
