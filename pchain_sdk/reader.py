"""
pchain_sdk.reader
=================

Read-side queries over accounts, blocks and transactions.

Every method is one or two RPC round-trips against a single endpoint. Nothing
is cached and nothing is retried. Valid "not found" outcomes come back as
``None`` (or zero for balances and nonces); only structurally impossible node
answers raise `IntegrityError`.

    async with PChainReader("https://node.example/") as reader:
        balance = await reader.get_account_balance("mC23wtyCuuku5jK6AHnHmYPE3YHXaBh1WZbR3bOmMJQ")
        block = await reader.get_block(749315)
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .address import as_public_address, as_sha256_hash
from .errors import CodecError, IntegrityError, NotFoundError, ValidationError
from .rpc.http import DEFAULT_TIMEOUT, RpcClient
from .types.core import (Account, AccountWithContract, AccountWithoutContract,
                         AddressLike, Block, HashLike, Sha256Hash,
                         TransactionResult)
from .types.rpc import (BlockHashByHeightRequest, BlockRequest, StateRequest,
                        TransactionRequest)

__all__ = ["PChainReader"]

log = logging.getLogger(__name__)

BlockId = Union[int, HashLike]

MAX_BLOCK_HEIGHT = 2**64 - 1


class PChainReader:
    def __init__(
        self,
        endpoint: Optional[str] = None,
        *,
        client: Optional[RpcClient] = None,
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

    @property
    def client(self) -> RpcClient:
        return self._client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PChainReader":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ---------- accounts ----------

    async def get_account_balance(self, address: AddressLike) -> int:
        account = await self._get_account(address, include_contract=False)
        # no history means a fresh account
        return 0 if account is None else account.balance

    async def get_account_nonce(self, address: AddressLike) -> int:
        account = await self._get_account(address, include_contract=False)
        return 0 if account is None else account.nonce

    async def get_contract_code(self, address: AddressLike) -> Optional[bytes]:
        account = await self._get_account(address, include_contract=True)
        if account is None or not account.has_contract:
            return None
        return account.contract

    async def _get_account(self, address: AddressLike, include_contract: bool) -> Optional[Account]:
        addr = as_public_address(address)
        try:
            response = await self._client.state(
                StateRequest(
                    accounts=frozenset([addr]),
                    include_contract=include_contract,
                    storage_keys={},
                )
            )
        except CodecError as e:
            raise IntegrityError(f"Error fetching account: undecodable state response ({e})") from e
        if response.accounts is None:
            raise IntegrityError("Error fetching account: response carries no accounts")

        target = None
        for key, acct in response.accounts.items():
            if bytes(key) == bytes(addr):
                target = acct
                break
        if target is None:
            return None
        if not isinstance(target, (AccountWithContract, AccountWithoutContract)):
            raise IntegrityError(f"Error fetching account: malformed account entry for {addr}")
        return target

    # ---------- blocks ----------

    async def get_block(self, block_id: BlockId) -> Optional[Block]:
        """
        Fetch a block by height (int) or by hash (Sha256Hash, raw bytes or base64url text).

        Raises NotFoundError if a height is unknown to the node. Returns None if
        the hash lookup itself finds nothing.
        """
        if isinstance(block_id, bool):
            raise ValidationError("Invalid block identifier")
        if isinstance(block_id, int):
            if block_id < 0:
                raise ValidationError("block height cannot be negative")
            if block_id > MAX_BLOCK_HEIGHT:
                raise ValidationError(f"block height {block_id} exceeds u64 range")
            resp = await self._client.block_hash_by_height(BlockHashByHeightRequest(block_id))
            if resp.block_hash is None:
                raise NotFoundError(f"Unknown block number {block_id}")
            block_hash = resp.block_hash
        else:
            block_hash = as_sha256_hash(block_id)
        return await self._get_block_by_hash(block_hash)

    async def get_latest_committed_block(self) -> Block:
        resp = await self._client.highest_committed_block()
        if resp.block_hash is None:
            raise IntegrityError("Error fetching highest committed block")
        block = await self._get_block_by_hash(resp.block_hash)
        if block is None:
            raise IntegrityError("Error fetching highest committed block")
        return block

    async def _get_block_by_hash(self, block_hash: Sha256Hash) -> Optional[Block]:
        resp = await self._client.block(BlockRequest(block_hash))
        return resp.block

    # ---------- transactions ----------

    async def get_transaction(self, tx_hash: HashLike) -> Optional[TransactionResult]:
        h = as_sha256_hash(tx_hash)
        resp = await self._client.transaction(
            TransactionRequest(transaction_hash=h, include_receipt=True)
        )
        if (
            resp.transaction is None
            or resp.receipt is None
            or resp.block_hash is None
            or resp.position is None
        ):
            log.debug("get_transaction: %s incomplete or absent", h)
            return None
        return TransactionResult(
            transaction=resp.transaction,
            receipt=resp.receipt,
            block_hash=resp.block_hash,
            position=resp.position,
        )
