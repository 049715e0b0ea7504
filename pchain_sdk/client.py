"""
pchain_sdk.client
=================

`PChain` bundles a reader and a writer over one shared RPC connection pool.

    from pchain_sdk import PChain, Keypair

    async with PChain("https://node.example/") as chain:
        nonce = await chain.get_account_nonce(keypair.address)
        signed = chain.build_transaction(keypair, nonce).add_command(cmd).build()
        receipt = await chain.submit_and_confirm_transaction(signed)
"""

from __future__ import annotations

from typing import Optional

from .address import derive_contract_address
from .reader import BlockId, PChainReader
from .rpc.http import DEFAULT_TIMEOUT, RpcClient
from .tx.build import DEFAULT_GAS_LIMIT, TransactionBuilder
from .types.core import (AddressLike, Block, CommandReceipt, HashLike,
                         PublicAddress, Receipt, Sha256Hash, SignedTx,
                         TransactionResult)
from .wallet.keypair import Keypair
from .writer import Arguments, PChainWriter

__all__ = ["PChain"]


class PChain:
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
        self.reader = PChainReader(client=client)
        self.writer = PChainWriter(client=client, reader=self.reader)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PChain":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # READER

    async def get_account_balance(self, address: AddressLike) -> int:
        return await self.reader.get_account_balance(address)

    async def get_account_nonce(self, address: AddressLike) -> int:
        return await self.reader.get_account_nonce(address)

    async def get_contract_code(self, address: AddressLike) -> Optional[bytes]:
        return await self.reader.get_contract_code(address)

    async def get_block(self, block_id: BlockId) -> Optional[Block]:
        return await self.reader.get_block(block_id)

    async def get_latest_committed_block(self) -> Block:
        return await self.reader.get_latest_committed_block()

    async def get_transaction(self, tx_hash: HashLike) -> Optional[TransactionResult]:
        return await self.reader.get_transaction(tx_hash)

    # WRITER

    async def submit_transaction(self, signed_tx: SignedTx) -> Sha256Hash:
        return await self.writer.submit_transaction(signed_tx)

    async def submit_and_confirm_transaction(self, signed_tx: SignedTx) -> Receipt:
        return await self.writer.submit_and_confirm_transaction(signed_tx)

    async def transfer_token(self, to_address: AddressLike, amount: int, keypair: Keypair) -> Sha256Hash:
        return await self.writer.transfer_token(to_address, amount, keypair)

    async def call_contract_view(
        self, address: AddressLike, method: str, args: Arguments = None
    ) -> CommandReceipt:
        return await self.writer.call_contract_view(address, method, args)

    async def call_contract_state_change(
        self,
        address: AddressLike,
        method: str,
        args: Arguments,
        amount: Optional[int],
        keypair: Keypair,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> CommandReceipt:
        return await self.writer.call_contract_state_change(
            address, method, args, amount, keypair, gas_limit
        )

    # Builders

    def build_transaction(self, keypair: Keypair, nonce: int) -> TransactionBuilder:
        return TransactionBuilder(keypair, nonce)

    def build_contract_address(self, address: AddressLike, nonce: int) -> PublicAddress:
        return derive_contract_address(address, nonce)
