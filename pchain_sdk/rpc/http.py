"""
Binary RPC client for a ParallelChain fullnode (async).

Every route is `POST {url}/{route}` with a Borsh-encoded body
(`application/octet-stream`) answered by a Borsh-encoded response; the one
exception is `highest_committed_block`, which is a bodiless GET.

The client does not retry. Read calls surface failures to the caller, and the
writer applies its own submission policy on top.

Example:
    from pchain_sdk.rpc.http import RpcClient
    from pchain_sdk.types.rpc import BlockHashByHeightRequest

    async with RpcClient("https://node.example/") as rpc:
        resp = await rpc.block_hash_by_height(BlockHashByHeightRequest(100))
        print(resp.block_hash)
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Type, TypeVar

import httpx

from ..errors import CodecError, RpcError
from ..types.rpc import (BlockHashByHeightRequest, BlockHashByHeightResponse,
                         BlockRequest, BlockResponse,
                         HighestCommittedBlockResponse, ReceiptRequest,
                         ReceiptResponse, StateRequest, StateResponse,
                         SubmitTransactionRequest, SubmitTransactionResponse,
                         TransactionRequest, TransactionResponse, ViewRequest,
                         ViewResponse)
from ..version import USER_AGENT

__all__ = ["RpcClient", "DEFAULT_TIMEOUT"]

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
OCTET_STREAM = "application/octet-stream"

R = TypeVar("R")


def _build_headers(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    hdrs = {
        "content-type": OCTET_STREAM,
        "accept": OCTET_STREAM,
        "user-agent": USER_AGENT,
    }
    if extra:
        hdrs.update(extra)
    return hdrs


class RpcClient:
    """Async client for the node's binary RPC routes."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not url:
            raise ValueError("RPC url is required")
        self.url = url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=_build_headers(headers),
            transport=transport,
        )

    # ---------- lifecycle ----------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ---------- core transport ----------

    async def _send(self, method: str, route: str, body: Optional[bytes] = None) -> bytes:
        url = f"{self.url}/{route}"
        try:
            if method == "GET":
                resp = await self._client.get(url)
            else:
                resp = await self._client.post(url, content=body or b"")
        except httpx.HTTPError as exc:
            raise RpcError(route=route, message=f"transport error: {exc}") from exc

        if not resp.is_success:
            raise RpcError(
                route=route,
                message=resp.reason_phrase or "HTTP error",
                http_status=resp.status_code,
                body=resp.content,
            )
        log.debug("rpc: %s /%s -> %d bytes", method, route, len(resp.content))
        return resp.content

    async def _call(self, route: str, request, response_type: Type[R]) -> R:
        raw = await self._send("POST", route, request.serialize())
        return self._decode(route, raw, response_type)

    @staticmethod
    def _decode(route: str, raw: bytes, response_type: Type[R]) -> R:
        try:
            return response_type.deserialize(raw)  # type: ignore[attr-defined]
        except CodecError as exc:
            raise CodecError(f"/{route}: cannot decode {response_type.__name__}: {exc}") from exc

    # ---------- routes ----------

    async def state(self, request: StateRequest) -> StateResponse:
        return await self._call("state", request, StateResponse)

    async def block(self, request: BlockRequest) -> BlockResponse:
        return await self._call("block", request, BlockResponse)

    async def block_hash_by_height(
        self, request: BlockHashByHeightRequest
    ) -> BlockHashByHeightResponse:
        return await self._call("block_hash_by_height", request, BlockHashByHeightResponse)

    async def highest_committed_block(self) -> HighestCommittedBlockResponse:
        raw = await self._send("GET", "highest_committed_block")
        return self._decode("highest_committed_block", raw, HighestCommittedBlockResponse)

    async def transaction(self, request: TransactionRequest) -> TransactionResponse:
        return await self._call("transaction", request, TransactionResponse)

    async def receipt(self, request: ReceiptRequest) -> ReceiptResponse:
        return await self._call("receipt", request, ReceiptResponse)

    async def submit_transaction(
        self, request: SubmitTransactionRequest
    ) -> SubmitTransactionResponse:
        return await self._call("submit_transaction", request, SubmitTransactionResponse)

    async def view(self, request: ViewRequest) -> ViewResponse:
        return await self._call("view", request, ViewResponse)
