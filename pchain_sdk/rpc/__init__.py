"""
pchain_sdk.rpc
--------------

Async client for the node's binary RPC routes (see .http).

    from pchain_sdk.rpc import RpcClient

    async with RpcClient("https://node.example/") as rpc:
        ...
"""

from __future__ import annotations

from .http import RpcClient

__all__ = ["RpcClient"]
