from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from pchain_sdk.types.core import PublicAddress, Sha256Hash
from pchain_sdk.types.rpc import StateResponse
from pchain_sdk.wallet.keypair import Keypair

FIXTURES = Path(__file__).parent / "fixtures"

# Fixed 32-byte seed so signatures are reproducible across runs
SEED = bytes(range(1, 33))
ZERO_HASH = Sha256Hash(bytes(32))


def load_hex(name: str) -> bytes:
    return bytes.fromhex((FIXTURES / name).read_text().strip())


@pytest.fixture
def keypair() -> Keypair:
    return Keypair.from_private_key(SEED)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Replace asyncio.sleep with a recorder so poll/retry tests run instantly."""
    delays: List[float] = []

    async def _fake_sleep(delay: float, result: Any = None) -> Any:
        delays.append(delay)
        return result

    monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
    return delays


class FakeRpc:
    """
    In-memory stand-in for RpcClient. Each route answers from a queue of canned
    responses (or a callable); every request is recorded in `calls`.
    """

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.responses: Dict[str, List[Any]] = {}

    def queue(self, route: str, *responses: Any) -> "FakeRpc":
        self.responses.setdefault(route, []).extend(responses)
        return self

    async def _answer(self, route: str, request: Any = None) -> Any:
        self.calls.append((route, request))
        pending = self.responses.get(route)
        if not pending:
            raise AssertionError(f"unexpected call to /{route}")
        resp = pending[0] if len(pending) == 1 else pending.pop(0)
        if isinstance(resp, BaseException):
            raise resp
        if callable(resp):
            return resp(request)
        return resp

    def routes(self) -> List[str]:
        return [c[0] for c in self.calls]

    async def state(self, request):
        return await self._answer("state", request)

    async def block(self, request):
        return await self._answer("block", request)

    async def block_hash_by_height(self, request):
        return await self._answer("block_hash_by_height", request)

    async def highest_committed_block(self):
        return await self._answer("highest_committed_block")

    async def transaction(self, request):
        return await self._answer("transaction", request)

    async def receipt(self, request):
        return await self._answer("receipt", request)

    async def submit_transaction(self, request):
        return await self._answer("submit_transaction", request)

    async def view(self, request):
        return await self._answer("view", request)

    async def aclose(self) -> None:
        pass


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()


def state_with(address: PublicAddress, account: Optional[Any]) -> StateResponse:
    accounts = {} if account is None else {address: account}
    return StateResponse(accounts=accounts, storage_tuples={}, block_hash=ZERO_HASH)

