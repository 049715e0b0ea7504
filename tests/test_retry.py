from __future__ import annotations

import pytest

from pchain_sdk.errors import PChainTimeoutError
from pchain_sdk.utils.retry import RETRY, poll, retry_with_backoff


class Counter:
    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.results[min(self.calls, len(self.results)) - 1]


@pytest.mark.asyncio
async def test_poll_never_done_probes_exactly_max_attempts(sleeps):
    probe = Counter([None])
    with pytest.raises(PChainTimeoutError) as ei:
        await poll(3, 6.0, probe, lambda r: r is not None)
    assert probe.calls == 3
    assert ei.value.attempts == 3
    # waits only between attempts
    assert sleeps == [6.0, 6.0]


@pytest.mark.asyncio
async def test_poll_returns_on_second_attempt(sleeps):
    probe = Counter([None, "receipt", "later"])
    result = await poll(3, 0.25, probe, lambda r: r is not None)
    assert result == "receipt"
    assert probe.calls == 2
    assert sleeps == [0.25]


@pytest.mark.asyncio
async def test_poll_first_attempt_is_immediate(sleeps):
    probe = Counter(["done"])
    assert await poll(5, 1.0, probe, lambda r: True) == "done"
    assert sleeps == []


@pytest.mark.asyncio
async def test_poll_propagates_probe_errors(sleeps):
    async def boom():
        raise RuntimeError("rpc down")

    with pytest.raises(RuntimeError, match="rpc down"):
        await poll(3, 1.0, boom, lambda r: True)
    assert sleeps == []


@pytest.mark.asyncio
async def test_retry_backoff_schedule_then_timeout(sleeps):
    op = Counter([RETRY])
    with pytest.raises(PChainTimeoutError):
        await retry_with_backoff(4, 0.1, 2, op)
    assert op.calls == 4
    assert sleeps == pytest.approx([0.1, 0.2, 0.4])


@pytest.mark.asyncio
async def test_retry_returns_first_non_sentinel(sleeps):
    op = Counter([RETRY, RETRY, "hash"])
    assert await retry_with_backoff(10, 0.5, 1.8, op) == "hash"
    assert op.calls == 3
    assert sleeps == pytest.approx([0.5, 0.9])


@pytest.mark.asyncio
async def test_retry_falsy_results_are_not_retried(sleeps):
    for value in (None, 0, b"", False):
        op = Counter([value])
        assert await retry_with_backoff(3, 0.1, 2, op) == value
        assert op.calls == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_retry_other_errors_propagate_without_retry(sleeps):
    calls = 0

    async def op():
        nonlocal calls
        calls += 1
        raise ValueError("fatal")

    with pytest.raises(ValueError, match="fatal"):
        await retry_with_backoff(5, 0.1, 2, op)
    assert calls == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_retry_on_retry_callback(sleeps):
    seen = []
    op = Counter([RETRY, "ok"])
    await retry_with_backoff(3, 0.5, 3, op, on_retry=lambda i, s: seen.append((i, s)))
    assert seen == [(1, 0.5)]


@pytest.mark.asyncio
async def test_budget_validation():
    async def op():
        return 1

    with pytest.raises(ValueError):
        await poll(0, 1.0, op, lambda r: True)
    with pytest.raises(ValueError):
        await retry_with_backoff(1, -1.0, 2, op)


def test_timeout_error_is_builtin_timeout():
    err = PChainTimeoutError("x", attempts=2)
    assert isinstance(err, TimeoutError)
    assert str(err) == "x"
