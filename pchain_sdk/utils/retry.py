"""
Bounded poll and bounded retry-with-backoff helpers.

Both are coroutines and suspend only at `asyncio.sleep` between attempts (never
before the first attempt, never after the last). Exhausting the attempt budget
raises `PChainTimeoutError`.

Example (poll)
--------------
from pchain_sdk.utils.retry import poll

resp = await poll(
    30, 6.0,
    lambda: rpc.receipt(req),
    lambda r: r.receipt is not None and r.block_hash is not None,
)

Example (retry)
---------------
from pchain_sdk.utils.retry import RETRY, retry_with_backoff

async def submit():
    resp = await rpc.submit_transaction(req)
    if resp.error is SubmitTransactionError.MEMPOOL_FULL:
        return RETRY
    return resp

resp = await retry_with_backoff(10, 0.5, 1.8, submit)

Notes
-----
- Only the `RETRY` sentinel triggers another attempt. Exceptions raised by the
  operation or probe propagate immediately.
- `on_retry` callback receives (attempt_index, sleep_seconds).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar, Union

from ..errors import PChainTimeoutError

__all__ = ["RETRY", "Retry", "poll", "retry_with_backoff"]

log = logging.getLogger(__name__)

T = TypeVar("T")


class Retry:
    """Type of the `RETRY` sentinel. There is exactly one instance."""

    __slots__ = ()
    _instance: Optional["Retry"] = None

    def __new__(cls) -> "Retry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "RETRY"

    def __bool__(self) -> bool:
        return False


RETRY = Retry()


def _check_budget(max_attempts: int, interval_s: float) -> None:
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if interval_s < 0:
        raise ValueError("interval must be >= 0")


async def poll(
    max_attempts: int,
    interval_s: float,
    probe: Callable[[], Awaitable[T]],
    is_done: Callable[[T], bool],
) -> T:
    """
    Await `probe()` up to `max_attempts` times, returning the first result for
    which `is_done(result)` is true. Sleeps `interval_s` between attempts.
    """
    _check_budget(max_attempts, interval_s)
    for attempt in range(1, max_attempts + 1):
        result = await probe()
        if is_done(result):
            return result
        if attempt < max_attempts:
            log.debug("poll: attempt %d/%d not done, sleeping %.3fs", attempt, max_attempts, interval_s)
            await asyncio.sleep(interval_s)
    raise PChainTimeoutError(
        f"poll exhausted after {max_attempts} attempts", attempts=max_attempts
    )


async def retry_with_backoff(
    max_attempts: int,
    initial_interval_s: float,
    backoff_multiplier: float,
    operation: Callable[[], Awaitable[Union[T, Retry]]],
    *,
    on_retry: Optional[Callable[[int, float], None]] = None,
) -> T:
    """
    Await `operation()` until it returns something other than `RETRY`.

    The wait after the n-th attempt is `initial_interval_s * backoff_multiplier**(n-1)`.
    """
    _check_budget(max_attempts, initial_interval_s)
    if backoff_multiplier <= 0:
        raise ValueError("backoff_multiplier must be > 0")

    interval = float(initial_interval_s)
    for attempt in range(1, max_attempts + 1):
        result = await operation()
        if result is not RETRY:
            return result  # type: ignore[return-value]
        if attempt == max_attempts:
            break
        log.debug("retry: attempt %d/%d asked to retry, sleeping %.3fs", attempt, max_attempts, interval)
        if on_retry is not None:
            on_retry(attempt, interval)
        await asyncio.sleep(interval)
        interval *= backoff_multiplier
    raise PChainTimeoutError(
        f"retry exhausted after {max_attempts} attempts", attempts=max_attempts
    )
