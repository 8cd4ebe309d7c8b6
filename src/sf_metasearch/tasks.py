"""Concurrent branches that settle independently."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx

from sf_metasearch.errors import TokenExpiredError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Branch(Generic[T]):
    """One independent unit of remote work.

    `timeout` bounds the whole branch; on expiry only this branch is cancelled.
    """

    name: str
    run: Callable[[], Awaitable[list[T]]]
    timeout: float | None = None


async def run_branches(
    branches: Sequence[Branch[T]],
    *,
    log: logging.Logger | logging.LoggerAdapter | None = None,
    concurrency: int | None = None,
) -> list[list[T]]:
    """Run branches concurrently and wait until every one has settled.

    Returns one list per branch, in the order the branches were given. A
    branch that times out or fails yields an empty list. TokenExpiredError is
    re-raised once all branches have settled.
    """
    log = log or logger
    semaphore = asyncio.Semaphore(concurrency) if concurrency else None

    async def attempt(branch: Branch[T]) -> list[T]:
        if branch.timeout is None:
            return await branch.run()
        return await asyncio.wait_for(branch.run(), branch.timeout)

    async def settle(branch: Branch[T]) -> list[T]:
        started = time.perf_counter()
        try:
            if semaphore is None:
                items = await attempt(branch)
            else:
                async with semaphore:
                    items = await attempt(branch)
        except TokenExpiredError:
            _log_outcome(log, logging.WARNING, branch.name, started, "auth_expired", 0)
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException):
            _log_outcome(log, logging.WARNING, branch.name, started, "timeout", 0)
            return []
        except Exception as exc:
            _log_outcome(log, logging.WARNING, branch.name, started, "error", 0, error=exc)
            return []

        _log_outcome(log, logging.DEBUG, branch.name, started, "ok", len(items))
        return items

    settled = await asyncio.gather(*(settle(branch) for branch in branches), return_exceptions=True)

    for outcome in settled:
        if isinstance(outcome, BaseException):
            raise outcome
    return settled


def _log_outcome(
    log: logging.Logger | logging.LoggerAdapter,
    level: int,
    name: str,
    started: float,
    outcome: str,
    results: int,
    error: Exception | None = None,
) -> None:
    duration_ms = int((time.perf_counter() - started) * 1000)
    message = "branch %s settled: %s in %dms (%d results)"
    args: tuple = (name, outcome, duration_ms, results)
    if error is not None:
        message += ": %r"
        args += (error,)
    log.log(
        level,
        message,
        *args,
        extra={"branch": name, "duration_ms": duration_ms, "outcome": outcome, "results": results},
    )
