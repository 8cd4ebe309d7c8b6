"""Tests for concurrent branch execution."""

import asyncio
import logging

import httpx
import pytest

from sf_metasearch.errors import ApiError, TokenExpiredError
from sf_metasearch.tasks import Branch, run_branches


def returning(items, delay=0.0):
    async def run():
        await asyncio.sleep(delay)
        return items

    return run


def raising(exc, delay=0.0):
    async def run():
        await asyncio.sleep(delay)
        raise exc

    return run


@pytest.mark.asyncio
async def test_results_follow_declaration_order():
    """Branch output order does not depend on completion order."""
    branches = [
        Branch("slow", returning(["a"], delay=0.05)),
        Branch("fast", returning(["b"])),
        Branch("medium", returning(["c"], delay=0.02)),
    ]

    assert await run_branches(branches) == [["a"], ["b"], ["c"]]


@pytest.mark.asyncio
async def test_timeout_only_cancels_its_branch():
    cancelled = asyncio.Event()

    async def hang():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return ["never"]

    branches = [
        Branch("hangs", hang, timeout=0.05),
        Branch("ok", returning(["x"], delay=0.1), timeout=1.0),
    ]

    assert await run_branches(branches) == [[], ["x"]]
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_transport_timeout_yields_empty():
    request = httpx.Request("GET", "https://example.com")
    branches = [
        Branch("times-out", raising(httpx.ReadTimeout("timed out", request=request))),
        Branch("ok", returning([1])),
    ]

    assert await run_branches(branches) == [[], [1]]


@pytest.mark.asyncio
async def test_failures_are_isolated_and_logged(caplog):
    branches = [
        Branch("broken", raising(ApiError(500, "boom"))),
        Branch("ok", returning([1, 2])),
    ]

    log = logging.getLogger("tests.branches")

    with caplog.at_level(logging.DEBUG, logger="tests.branches"):
        assert await run_branches(branches, log=log) == [[], [1, 2]]

    outcomes = {record.branch: record.outcome for record in caplog.records if hasattr(record, "branch")}
    assert outcomes == {"broken": "error", "ok": "ok"}


@pytest.mark.asyncio
async def test_token_expiry_propagates_after_siblings_settle():
    finished = []

    async def sibling():
        await asyncio.sleep(0.05)
        finished.append("sibling")
        return ["x"]

    branches = [
        Branch("expired", raising(TokenExpiredError())),
        Branch("sibling", sibling),
    ]

    with pytest.raises(TokenExpiredError):
        await run_branches(branches)
    assert finished == ["sibling"]


@pytest.mark.asyncio
async def test_concurrency_limit():
    running = 0
    peak = 0

    async def work():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return [1]

    results = await run_branches([Branch(str(n), work) for n in range(9)], concurrency=3)

    assert results == [[1]] * 9
    assert peak == 3


@pytest.mark.asyncio
async def test_no_branches():
    assert await run_branches([]) == []
