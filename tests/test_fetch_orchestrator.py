"""
Fetch Orchestrator Test Suite

Coverage:
  - positional ordering independent of completion order
  - all-or-nothing failure after every fetch has settled
  - not-found blocks surface as FetchError naming the identifier
  - cancellation of the caller propagates
"""

import asyncio

import pytest

from conftest import MemoryBlockSource, UPSTREAM_DOWN

from blockql.exceptions import FetchError
from blockql.selection import FetchOrchestrator, ResolvedRange


def resolved(*identifiers, max_size=100):
    return ResolvedRange(identifiers=tuple(identifiers), max_size=max_size)


class TestOrdering:

    @pytest.mark.asyncio
    async def test_output_follows_input_not_completion(self):
        source = MemoryBlockSource(delays={5: 0.06, 3: 0.03, 9: 0.0})
        blocks = await FetchOrchestrator(source).fetch(resolved(5, 3, 9))

        assert source.completed == [9, 3, 5]
        assert [b.number for b in blocks] == [5, 3, 9]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        source = MemoryBlockSource(delays={n: 0.05 for n in range(1, 11)})
        loop = asyncio.get_running_loop()
        started = loop.time()
        blocks = await FetchOrchestrator(source).fetch(resolved(*range(1, 11)))
        assert len(blocks) == 10
        # Ten sequential fetches would take half a second
        assert loop.time() - started < 0.4

    @pytest.mark.asyncio
    async def test_duplicates_fetched_per_position(self):
        source = MemoryBlockSource()
        blocks = await FetchOrchestrator(source).fetch(resolved(4, 4))
        assert [b.number for b in blocks] == [4, 4]
        assert source.calls == [4, 4]

    @pytest.mark.asyncio
    async def test_empty_range(self):
        assert await FetchOrchestrator(MemoryBlockSource()).fetch(resolved()) == []


class TestFailures:

    @pytest.mark.asyncio
    async def test_not_found_fails_whole_request(self):
        source = MemoryBlockSource(height=10)
        with pytest.raises(FetchError) as exc:
            await FetchOrchestrator(source).fetch(resolved(1, 50, 2))
        assert exc.value.identifier == 50
        assert "50" in str(exc.value)

    @pytest.mark.asyncio
    async def test_waits_for_siblings_before_failing(self):
        source = MemoryBlockSource(delays={1: 0.05}, failures={2: UPSTREAM_DOWN})
        with pytest.raises(FetchError) as exc:
            await FetchOrchestrator(source).fetch(resolved(1, 2))
        assert 1 in source.completed
        assert exc.value.identifier == 2
        assert exc.value.__cause__ is UPSTREAM_DOWN

    @pytest.mark.asyncio
    async def test_earliest_position_failure_reported(self):
        source = MemoryBlockSource(height=10, delays={70: 0.0, 60: 0.05})
        with pytest.raises(FetchError) as exc:
            await FetchOrchestrator(source).fetch(resolved(60, 70))
        assert exc.value.identifier == 60

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self):
        source = MemoryBlockSource(delays={1: 5.0})
        task = asyncio.ensure_future(FetchOrchestrator(source).fetch(resolved(1)))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
