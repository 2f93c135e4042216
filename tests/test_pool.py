"""
Tests for the bounded worker pool.
"""

import asyncio

import pytest
from awsenv.core.errors import ErrorKind, FatalRemoteError
from awsenv.core.pool import POOL_WIDTH, STAGGER_SECONDS, BoundedPool


class Tracker:
    """Counts concurrent workers and records start times."""

    def __init__(self, delays=None, fatal_on=()):
        self.delays = delays or {}
        self.fatal_on = set(fatal_on)
        self.started = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, item):
        loop = asyncio.get_running_loop()
        self.started.append((item, loop.time()))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(item, 0.01))
            if item in self.fatal_on:
                raise FatalRemoteError(ErrorKind.ACCESS_DENIED)
            return item * 10
        finally:
            self.in_flight -= 1


class TestBoundedPool:
    """Test ordering, bounding and abort behaviour."""

    @pytest.mark.asyncio
    async def test_empty(self):
        """No items, no results."""
        assert await BoundedPool().run([], Tracker()) == []

    @pytest.mark.asyncio
    async def test_results_aligned(self):
        """Results follow input order, not completion order."""
        worker = Tracker(delays={0: 0.1, 1: 0.01, 2: 0.05, 3: 0.01})
        assert await BoundedPool().run([0, 1, 2, 3], worker) == [0, 10, 20, 30]

    @pytest.mark.asyncio
    async def test_bounded(self):
        """Never more than three workers at once."""
        worker = Tracker(delays={i: 0.1 for i in range(10)})
        results = await BoundedPool().run(list(range(10)), worker)
        assert len(results) == 10
        assert worker.max_in_flight == POOL_WIDTH

    @pytest.mark.asyncio
    async def test_stagger(self):
        """Every task after the first waits before starting."""
        loop = asyncio.get_running_loop()
        began = loop.time()
        worker = Tracker()
        await BoundedPool().run([0, 1, 2], worker)

        starts = dict(worker.started)
        assert starts[0] - began < STAGGER_SECONDS
        assert starts[1] - began >= STAGGER_SECONDS * 0.9
        assert starts[2] - began >= STAGGER_SECONDS * 0.9

    @pytest.mark.asyncio
    async def test_dispatch_order(self):
        """Tasks are admitted in input order."""
        worker = Tracker(delays={i: 0.02 for i in range(6)})
        await BoundedPool(width=1, stagger=0).run(list(range(6)), worker)
        assert [item for item, _ in worker.started] == list(range(6))

    @pytest.mark.asyncio
    async def test_fatal_stops_dispatch(self):
        """A fatal error on the first call prevents every later call."""
        worker = Tracker(fatal_on={0})
        with pytest.raises(FatalRemoteError):
            await BoundedPool().run(list(range(6)), worker)
        assert [item for item, _ in worker.started] == [0]

    @pytest.mark.asyncio
    async def test_fatal_lets_in_flight_finish(self):
        """Calls already running complete before the error is raised."""
        worker = Tracker(delays={0: 0.2, 1: 0.01, 2: 0.3}, fatal_on={1})
        with pytest.raises(FatalRemoteError):
            await BoundedPool().run([0, 1, 2, 3, 4], worker)
        assert sorted(item for item, _ in worker.started) == [0, 1, 2]
        assert worker.in_flight == 0

    def test_invalid_width(self):
        """Width must be positive."""
        with pytest.raises(ValueError):
            BoundedPool(width=0)
