"""Unit tests for the intake dispatchers."""
from __future__ import annotations

import asyncio

import pytest

from processor.src.application.dispatchers import BoundedDispatcher, SequentialDispatcher


class TestSequentialDispatcher:

    @pytest.mark.asyncio
    async def test_submit_runs_job_inline(self):
        ran = []

        async def job():
            ran.append(1)

        await SequentialDispatcher().submit(job)

        assert ran == [1]

    @pytest.mark.asyncio
    async def test_submit_propagates_job_errors(self):
        async def job():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await SequentialDispatcher().submit(job)


class TestBoundedDispatcher:

    def test_rejects_non_positive_concurrency(self):
        with pytest.raises(ValueError, match="at least 1"):
            BoundedDispatcher(0)

    @pytest.mark.asyncio
    async def test_submit_blocks_when_slots_are_full(self):
        dispatcher = BoundedDispatcher(1)
        release = asyncio.Event()

        async def blocking():
            await release.wait()

        async def quick():
            return None

        await dispatcher.submit(blocking)
        second = asyncio.create_task(dispatcher.submit(quick))
        await asyncio.sleep(0.01)

        assert not second.done()
        assert dispatcher.in_flight == 1

        release.set()
        await asyncio.wait_for(second, timeout=1)
        await dispatcher.drain()
        assert dispatcher.in_flight == 0

    @pytest.mark.asyncio
    async def test_failed_job_releases_its_slot(self):
        dispatcher = BoundedDispatcher(1)

        async def failing():
            raise RuntimeError("boom")

        await dispatcher.submit(failing)
        await dispatcher.drain()

        finished = []

        async def after():
            finished.append(True)

        await asyncio.wait_for(dispatcher.submit(after), timeout=1)
        await dispatcher.drain()
        assert finished == [True]

    @pytest.mark.asyncio
    async def test_drain_waits_for_all_jobs(self):
        dispatcher = BoundedDispatcher(3)
        done = []

        async def job(n):
            await asyncio.sleep(0.01 * n)
            done.append(n)

        for n in range(3):
            await dispatcher.submit(lambda n=n: job(n))

        await dispatcher.drain()

        assert sorted(done) == [0, 1, 2]
        assert dispatcher.concurrency == 3
