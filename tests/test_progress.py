"""Tests for BarrierProgress wired through barrier callbacks."""

import asyncio

import pytest

from tiny_barrier import Barrier, BarrierProgress


class TestBarrierProgress:
    def test_add_total_and_tick(self):
        with BarrierProgress(desc="test") as progress:
            progress.add_total(3)
            progress.tick()
            assert progress.total == 3
            assert progress.n == 1

    def test_total_never_negative(self):
        with BarrierProgress(desc="test") as progress:
            progress.add_total(1)
            progress.add_total(-5)
            assert progress.total == 0

    @pytest.mark.asyncio
    async def test_follows_barrier(self):
        with BarrierProgress(desc="test") as progress:
            barrier = Barrier(2, on_add=progress.add_total, on_done=progress.tick)
            barrier.on_error(lambda err: None).on_success(lambda: None)
            barrier.increment()
            barrier.done().done().done()
            await asyncio.sleep(0)
            assert progress.total == 3
            assert progress.n == 3
            assert barrier.success_fired
