"""Tests for pipeline stages and parallel groups."""

from __future__ import annotations

import threading
import time

import pytest

from doccheck.analysis.pipeline import ParallelGroup, PipelineStage
from doccheck.constants import StageOutcome


def _double(x: int) -> int:
    return x * 2


def _boom(_: int) -> int:
    raise RuntimeError("boom")


class TestPipelineStage:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        result = await PipelineStage(name="double", execute=_double).run(4)
        assert result.ok
        assert result.output == 8
        assert result.status == StageOutcome.COMPLETED
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_failure_is_captured(self) -> None:
        result = await PipelineStage(name="boom", execute=_boom).run(1)
        assert not result.ok
        assert result.status == StageOutcome.FAILED
        assert result.error == "boom"
        assert isinstance(result.exception, RuntimeError)
        assert result.output is None


class TestParallelGroup:
    @pytest.mark.asyncio
    async def test_results_keep_stage_order(self) -> None:
        def _slow(x: int) -> int:
            time.sleep(0.05)
            return x + 1

        group: ParallelGroup[int] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name="slow", execute=_slow),
                PipelineStage(name="fast", execute=_double),
            ],
        )
        results = await group.execute(10)
        assert [r.stage_name for r in results] == ["slow", "fast"]
        assert [r.output for r in results] == [11, 20]

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self) -> None:
        group: ParallelGroup[int] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name="boom", execute=_boom),
                PipelineStage(name="double", execute=_double),
            ],
        )
        results = await group.execute(3)
        assert [r.ok for r in results] == [False, True]
        assert results[1].output == 6

    @pytest.mark.asyncio
    async def test_empty_group(self) -> None:
        assert await ParallelGroup[int](name="g").execute(1) == []

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        lock = threading.Lock()
        active = 0
        peak = 0

        def _track(_: int) -> int:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1
            return 0

        group: ParallelGroup[int] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name=f"s{i}", execute=_track)
                for i in range(6)
            ],
            max_concurrency=2,
        )
        results = await group.execute(0)
        assert all(r.ok for r in results)
        assert peak <= 2
