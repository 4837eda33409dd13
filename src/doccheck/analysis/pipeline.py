"""Typed pipeline stages with parallel fan-out support.

Stages wrap blocking callables (file reads, extraction, rule passes);
each runs in a worker thread so a ParallelGroup overlaps them.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from doccheck.constants import StageOutcome

logger = logging.getLogger(__name__)

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


@dataclass
class StageResult(Generic[TOutput]):
    """Outcome of a single pipeline stage execution."""

    stage_name: str
    output: TOutput | None
    duration_ms: float
    status: StageOutcome
    error: str | None = None
    exception: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status == StageOutcome.COMPLETED


@dataclass
class PipelineStage(Generic[TInput, TOutput]):
    """A named blocking stage run off the event loop, errors isolated."""

    name: str
    execute: Callable[[TInput], TOutput]

    async def run(self, input_data: TInput) -> StageResult[TOutput]:
        """Execute the stage in a thread, capturing timing and errors."""
        start = time.monotonic()
        try:
            output = await asyncio.to_thread(self.execute, input_data)
        except Exception as exc:
            elapsed = (time.monotonic() - start) * 1000
            logger.warning(
                "event=stage_failed stage=%s error=%s", self.name, exc
            )
            return StageResult(
                stage_name=self.name,
                output=None,
                duration_ms=elapsed,
                status=StageOutcome.FAILED,
                error=str(exc),
                exception=exc,
            )
        elapsed = (time.monotonic() - start) * 1000
        return StageResult(
            stage_name=self.name,
            output=output,
            duration_ms=elapsed,
            status=StageOutcome.COMPLETED,
        )


@dataclass
class ParallelGroup(Generic[TInput]):
    """Run multiple stages concurrently on the same input."""

    name: str
    stages: list[PipelineStage[TInput, Any]] = field(
        default_factory=lambda: list[PipelineStage[Any, Any]]()
    )
    max_concurrency: int | None = None

    async def execute(self, input_data: TInput) -> list[StageResult[Any]]:
        """Run all stages; results keep the order of ``stages``.

        Failed stages do not cancel siblings. The call returns only when
        every stage has finished, which makes it a join barrier.
        """
        if not self.stages:
            return []

        results: list[StageResult[Any]] = [
            StageResult(
                stage_name=s.name,
                output=None,
                duration_ms=0.0,
                status=StageOutcome.SKIPPED,
            )
            for s in self.stages
        ]
        semaphore = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency
            else None
        )

        async def _run_stage(
            idx: int, stage: PipelineStage[TInput, Any]
        ) -> None:
            if semaphore:
                async with semaphore:
                    results[idx] = await stage.run(input_data)
            else:
                results[idx] = await stage.run(input_data)

        await asyncio.gather(
            *(_run_stage(i, s) for i, s in enumerate(self.stages))
        )
        logger.debug(
            "event=group_done group=%s stages=%d failed=%d",
            self.name,
            len(results),
            sum(1 for r in results if not r.ok),
        )
        return results
