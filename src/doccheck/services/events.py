"""Shared event types for run progress reporting."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from doccheck.constants import STAGE_LABELS, StageProgress


@dataclass(frozen=True)
class StageEvent:
    """Typed event emitted during a run."""

    name: str
    status: StageProgress
    message: str = ""
    duration_ms: float = 0.0
    completed: int | None = None
    total: int | None = None

    @property
    def label(self) -> str:
        """User-friendly display label from STAGE_LABELS."""
        return STAGE_LABELS.get(self.name, self.name)


ProgressCallback: TypeAlias = Callable[[StageEvent], None]
