"""Shared constants used across modules.

StrEnum members are str-compatible, so JSON manifests and rendered
reports work with them unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class Severity(StrEnum):
    """Finding severity, ordered LOW < MEDIUM < HIGH."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def escalate(self, levels: int = 1) -> Severity:
        """Raise by ``levels``, capped at HIGH. Never lowers."""
        idx = min(self.rank + max(levels, 0), len(_SEVERITY_ORDER) - 1)
        return _SEVERITY_ORDER[idx]


_SEVERITY_ORDER = (Severity.LOW, Severity.MEDIUM, Severity.HIGH)


class Category(StrEnum):
    """Finding categories used in review reports."""

    NAMING = "naming"
    WORKFLOW_LOGIC = "workflow-logic"
    PARAMETER_SEMANTICS = "parameter-semantics"
    SCOPE_CREEP = "scope-creep"
    MISSING_DEFINITION = "missing-definition"


class TermKind(StrEnum):
    """What shape of identifier an occurrence was matched as."""

    COMMAND = "command"
    FLAG = "flag"
    PACKAGE = "package"
    EXTENSION = "extension"


class TermRole(StrEnum):
    """Role of a term; drives severity escalation."""

    ORDINARY = "ordinary"
    ENTRY_POINT = "entry_point"
    PACKAGE = "package"
    SECURITY = "security"


class DocumentStatus(StrEnum):
    """Per-document lifecycle within one run."""

    PENDING = "pending"
    SCANNING = "scanning"
    CHECKING = "checking"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"


class RunState(StrEnum):
    """Overall run lifecycle."""

    INITIALIZED = "initialized"
    RUNNING = "running"
    FINALIZED = "finalized"


class RunOutcome(StrEnum):
    """Terminal result of a finalized run."""

    COMPLETE = "complete"
    PARTIALLY_COMPLETE = "partially_complete"
    FAILED = "failed"


class StageOutcome(StrEnum):
    """Outcome of an individual pipeline stage execution."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StageProgress(StrEnum):
    """Progress status for stage events."""

    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class AliasRule(StrEnum):
    """Rules that may choose an alias group's canonical spelling."""

    CASE_VARIANT = "case-variant"
    DECLARED = "declared"
    SHARED_INVOCATION = "shared-invocation"


# ── CLI exit codes ───────────────────────────────────────

EXIT_CODES: dict[RunOutcome, int] = {
    RunOutcome.COMPLETE: 0,
    RunOutcome.PARTIALLY_COMPLETE: 1,
    RunOutcome.FAILED: 2,
}

# ── Report layout ────────────────────────────────────────

REPORT_HEADINGS = (
    "## Document Overview",
    "## Critical Issues Found",
    "### High Priority Issues",
    "### Medium Priority Issues",
    "### Lower Priority Issues",
    "## Specific Examples",
    "## Overall Assessment",
    "## Recommendations",
)

SEVERITY_HEADINGS: dict[Severity, str] = {
    Severity.HIGH: "### High Priority Issues",
    Severity.MEDIUM: "### Medium Priority Issues",
    Severity.LOW: "### Lower Priority Issues",
}

SCORE_MAX = 10.0
SCORE_MIN = 0.0

# Verdict bands, checked top-down against the score
SCORE_VERDICTS: tuple[tuple[float, str], ...] = (
    (9.0, "Consistent"),
    (7.0, "Minor inconsistencies"),
    (4.0, "Needs revision"),
    (0.0, "Major rework required"),
)

# ── Misc ─────────────────────────────────────────────────

FINDING_ID_HEX_LENGTH = 12
EXCERPT_MAX_CHARS = 200
MAX_EXAMPLES_PER_FINDING = 5

# ── Stage Labels (user-facing) ─────────────────────────

STAGE_LABELS: dict[str, str] = {
    "discover": "Discovering documents",
    "scan": "Extracting terms",
    "check": "Running consistency rules",
    "emit": "Writing reports",
    "manifest": "Writing manifest",
}
