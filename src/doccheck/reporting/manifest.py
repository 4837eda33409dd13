"""Run manifest model and the markdown progress tracker."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from doccheck.constants import (
    DocumentStatus,
    RunOutcome,
    RunState,
    Severity,
)


class DocumentRecord(BaseModel):
    """One document's progress and terminal status."""

    path: str
    status: DocumentStatus = DocumentStatus.PENDING
    failure_reason: str | None = None
    warnings: list[str] = Field(default_factory=list)
    term_count: int = 0
    finding_count: int = 0
    report_path: str | None = None

    @property
    def terminal_label(self) -> str:
        """``Complete`` or ``Failed: <reason>`` as shown to users."""
        if self.status == DocumentStatus.DONE:
            return "Complete"
        if self.status == DocumentStatus.FAILED:
            return f"Failed: {self.failure_reason or 'unknown error'}"
        return str(self.status).capitalize()

    def fail(self, reason: str) -> None:
        self.status = DocumentStatus.FAILED
        self.failure_reason = reason


class UnresolvedAmbiguity(BaseModel):
    """An alias merge conflict left for a human to resolve."""

    terms: tuple[str, str]
    canonicals: tuple[str, str]
    rules: tuple[str, str]
    message: str


class RunManifest(BaseModel):
    """Aggregate state of one run; persisted at finalization."""

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    input_root: str
    output_root: str
    state: RunState = RunState.INITIALIZED
    outcome: RunOutcome | None = None
    documents: list[DocumentRecord] = Field(
        default_factory=lambda: list[DocumentRecord]()
    )
    finding_counts: dict[str, int] = Field(
        default_factory=lambda: {str(s): 0 for s in Severity}
    )
    total_findings: int = 0
    unresolved_ambiguities: list[UnresolvedAmbiguity] = Field(
        default_factory=lambda: list[UnresolvedAmbiguity]()
    )
    rule_failures: list[str] = Field(default_factory=list)
    fatal_error: str | None = None

    def record(self, path: str) -> DocumentRecord:
        for rec in self.documents:
            if rec.path == path:
                return rec
        msg = f"no record for {path}"
        raise KeyError(msg)

    @property
    def failed_documents(self) -> list[DocumentRecord]:
        return [
            d for d in self.documents if d.status == DocumentStatus.FAILED
        ]

    def comparable(self) -> dict[str, Any]:
        """Dump without run id and timestamps, for idempotence checks."""
        return self.model_dump(
            mode="json",
            exclude={"run_id", "started_at", "finished_at"},
        )


def render_tracker(manifest: RunManifest) -> str:
    """Markdown progress tracker listing every document's status."""
    counts = manifest.finding_counts
    outcome = manifest.outcome or "in progress"
    parts: list[str] = [
        "# Documentation Review Progress",
        "",
        f"- **Run:** `{manifest.run_id}`",
        f"- **Input:** `{manifest.input_root}`",
        f"- **Outcome:** {outcome}",
        f"- **Documents:** {len(manifest.documents)} "
        f"({len(manifest.failed_documents)} failed)",
        f"- **Findings:** {manifest.total_findings} "
        f"({counts.get('high', 0)} high, {counts.get('medium', 0)} medium, "
        f"{counts.get('low', 0)} low)",
        "",
    ]
    if manifest.fatal_error:
        parts.extend([f"**Fatal error:** {manifest.fatal_error}", ""])

    parts.extend(["## Documents", ""])
    if manifest.documents:
        parts.append("| Document | Status | Findings | Report |")
        parts.append("|---|---|---|---|")
        for rec in manifest.documents:
            report = f"`{rec.report_path}`" if rec.report_path else "-"
            parts.append(
                f"| `{rec.path}` | {rec.terminal_label} | "
                f"{rec.finding_count} | {report} |"
            )
    else:
        parts.append("No documents found.")
    parts.append("")

    if manifest.unresolved_ambiguities:
        parts.extend(["## Unresolved Ambiguities", ""])
        parts.extend(
            f"- {item.message}" for item in manifest.unresolved_ambiguities
        )
        parts.append("")
    if manifest.rule_failures:
        parts.extend(["## Rule Failures", ""])
        parts.extend(f"- {failure}" for failure in manifest.rule_failures)
        parts.append("")
    return "\n".join(parts).rstrip() + "\n"
