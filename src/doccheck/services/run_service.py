"""Run coordination: scan, check, emit and finalize one run.

Per-document states: pending -> scanning -> checking -> emitting -> done,
or failed at any step. Checking waits for every scan to finish because
the cross-document rules need the complete glossary registry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from doccheck.analysis.checker import CheckResult, check_corpus
from doccheck.analysis.corpus import Corpus
from doccheck.analysis.glossary import GlossaryRegistry
from doccheck.analysis.pipeline import ParallelGroup, PipelineStage
from doccheck.analysis.scanner import register_scan, scan_document
from doccheck.analysis.schemas import DocumentScan
from doccheck.config import Settings
from doccheck.constants import (
    DocumentStatus,
    RunOutcome,
    RunState,
    Severity,
    StageProgress,
)
from doccheck.errors import (
    IOReadError,
    IOWriteError,
    MalformedFindingError,
)
from doccheck.ingestion.loader import discover_documents, load_document
from doccheck.ingestion.schemas import Document
from doccheck.reporting.manifest import (
    DocumentRecord,
    RunManifest,
    UnresolvedAmbiguity,
)
from doccheck.reporting.markdown import render_report
from doccheck.reporting.scoring import severity_counts
from doccheck.reporting.writer import write_manifest, write_report
from doccheck.rules import ConsistencyRule
from doccheck.services.events import ProgressCallback, StageEvent

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Shared state for one run, owned by :func:`run_check`.

    INVARIANT: scan stages only touch their own DocumentRecord and the
    lock-guarded registry; documents and scans are filled in on the
    event loop after the scan barrier.
    """

    input_root: Path
    output_root: Path
    settings: Settings
    manifest: RunManifest
    registry: GlossaryRegistry
    on_progress: ProgressCallback | None = None

    documents: dict[str, Document] = field(
        default_factory=lambda: dict[str, Document]()
    )
    scans: dict[str, DocumentScan] = field(
        default_factory=lambda: dict[str, DocumentScan]()
    )
    check: CheckResult | None = None

    def report(self, event: StageEvent) -> None:
        """Emit a progress event if callback is set."""
        if self.on_progress:
            self.on_progress(event)

    def active_records(self) -> list[DocumentRecord]:
        return [
            r
            for r in self.manifest.documents
            if r.status != DocumentStatus.FAILED
        ]


async def run_check(
    input_root: str | Path,
    output_root: str | Path,
    settings: Settings | None = None,
    rules: list[ConsistencyRule] | None = None,
    on_progress: ProgressCallback | None = None,
) -> RunManifest:
    """Check every document under ``input_root``.

    Writes one report per document and the manifest under
    ``output_root``. Never raises for per-document problems; an
    unreadable input root finalizes the run with outcome ``failed``.
    """
    cfg = settings or Settings()
    src = Path(input_root)
    dest = Path(output_root)
    ctx = RunContext(
        input_root=src,
        output_root=dest,
        settings=cfg,
        manifest=RunManifest(input_root=str(src), output_root=str(dest)),
        registry=GlossaryRegistry(
            entry_points=cfg.entry_points,
            security_keywords=cfg.security_keywords,
        ),
        on_progress=on_progress,
    )
    ctx.manifest.state = RunState.RUNNING
    logger.info(
        "event=run_start run_id=%s input=%s output=%s",
        ctx.manifest.run_id,
        src,
        dest,
    )

    ctx.report(StageEvent(name="discover", status=StageProgress.RUNNING))
    try:
        paths = discover_documents(src, cfg, exclude=dest)
    except IOReadError as exc:
        logger.error("event=run_aborted error=%s", exc)
        ctx.manifest.fatal_error = str(exc)
        ctx.report(
            StageEvent(
                name="discover", status=StageProgress.ERROR, message=str(exc)
            )
        )
        _finalize(ctx)
        return ctx.manifest
    ctx.manifest.documents = [
        DocumentRecord(path=p.relative_to(src).as_posix()) for p in paths
    ]
    ctx.report(
        StageEvent(
            name="discover", status=StageProgress.DONE, total=len(paths)
        )
    )

    await _scan_phase(ctx, paths)
    check = await _check_phase(ctx, rules)
    _emit_phase(ctx, check)
    _finalize(ctx)
    return ctx.manifest


# ── Phases ───────────────────────────────────────────────


async def _scan_phase(ctx: RunContext, paths: list[Path]) -> None:
    """Load and extract every document concurrently (join barrier)."""
    start = time.monotonic()
    ctx.report(
        StageEvent(
            name="scan", status=StageProgress.RUNNING, total=len(paths)
        )
    )
    group: ParallelGroup[None] = ParallelGroup(
        name="scan",
        stages=[_scan_stage(ctx, p) for p in paths],
        max_concurrency=ctx.settings.max_concurrency,
    )
    results = await group.execute(None)

    for record, result in zip(ctx.manifest.documents, results, strict=True):
        if not result.ok or result.output is None:
            record.fail(result.error or "extraction failed")
            logger.warning(
                "event=document_failed phase=scan path=%s error=%s",
                record.path,
                record.failure_reason,
            )
            continue
        document, scan = result.output
        ctx.documents[record.path] = document
        ctx.scans[record.path] = scan
        record.warnings = [str(w) for w in scan.warnings]
        record.term_count = len(scan.occurrences)
        record.status = DocumentStatus.CHECKING

    ctx.report(
        StageEvent(
            name="scan",
            status=StageProgress.DONE,
            duration_ms=(time.monotonic() - start) * 1000,
            completed=len(ctx.documents),
            total=len(paths),
        )
    )


def _scan_stage(
    ctx: RunContext, path: Path
) -> PipelineStage[None, tuple[Document, DocumentScan]]:
    rel = path.relative_to(ctx.input_root).as_posix()

    def _scan(_: None) -> tuple[Document, DocumentScan]:
        ctx.manifest.record(rel).status = DocumentStatus.SCANNING
        document = load_document(ctx.input_root, path)
        scan = scan_document(document, ctx.settings)
        register_scan(ctx.registry, scan)
        return document, scan

    return PipelineStage(name=rel, execute=_scan)


async def _check_phase(
    ctx: RunContext, rules: list[ConsistencyRule] | None
) -> CheckResult:
    start = time.monotonic()
    ctx.report(StageEvent(name="check", status=StageProgress.RUNNING))
    corpus = Corpus(
        documents=ctx.documents,
        scans=ctx.scans,
        registry=ctx.registry,
        settings=ctx.settings,
    )
    check = await check_corpus(corpus, rules)
    ctx.check = check
    ctx.manifest.unresolved_ambiguities = [
        UnresolvedAmbiguity(
            terms=(c.first, c.second),
            canonicals=c.canonicals,
            rules=c.rules,
            message=str(c),
        )
        for c in check.conflicts
    ]
    ctx.manifest.rule_failures = [
        f"{f.rule}: {f.error}" for f in check.failures
    ]
    # A finding citing nothing can never reach a report; surface it here
    unlocated = [f for f in check.findings if not f.locations]
    for finding in unlocated:
        error = MalformedFindingError(
            f"finding {finding.finding_id} has no location"
        )
        logger.error(
            "event=malformed_finding rule=%s error=%s", finding.rule, error
        )
        ctx.manifest.rule_failures.append(f"{finding.rule}: {error}")
    if unlocated:
        check.findings = [f for f in check.findings if f.locations]
    ctx.report(
        StageEvent(
            name="check",
            status=StageProgress.DONE,
            duration_ms=(time.monotonic() - start) * 1000,
            completed=len(check.findings),
        )
    )
    return check


def _emit_phase(ctx: RunContext, check: CheckResult) -> None:
    """Render and write one report per successfully scanned document."""
    records = ctx.active_records()
    ctx.report(
        StageEvent(
            name="emit", status=StageProgress.RUNNING, total=len(records)
        )
    )
    for record in records:
        record.status = DocumentStatus.EMITTING
        findings = check.findings_for(record.path)
        try:
            content = render_report(
                ctx.documents[record.path],
                findings,
                ctx.documents,
                ctx.settings.score_weights,
            )
            written = write_report(
                ctx.output_root,
                record.path,
                content,
                ctx.settings.report_suffix,
            )
        except (MalformedFindingError, IOWriteError) as exc:
            record.fail(str(exc))
            logger.error(
                "event=document_failed phase=emit path=%s error=%s",
                record.path,
                exc,
            )
            continue
        record.finding_count = len(findings)
        record.report_path = written.relative_to(ctx.output_root).as_posix()
        record.status = DocumentStatus.DONE
    ctx.report(StageEvent(name="emit", status=StageProgress.DONE))


def _finalize(ctx: RunContext) -> None:
    """Aggregate counts, decide the outcome, persist the manifest."""
    manifest = ctx.manifest
    findings = ctx.check.findings if ctx.check else []
    manifest.finding_counts = {
        str(s): n for s, n in severity_counts(findings).items()
    }
    manifest.total_findings = len(findings)
    manifest.state = RunState.FINALIZED
    manifest.finished_at = datetime.now(UTC)
    manifest.outcome = _outcome(manifest)

    ctx.report(StageEvent(name="manifest", status=StageProgress.RUNNING))
    try:
        write_manifest(
            ctx.output_root,
            manifest,
            ctx.settings.manifest_filename,
            ctx.settings.tracker_filename,
        )
    except IOWriteError as exc:
        logger.error("event=manifest_write_failed error=%s", exc)
        manifest.fatal_error = manifest.fatal_error or str(exc)
        manifest.outcome = RunOutcome.FAILED
    logger.info(
        "event=run_done run_id=%s outcome=%s documents=%d failed=%d "
        "findings=%d high=%d",
        manifest.run_id,
        manifest.outcome,
        len(manifest.documents),
        len(manifest.failed_documents),
        manifest.total_findings,
        manifest.finding_counts.get(str(Severity.HIGH), 0),
    )
    ctx.report(StageEvent(name="manifest", status=StageProgress.DONE))


def _outcome(manifest: RunManifest) -> RunOutcome:
    if manifest.fatal_error:
        return RunOutcome.FAILED
    if manifest.failed_documents or manifest.rule_failures:
        return RunOutcome.PARTIALLY_COMPLETE
    return RunOutcome.COMPLETE
