"""Report emission: per-document reviews plus the run manifest."""

from doccheck.reporting.manifest import (
    DocumentRecord,
    RunManifest,
    UnresolvedAmbiguity,
    render_tracker,
)
from doccheck.reporting.markdown import render_report, validate_findings
from doccheck.reporting.scoring import compute_score, severity_counts
from doccheck.reporting.writer import (
    report_path_for,
    write_manifest,
    write_report,
)

__all__ = [
    "DocumentRecord",
    "RunManifest",
    "UnresolvedAmbiguity",
    "compute_score",
    "render_report",
    "render_tracker",
    "report_path_for",
    "severity_counts",
    "validate_findings",
    "write_manifest",
    "write_report",
]
