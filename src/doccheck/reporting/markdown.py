"""Per-document review report in the fixed markdown layout."""

from __future__ import annotations

from collections.abc import Mapping

from doccheck.analysis.schemas import Finding, sort_findings
from doccheck.constants import (
    EXCERPT_MAX_CHARS,
    MAX_EXAMPLES_PER_FINDING,
    SEVERITY_HEADINGS,
    Severity,
)
from doccheck.errors import MalformedFindingError
from doccheck.ingestion.schemas import Document
from doccheck.reporting.scoring import compute_score, severity_counts, verdict

_PRIORITY_LABELS = {
    Severity.HIGH: "High priority",
    Severity.MEDIUM: "Medium priority",
    Severity.LOW: "Lower priority",
}


def validate_findings(
    findings: list[Finding],
    documents: Mapping[str, Document],
) -> None:
    """Reject findings that cite nothing, or cite lines that don't exist.

    Raises :class:`MalformedFindingError`.
    """
    for finding in findings:
        if not finding.locations:
            msg = (
                f"finding {finding.finding_id} ({finding.rule}) "
                "has no location"
            )
            raise MalformedFindingError(msg)
        for loc in finding.locations:
            doc = documents.get(loc.path)
            if doc is None:
                msg = (
                    f"finding {finding.finding_id} cites unknown "
                    f"document {loc.path}"
                )
                raise MalformedFindingError(msg)
            if not (
                doc.has_line(loc.line_start)
                and doc.has_line(loc.line_end)
                and loc.line_start <= loc.line_end
            ):
                msg = (
                    f"finding {finding.finding_id} cites missing "
                    f"line {loc}"
                )
                raise MalformedFindingError(msg)


def render_report(
    document: Document,
    findings: list[Finding],
    documents: Mapping[str, Document],
    weights: dict[str, float] | None = None,
) -> str:
    """Render the review of ``document``.

    ``findings`` are those citing the document; ``documents`` resolves
    excerpts for cross-document locations.
    """
    validate_findings(findings, documents)
    ordered = sort_findings(findings)
    counts = severity_counts(ordered)
    score = compute_score(ordered, weights)

    parts: list[str] = [f"# Review: {document.title}", ""]
    parts.extend(_overview(document, ordered, counts))
    parts.extend(_issues(ordered))
    parts.extend(_examples(ordered, documents))
    parts.extend(_assessment(ordered, counts, score))
    parts.extend(_recommendations(ordered))
    return "\n".join(parts).rstrip() + "\n"


def _overview(
    document: Document,
    findings: list[Finding],
    counts: dict[Severity, int],
) -> list[str]:
    cross = sum(1 for f in findings if len(f.paths) > 1)
    return [
        "## Document Overview",
        "",
        f"- **Path:** `{document.path}`",
        f"- **Title:** {document.title}",
        f"- **Lines:** {document.line_count}",
        f"- **Findings:** {len(findings)} "
        f"({counts[Severity.HIGH]} high, {counts[Severity.MEDIUM]} medium, "
        f"{counts[Severity.LOW]} low)",
        f"- **Cross-document findings:** {cross}",
        "",
    ]


def _issues(findings: list[Finding]) -> list[str]:
    parts = ["## Critical Issues Found", ""]
    for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        parts.append(SEVERITY_HEADINGS[severity])
        parts.append("")
        matching = [f for f in findings if f.severity == severity]
        if not matching:
            parts.append("None found.")
            parts.append("")
            continue
        for i, finding in enumerate(matching, 1):
            where = ", ".join(f"`{loc}`" for loc in finding.locations)
            parts.append(
                f"{i}. **{finding.subject}** ({finding.category}): "
                f"{finding.description}"
            )
            parts.append(f"   - Locations: {where}")
        parts.append("")
    return parts


def _examples(
    findings: list[Finding],
    documents: Mapping[str, Document],
) -> list[str]:
    parts = ["## Specific Examples", ""]
    if not findings:
        parts.extend(["No examples: no issues were found.", ""])
        return parts
    for finding in findings:
        parts.append(f"**{finding.subject}** ({finding.rule})")
        parts.append("")
        for loc in finding.locations[:MAX_EXAMPLES_PER_FINDING]:
            excerpt = documents[loc.path].line_text(loc.line_start).strip()
            if len(excerpt) > EXCERPT_MAX_CHARS:
                excerpt = excerpt[:EXCERPT_MAX_CHARS] + "..."
            parts.append(f"`{loc}`:")
            parts.append(f"> {excerpt}")
            parts.append("")
        hidden = len(finding.locations) - MAX_EXAMPLES_PER_FINDING
        if hidden > 0:
            parts.append(f"_...and {hidden} more location(s)._")
            parts.append("")
    return parts


def _assessment(
    findings: list[Finding],
    counts: dict[Severity, int],
    score: float,
) -> list[str]:
    parts = [
        "## Overall Assessment",
        "",
        f"**Score:** {score:.1f}/10 ({verdict(score)})",
        "",
    ]
    if not findings:
        parts.append(
            "No naming drift, undefined references or contradictions "
            "were detected in this document."
        )
    else:
        categories = sorted({str(f.category) for f in findings})
        parts.append(
            f"{len(findings)} issue(s) found, "
            f"{counts[Severity.HIGH]} of them high priority. "
            f"Affected areas: {', '.join(categories)}."
        )
    parts.append("")
    return parts


def _recommendations(findings: list[Finding]) -> list[str]:
    parts = ["## Recommendations", ""]
    if not findings:
        parts.extend(["No changes recommended.", ""])
        return parts
    seen: set[str] = set()
    for severity in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        fixes: list[str] = []
        for finding in findings:
            if finding.severity != severity:
                continue
            if finding.suggested_fix in seen:
                continue
            seen.add(finding.suggested_fix)
            fixes.append(finding.suggested_fix)
        if not fixes:
            continue
        parts.append(f"**{_PRIORITY_LABELS[severity]}**")
        parts.append("")
        parts.extend(f"- {fix}" for fix in fixes)
        parts.append("")
    return parts
