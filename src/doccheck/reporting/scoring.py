"""Overall assessment score for one document's findings."""

from __future__ import annotations

from collections import Counter

from doccheck.analysis.schemas import Finding
from doccheck.constants import SCORE_MAX, SCORE_MIN, SCORE_VERDICTS, Severity

DEFAULT_WEIGHTS: dict[str, float] = {
    Severity.HIGH: 0.5,
    Severity.MEDIUM: 0.2,
    Severity.LOW: 0.1,
}


def severity_counts(findings: list[Finding]) -> dict[Severity, int]:
    """Count per severity, every severity present."""
    counts = Counter(f.severity for f in findings)
    return {
        s: counts.get(s, 0)
        for s in (Severity.HIGH, Severity.MEDIUM, Severity.LOW)
    }


def compute_score(
    findings: list[Finding],
    weights: dict[str, float] | None = None,
) -> float:
    """``clamp(10 - sum(weight * count), 0, 10)``, one decimal.

    Monotonic: adding a finding never raises the score.
    """
    w = DEFAULT_WEIGHTS | (weights or {})
    counts = severity_counts(findings)
    raw = SCORE_MAX - sum(w[str(s)] * n for s, n in counts.items())
    return round(min(SCORE_MAX, max(SCORE_MIN, raw)), 1)


def verdict(score: float) -> str:
    for floor, label in SCORE_VERDICTS:
        if score >= floor:
            return label
    return SCORE_VERDICTS[-1][1]
