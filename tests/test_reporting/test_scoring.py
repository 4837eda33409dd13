"""Tests for report scoring and verdicts."""

from __future__ import annotations

from doccheck.analysis.schemas import Finding
from doccheck.constants import Category, Severity
from doccheck.ingestion.schemas import Location
from doccheck.reporting.scoring import compute_score, severity_counts, verdict


def _finding(subject: str, severity: Severity) -> Finding:
    return Finding.create(
        rule="test",
        severity=severity,
        category=Category.NAMING,
        subject=subject,
        locations=[Location.at("a.md", 1)],
        description="d",
        suggested_fix="f",
    )


class TestScoring:
    def test_no_findings_is_perfect(self) -> None:
        assert compute_score([]) == 10.0
        assert verdict(10.0) == "Consistent"

    def test_default_weights(self) -> None:
        findings = [
            _finding("a", Severity.HIGH),
            _finding("b", Severity.MEDIUM),
            _finding("c", Severity.LOW),
        ]
        assert compute_score(findings) == 9.2

    def test_clamped_at_zero(self) -> None:
        findings = [_finding(str(i), Severity.HIGH) for i in range(40)]
        assert compute_score(findings) == 0.0
        assert verdict(0.0) == "Major rework required"

    def test_custom_weights(self) -> None:
        findings = [_finding("a", Severity.HIGH)]
        assert compute_score(findings, {"high": 3.0}) == 7.0

    def test_monotonic(self) -> None:
        findings: list[Finding] = []
        previous = compute_score(findings)
        for i, sev in enumerate([Severity.LOW, Severity.HIGH] * 5):
            findings.append(_finding(str(i), sev))
            score = compute_score(findings)
            assert score <= previous
            previous = score

    def test_counts_include_every_severity(self) -> None:
        counts = severity_counts([_finding("a", Severity.LOW)])
        assert counts == {
            Severity.HIGH: 0,
            Severity.MEDIUM: 0,
            Severity.LOW: 1,
        }

    def test_verdict_bands(self) -> None:
        assert verdict(9.0) == "Consistent"
        assert verdict(8.9) == "Minor inconsistencies"
        assert verdict(4.0) == "Needs revision"
        assert verdict(3.9) == "Major rework required"
