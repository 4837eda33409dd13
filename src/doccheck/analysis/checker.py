"""Consistency checking: alias grouping, then rules in parallel."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from doccheck.analysis.aliases import build_alias_groups
from doccheck.analysis.corpus import Corpus
from doccheck.analysis.pipeline import ParallelGroup, PipelineStage
from doccheck.analysis.schemas import Finding, sort_findings
from doccheck.errors import ConflictError
from doccheck.rules import ConsistencyRule, default_rules

logger = logging.getLogger(__name__)


@dataclass
class RuleFailure:
    """A rule that raised instead of returning findings."""

    rule: str
    error: str


@dataclass
class CheckResult:
    """Merged output of every rule over one corpus."""

    findings: list[Finding] = field(
        default_factory=lambda: list[Finding]()
    )
    conflicts: list[ConflictError] = field(
        default_factory=lambda: list[ConflictError]()
    )
    failures: list[RuleFailure] = field(
        default_factory=lambda: list[RuleFailure]()
    )

    def findings_for(self, path: str) -> list[Finding]:
        """Findings citing ``path``, including cross-document ones."""
        return [f for f in self.findings if f.cites(path)]


async def check_corpus(
    corpus: Corpus,
    rules: list[ConsistencyRule] | None = None,
) -> CheckResult:
    """Group aliases, run rules concurrently, merge their findings.

    Must only be called once every document has been scanned; the
    registry has to be complete for cross-document rules.
    """
    conflicts = build_alias_groups(
        corpus.registry,
        corpus.settings.aliases,
        corpus.settings.entry_points,
    )
    active = rules if rules is not None else default_rules()

    group: ParallelGroup[Corpus] = ParallelGroup(
        name="rules",
        stages=[
            PipelineStage(name=rule.name, execute=rule.check)
            for rule in active
        ],
        max_concurrency=corpus.settings.max_concurrency,
    )
    results = await group.execute(corpus)

    merged: dict[str, Finding] = {}
    failures: list[RuleFailure] = []
    for result in results:
        if not result.ok:
            logger.error(
                "event=rule_failed rule=%s error=%s",
                result.stage_name,
                result.error,
            )
            failures.append(
                RuleFailure(rule=result.stage_name, error=result.error or "")
            )
            continue
        for finding in result.output or []:
            merged.setdefault(finding.finding_id, finding)

    findings = sort_findings(list(merged.values()))
    logger.info(
        "event=check_done findings=%d conflicts=%d rule_failures=%d",
        len(findings),
        len(conflicts),
        len(failures),
    )
    return CheckResult(
        findings=findings, conflicts=conflicts, failures=failures
    )
