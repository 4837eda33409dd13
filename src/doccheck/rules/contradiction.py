"""Contradiction: documents assert different values for one fact."""

from __future__ import annotations

import logging
from collections import defaultdict

from doccheck.analysis.corpus import Corpus
from doccheck.analysis.facts import PREDICATE_DEFAULT
from doccheck.analysis.schemas import Fact, Finding
from doccheck.constants import Category, Severity
from doccheck.rules.base import ConsistencyRule

logger = logging.getLogger(__name__)


class ContradictionRule(ConsistencyRule):
    """Literal comparison of "defaults to" / "means" assertions.

    Fires once per (subject, predicate) when at least two documents
    disagree. Always High.
    """

    name = "contradiction"
    category = Category.PARAMETER_SEMANTICS
    base_severity = Severity.HIGH

    def check(self, corpus: Corpus) -> list[Finding]:
        grouped: dict[tuple[str, str], list[Fact]] = defaultdict(list)
        for fact in corpus.facts():
            grouped[(fact.subject, fact.predicate)].append(fact)

        findings: list[Finding] = []
        for (subject, predicate), facts in sorted(grouped.items()):
            values = {f.value for f in facts}
            documents = {f.location.path for f in facts}
            if len(values) < 2 or len(documents) < 2:
                continue
            category = (
                Category.PARAMETER_SEMANTICS
                if subject.startswith("-")
                else Category.WORKFLOW_LOGIC
            )
            claims = "; ".join(
                f"{f.raw_value} ({f.location})"
                for f in sorted(
                    facts,
                    key=lambda f: (f.location.path, f.location.line_start),
                )
            )
            what = (
                "default value"
                if predicate == PREDICATE_DEFAULT
                else "meaning"
            )
            findings.append(
                Finding.create(
                    rule=self.name,
                    severity=self.base_severity,
                    category=category,
                    subject=f"{subject} ({what})",
                    locations=[f.location for f in facts],
                    description=(
                        f"Documents disagree on the {what} of "
                        f"`{subject}`: {claims}."
                    ),
                    suggested_fix=(
                        f"Decide the {what} of `{subject}` once, state it "
                        "in the reference page and link to it elsewhere."
                    ),
                )
            )
        logger.debug(
            "event=rule_done rule=%s findings=%d", self.name, len(findings)
        )
        return findings
