"""Naming drift: one concept spelled several ways."""

from __future__ import annotations

import logging

from doccheck.analysis.corpus import Corpus
from doccheck.analysis.severity import assign_severity
from doccheck.analysis.schemas import Finding
from doccheck.constants import Category, Severity, TermRole
from doccheck.ingestion.schemas import Location
from doccheck.rules.base import ConsistencyRule

logger = logging.getLogger(__name__)

_ROLE_LABELS = {
    TermRole.ENTRY_POINT: "CLI entry point",
    TermRole.PACKAGE: "package name",
    TermRole.SECURITY: "security-relevant parameter",
    TermRole.ORDINARY: "term",
}


class NamingDriftRule(ConsistencyRule):
    """One finding per alias group with more than one spelling in use.

    High for entry points and package names, Medium otherwise.
    """

    name = "naming-drift"
    category = Category.NAMING
    base_severity = Severity.MEDIUM

    def check(self, corpus: Corpus) -> list[Finding]:
        registry = corpus.registry
        findings: list[Finding] = []
        for group in registry.groups():
            terms = [
                term
                for m in sorted(group.members)
                if (term := registry.term(m)) and term.occurrences
            ]
            if len(terms) < 2:
                continue
            in_use = [term.normalized for term in terms]
            locations: list[Location] = [
                loc for term in terms for loc in term.locations
            ]
            role = registry.role_of_group(group)
            severity = assign_severity(
                self.base_severity,
                role,
                extra_roles=frozenset({TermRole.PACKAGE}),
            )
            spellings = ", ".join(f"`{m}`" for m in in_use)
            findings.append(
                Finding.create(
                    rule=self.name,
                    severity=severity,
                    category=self.category,
                    subject=group.canonical,
                    locations=locations,
                    description=(
                        f"The {_ROLE_LABELS[role]} `{group.canonical}` is "
                        f"spelled {len(in_use)} ways across the "
                        f"documentation: {spellings}."
                    ),
                    suggested_fix=(
                        f"Standardize on `{group.canonical}` everywhere "
                        "and add it to the glossary."
                    ),
                    surface_forms=tuple(in_use),
                )
            )
        logger.debug(
            "event=rule_done rule=%s findings=%d", self.name, len(findings)
        )
        return findings
