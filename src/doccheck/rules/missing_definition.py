"""Reference without definition: subcommands no listing enumerates."""

from __future__ import annotations

import logging
from collections import defaultdict

from doccheck.analysis.corpus import Corpus
from doccheck.analysis.schemas import Finding
from doccheck.analysis.severity import assign_severity
from doccheck.constants import Category, Severity, TermRole
from doccheck.ingestion.schemas import Location
from doccheck.rules.base import ConsistencyRule

logger = logging.getLogger(__name__)


class MissingDefinitionRule(ConsistencyRule):
    """Flag subcommand words (and flags) used with an entry point that
    never appear in an authoritative command/flag listing.

    Flags are only checked once some listing enumerates flags. With no
    listing anywhere in the corpus the rule has nothing to compare
    against and is skipped.
    """

    name = "missing-definition"
    category = Category.MISSING_DEFINITION
    base_severity = Severity.MEDIUM

    def check(self, corpus: Corpus) -> list[Finding]:
        entries = corpus.listing_entries()
        if not entries:
            logger.info(
                "event=rule_skipped rule=%s reason=no_listing", self.name
            )
            return []
        listed = corpus.listed_names()
        check_flags = any(e.is_flag for e in entries)
        registry = corpus.registry

        words: dict[str, list[Location]] = defaultdict(list)
        examples: dict[str, str] = {}
        flags: dict[str, list[Location]] = defaultdict(list)
        for ref in registry.invocations():
            if registry.role_of(ref.head) != TermRole.ENTRY_POINT:
                continue
            usage = " ".join((ref.head, *ref.path))
            for word in ref.path:
                if word.lower() not in listed:
                    words[word].append(ref.location)
                    examples.setdefault(word, usage)
            if check_flags:
                for flag in ref.flags:
                    if flag.lower() not in listed:
                        flags[flag].append(ref.location)
                        examples.setdefault(flag, usage)

        findings: list[Finding] = []
        for word in sorted(words):
            findings.append(
                Finding.create(
                    rule=self.name,
                    severity=self.base_severity,
                    category=self.category,
                    subject=word,
                    locations=words[word],
                    description=(
                        f"`{examples[word]}` uses the subcommand "
                        f"`{word}`, which no command reference lists."
                    ),
                    suggested_fix=(
                        f"Add `{word}` to the command reference table, "
                        "or remove the examples that use it."
                    ),
                )
            )
        for flag in sorted(flags):
            findings.append(
                Finding.create(
                    rule=self.name,
                    severity=assign_severity(
                        self.base_severity, registry.role_of(flag)
                    ),
                    category=self.category,
                    subject=flag,
                    locations=flags[flag],
                    description=(
                        f"`{examples[flag]}` is shown with `{flag}`, "
                        "which no flag reference lists."
                    ),
                    suggested_fix=(
                        f"Document `{flag}` in the flag reference, "
                        "including its default value."
                    ),
                )
            )
        return findings
