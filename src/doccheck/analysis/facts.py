"""Literal fact extraction for the contradiction rule.

Matches only explicit phrasings ("defaults to", "means", "is a") and
compares values as text. No semantic inference.
"""

from __future__ import annotations

import re

from doccheck.analysis.schemas import Fact
from doccheck.analysis.terms import iter_prose_lines, normalize
from doccheck.ingestion.schemas import Document, Location

PREDICATE_DEFAULT = "default"
PREDICATE_MEANING = "meaning"

_SUBJECT = r"`(?P<subject>[^`\n]+)`"
_NOUN = (
    r"(?:\s+(?:flag|option|parameter|setting|argument|field|command))?"
)
_VALUE = (
    r"(?P<value>`[^`]+`|\"[^\"]+\"|“[^”]+”"
    r"|'[^']+'|[^\s,;:()]+)"
)

_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        PREDICATE_DEFAULT,
        re.compile(_SUBJECT + _NOUN + r"\s+defaults\s+to\s+" + _VALUE),
    ),
    (
        PREDICATE_DEFAULT,
        re.compile(
            _SUBJECT
            + _NOUN
            + r"\s*\(\s*defaults?(?:\s+(?:is|to))?\s*[:=]?\s*"
            + r"(?P<value>[^)]+)\)",
            re.IGNORECASE,
        ),
    ),
    (
        PREDICATE_MEANING,
        re.compile(
            _SUBJECT + _NOUN + r"\s+(?:means|to\s+mean)\s+" + _VALUE
        ),
    ),
    # "is a" only counts with a quoted value; bare prose is too loose
    (
        PREDICATE_MEANING,
        re.compile(
            _SUBJECT
            + _NOUN
            + r"\s+is\s+(?:a|an|the)\s+"
            + r"(?P<value>\"[^\"]+\"|“[^”]+”)"
        ),
    ),
)

_QUOTES = "`\"'“”"


def normalize_value(raw: str) -> str:
    """Comparison form: unquoted, lowercased, single-spaced."""
    value = raw.strip().rstrip(".,;:!?").strip(_QUOTES).strip()
    return re.sub(r"\s+", " ", value).lower()


def fact_subject(raw_subject: str) -> str:
    """First token of the span: ``--trust-level 9`` -> ``--trust-level``."""
    parts = normalize(raw_subject).split()
    return parts[0] if parts else ""


def extract_facts(document: Document) -> list[Fact]:
    """All default/meaning assertions in prose, in document order."""
    facts: list[Fact] = []
    for lineno, line in iter_prose_lines(document):
        for predicate, pattern in _PATTERNS:
            for m in pattern.finditer(line):
                subject = fact_subject(m.group("subject"))
                value = normalize_value(m.group("value"))
                if not subject or not value:
                    continue
                facts.append(
                    Fact(
                        subject=subject,
                        predicate=predicate,
                        value=value,
                        raw_value=m.group("value").strip(),
                        location=Location.at(document.path, lineno),
                    )
                )
    return facts
