"""Pydantic models for extraction output and consistency findings."""

from __future__ import annotations

import hashlib

from pydantic import BaseModel, ConfigDict, Field

from doccheck.constants import (
    FINDING_ID_HEX_LENGTH,
    Category,
    Severity,
    TermKind,
)
from doccheck.errors import ParseWarning
from doccheck.ingestion.schemas import Location


class TermOccurrence(BaseModel):
    """One place a candidate identifier appears."""

    model_config = ConfigDict(frozen=True)

    surface: str
    normalized: str
    kind: TermKind
    location: Location
    column: int
    # Full word sequence of the code span this head came from
    invocation: tuple[str, ...] | None = None


class ListingEntry(BaseModel):
    """A name enumerated in an authoritative command/flag listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: Location

    @property
    def is_flag(self) -> bool:
        return self.name.startswith("-")


class Fact(BaseModel):
    """A literal assertion such as "`--x` defaults to `3`"."""

    model_config = ConfigDict(frozen=True)

    subject: str
    predicate: str  # "default" | "meaning"
    value: str  # normalized for comparison
    raw_value: str
    location: Location


class DocumentScan(BaseModel):
    """Everything the extractor learned from one document."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    occurrences: list[TermOccurrence] = Field(
        default_factory=lambda: list[TermOccurrence]()
    )
    listing_entries: list[ListingEntry] = Field(
        default_factory=lambda: list[ListingEntry]()
    )
    facts: list[Fact] = Field(default_factory=lambda: list[Fact]())
    warnings: list[ParseWarning] = Field(
        default_factory=lambda: list[ParseWarning]()
    )


class Finding(BaseModel):
    """One detected inconsistency. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    finding_id: str
    rule: str
    severity: Severity
    category: Category
    subject: str
    locations: tuple[Location, ...]
    description: str
    suggested_fix: str
    surface_forms: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        *,
        rule: str,
        severity: Severity,
        category: Category,
        subject: str,
        locations: list[Location] | tuple[Location, ...],
        description: str,
        suggested_fix: str,
        surface_forms: tuple[str, ...] = (),
    ) -> Finding:
        """Build a finding with a stable id and sorted locations."""
        digest = hashlib.sha1(
            f"{rule}\x00{subject}".encode(),
            usedforsecurity=False,
        ).hexdigest()[:FINDING_ID_HEX_LENGTH]
        ordered = tuple(
            sorted(
                set(locations),
                key=lambda loc: (loc.path, loc.line_start, loc.line_end),
            )
        )
        return cls(
            finding_id=digest,
            rule=rule,
            severity=severity,
            category=category,
            subject=subject,
            locations=ordered,
            description=description,
            suggested_fix=suggested_fix,
            surface_forms=surface_forms,
        )

    @property
    def paths(self) -> list[str]:
        """Distinct documents cited, in order."""
        seen: list[str] = []
        for loc in self.locations:
            if loc.path not in seen:
                seen.append(loc.path)
        return seen

    def cites(self, path: str) -> bool:
        return any(loc.path == path for loc in self.locations)


def sort_findings(findings: list[Finding]) -> list[Finding]:
    """Deterministic order: severity desc, then rule, then subject."""
    return sorted(
        findings,
        key=lambda f: (-f.severity.rank, f.rule, f.subject, f.finding_id),
    )
