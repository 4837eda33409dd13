"""Read-only view of one run's documents, scans and registry."""

from __future__ import annotations

from dataclasses import dataclass, field

from doccheck.analysis.glossary import GlossaryRegistry
from doccheck.analysis.schemas import DocumentScan, Fact, ListingEntry
from doccheck.config import Settings
from doccheck.ingestion.schemas import Document


@dataclass(frozen=True)
class Corpus:
    """Everything a rule may consult. Rules must not mutate it."""

    documents: dict[str, Document]
    scans: dict[str, DocumentScan]
    registry: GlossaryRegistry
    settings: Settings = field(default_factory=Settings)

    def listing_entries(self) -> list[ListingEntry]:
        return [
            entry
            for path in sorted(self.scans)
            for entry in self.scans[path].listing_entries
        ]

    def listed_names(self) -> set[str]:
        """Lowercased names enumerated by any authoritative listing."""
        return {e.name.lower() for e in self.listing_entries()}

    def facts(self) -> list[Fact]:
        return [
            fact
            for path in sorted(self.scans)
            for fact in self.scans[path].facts
        ]
