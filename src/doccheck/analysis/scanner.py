"""Per-document scan: terms, listings, facts and parse warnings."""

from __future__ import annotations

from doccheck.analysis.facts import extract_facts
from doccheck.analysis.glossary import GlossaryRegistry
from doccheck.analysis.schemas import DocumentScan
from doccheck.analysis.terms import extract_listing_entries, extract_terms
from doccheck.config import Settings
from doccheck.errors import ParseWarning
from doccheck.ingestion.schemas import Document


def scan_document(document: Document, settings: Settings) -> DocumentScan:
    """Run every extractor over one document."""
    warnings: list[ParseWarning] = []
    occurrences = list(extract_terms(document, warnings=warnings))
    return DocumentScan(
        path=document.path,
        occurrences=occurrences,
        listing_entries=extract_listing_entries(
            document, settings.listing_headings, settings.listing_marker
        ),
        facts=extract_facts(document),
        warnings=warnings,
    )


def register_scan(registry: GlossaryRegistry, scan: DocumentScan) -> int:
    """Feed a scan's occurrences into the registry; return the count."""
    for occurrence in scan.occurrences:
        registry.register(occurrence)
    return len(scan.occurrences)
