"""Document ingestion: discover pages under a root and load them."""

from doccheck.ingestion.loader import (
    build_document,
    discover_documents,
    extract_title,
    load_document,
)
from doccheck.ingestion.schemas import Document, Location, Token

__all__ = [
    "Document",
    "Location",
    "Token",
    "build_document",
    "discover_documents",
    "extract_title",
    "load_document",
]
