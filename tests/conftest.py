"""Shared test fixtures: document trees and in-memory corpora."""

from collections.abc import Callable
from pathlib import Path

import pytest

from doccheck.analysis.corpus import Corpus
from doccheck.analysis.glossary import GlossaryRegistry
from doccheck.analysis.scanner import register_scan, scan_document
from doccheck.config import Settings
from doccheck.ingestion.loader import build_document

TRUST_LEVEL_DOCS = {
    "trust.md": (
        "# Trust\n"
        "\n"
        'The `--trust-level` flag is a "minimum trust level" for kits.\n'
    ),
    "install.md": (
        "# Install\n"
        "\n"
        'Use `--trust-level 9` to mean "only highly trusted" kits.\n'
    ),
}

ENTRY_POINT_DOCS = {
    "one.md": "# One\n\nRun `hyper init` to start.\n",
    "two.md": "# Two\n\nRun `hyperdev init` to start.\n",
    "three.md": "# Three\n\nRun `HyperDev init` to start.\n",
}

COMMAND_TABLE_DOCS = {
    "cli.md": (
        "# CLI\n"
        "\n"
        "## Commands\n"
        "\n"
        "| Command | Description |\n"
        "|---|---|\n"
        "| `hyper epic` | Manage epics |\n"
        "| `hyper init` | Start a project |\n"
    ),
    "plan.md": "# Planning\n\nCreate one with `hyper epic milestone`.\n",
}


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def write_docs(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative_path: text}`` under ``tmp_path/docs``."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "docs"
        root.mkdir(exist_ok=True)
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def make_corpus(
    settings: Settings,
) -> Callable[..., Corpus]:
    """Scan in-memory documents into a corpus (aliases not yet grouped)."""

    def _make(
        files: dict[str, str], cfg: Settings | None = None
    ) -> Corpus:
        active = cfg or settings
        registry = GlossaryRegistry(
            entry_points=active.entry_points,
            security_keywords=active.security_keywords,
        )
        documents = {
            rel: build_document(rel, text) for rel, text in files.items()
        }
        scans = {}
        for rel, doc in documents.items():
            scans[rel] = scan_document(doc, active)
            register_scan(registry, scans[rel])
        return Corpus(
            documents=documents,
            scans=scans,
            registry=registry,
            settings=active,
        )

    return _make


@pytest.fixture
def trust_level_docs() -> dict[str, str]:
    return dict(TRUST_LEVEL_DOCS)


@pytest.fixture
def entry_point_docs() -> dict[str, str]:
    return dict(ENTRY_POINT_DOCS)


@pytest.fixture
def command_table_docs() -> dict[str, str]:
    return dict(COMMAND_TABLE_DOCS)
