"""Tests for term matchers, normalization and listing extraction."""

from __future__ import annotations

import logging

from doccheck.analysis.terms import (
    extract_listing_entries,
    extract_terms,
    iter_prose_lines,
    match_commands,
    match_extensions,
    match_flags,
    match_packages,
    normalize,
    subcommand_path,
    variant_key,
)
from doccheck.constants import TermKind
from doccheck.errors import ParseWarning
from doccheck.ingestion.loader import build_document

LISTING_HEADINGS = ["commands", "flags"]
MARKER = "<!-- doccheck:commands -->"


class TestNormalization:
    def test_normalize_strips_formatting(self) -> None:
        assert normalize("`hyper`") == "hyper"
        assert normalize("$ hyper init") == "hyper init"
        assert normalize("HyperDev.") == "HyperDev"

    def test_variant_key_merges_case_and_separators(self) -> None:
        assert variant_key("HyperDev") == variant_key("hyperdev")
        assert variant_key("hyper-dev") == variant_key("hyper_dev")
        assert variant_key("hyper") != variant_key("hyperdev")

    def test_variant_key_keeps_leading_dashes(self) -> None:
        assert variant_key("--Force") == "--force"
        assert variant_key("--force") != variant_key("force")

    def test_subcommand_path_stops_at_arguments(self) -> None:
        words = ("hyper", "epic", "create", "--name", "x")
        assert subcommand_path(words) == ("epic", "create")
        assert subcommand_path(("hyper", "<name>")) == ()
        assert subcommand_path(("hyper",)) == ()


class TestMatchers:
    def test_packages(self) -> None:
        hits = list(match_packages("install @hypergen/cli now"))
        assert [(h.surface, h.kind) for h in hits] == [
            ("@hypergen/cli", TermKind.PACKAGE)
        ]

    def test_extensions(self) -> None:
        hits = list(match_extensions("templates use *.ejs.t files"))
        assert [h.surface for h in hits] == ["*.ejs.t"]
        assert hits[0].kind == TermKind.EXTENSION

    def test_flags_only_in_code_spans(self) -> None:
        hits = list(match_flags("pass `--force` or --dry-run"))
        assert [h.surface for h in hits] == ["--force"]

    def test_flag_with_value(self) -> None:
        hits = list(match_flags("use `--trust-level 9`"))
        assert [h.surface for h in hits] == ["--trust-level"]

    def test_commands_capture_invocation(self) -> None:
        hits = list(match_commands("run `hyper epic create --name x`"))
        assert len(hits) == 1
        assert hits[0].surface == "hyper"
        assert hits[0].invocation == (
            "hyper", "epic", "create", "--name", "x",
        )

    def test_commands_reject_non_command_spans(self) -> None:
        assert list(match_commands("see `--force` and `./path`")) == []


class TestExtractTerms:
    def test_document_order_and_positions(self) -> None:
        doc = build_document(
            "a.md",
            "# A\n\nRun `hyper init --force` then\ninstall `@hypergen/cli`.\n",
        )
        found = [
            (o.normalized, o.kind, o.location.line_start, o.column)
            for o in extract_terms(doc)
        ]
        assert found == [
            ("hyper", TermKind.COMMAND, 3, 5),
            ("--force", TermKind.FLAG, 3, 5),
            ("@hypergen/cli", TermKind.PACKAGE, 4, 10),
        ]

    def test_extraction_is_pure(self) -> None:
        doc = build_document("a.md", "Use `hyper init` and `--force`.\n")
        assert list(extract_terms(doc)) == list(extract_terms(doc))

    def test_fenced_code_is_skipped(self) -> None:
        doc = build_document(
            "a.md",
            "Intro `hyper`\n```bash\n`hidden-cmd run`\n```\nAfter\n",
        )
        names = [o.normalized for o in extract_terms(doc)]
        assert names == ["hyper"]

    def test_unbalanced_fence_warns_and_continues(self) -> None:
        doc = build_document(
            "a.md", "Intro\n```bash\nRun `hyper init` here\n"
        )
        warnings: list[ParseWarning] = []
        names = [o.normalized for o in extract_terms(doc, warnings=warnings)]
        assert names == ["hyper"]
        assert len(warnings) == 1
        assert warnings[0].line == 2
        assert str(warnings[0]) == "a.md:2: unbalanced code fence"

    def test_unbalanced_fence_logged_once(self, caplog) -> None:
        doc = build_document("a.md", "```\nnever closed\n")
        warnings: list[ParseWarning] = []
        with caplog.at_level(logging.WARNING, logger="doccheck.analysis"):
            list(extract_terms(doc, warnings=warnings))
            list(iter_prose_lines(doc))
        assert caplog.text.count("event=parse_warning") == 1

    def test_custom_matchers(self) -> None:
        doc = build_document("a.md", "`--force` and `hyper`\n")
        kinds = {o.kind for o in extract_terms(doc, (match_flags,))}
        assert kinds == {TermKind.FLAG}

    def test_no_terms_in_plain_prose(self) -> None:
        doc = build_document("a.md", "# Title\n\nJust words here.\n")
        assert list(extract_terms(doc)) == []


class TestIterProseLines:
    def test_tilde_fences(self) -> None:
        doc = build_document("a.md", "one\n~~~\ncode\n~~~\ntwo\n")
        assert [n for n, _ in iter_prose_lines(doc)] == [1, 5]


class TestListingEntries:
    def test_table_under_heading(self) -> None:
        doc = build_document(
            "cli.md",
            "# CLI\n\n## Commands\n\n| Command | Description |\n"
            "|---|---|\n| `hyper epic` | Epics |\n| `init` | Start |\n",
        )
        entries = extract_listing_entries(doc, LISTING_HEADINGS, MARKER)
        assert [(e.name, e.location.line_start) for e in entries] == [
            ("Command", 5),
            ("hyper", 7),
            ("epic", 7),
            ("init", 8),
        ]

    def test_list_after_marker(self) -> None:
        doc = build_document(
            "ref.md",
            "Intro\n\n<!-- doccheck:commands -->\n- `plan`\n- `--force`\n"
            "\nLater `- not listed`\n",
        )
        entries = extract_listing_entries(doc, LISTING_HEADINGS, MARKER)
        assert [e.name for e in entries] == ["plan", "--force"]
        assert entries[1].is_flag

    def test_placeholders_skipped(self) -> None:
        doc = build_document(
            "ref.md", "## Commands\n\n- `hyper run <name> [opts]`\n"
        )
        entries = extract_listing_entries(doc, LISTING_HEADINGS, MARKER)
        assert [e.name for e in entries] == ["hyper", "run"]

    def test_other_headings_disarm(self) -> None:
        doc = build_document(
            "ref.md", "## Commands\n\n## Usage\n\n- `deploy`\n"
        )
        assert extract_listing_entries(doc, LISTING_HEADINGS, MARKER) == []

    def test_only_first_block_counts(self) -> None:
        doc = build_document(
            "ref.md",
            "## Commands\n\n- `plan`\n\nSome prose.\n\n- `other`\n",
        )
        entries = extract_listing_entries(doc, LISTING_HEADINGS, MARKER)
        assert [e.name for e in entries] == ["plan"]
