"""CLI entry point: ``doccheck check INPUT OUTPUT``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from doccheck import __version__
from doccheck.config import Settings, load_settings
from doccheck.constants import EXIT_CODES, RunOutcome, StageProgress
from doccheck.logging_config import setup_logging
from doccheck.reporting.manifest import RunManifest
from doccheck.services.events import StageEvent


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"doccheck {__version__}")
        return 0

    if args.command == "check":
        return _run_check(args)
    parser.print_help()
    return EXIT_CODES[RunOutcome.FAILED]


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="doccheck",
        description=(
            "Documentation consistency checker: finds naming drift, "
            "undefined commands and contradictions across a docs tree."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser(
        "check",
        help="Review every document under a directory",
    )
    check.add_argument(
        "input_root",
        type=str,
        help="Root of the documentation tree",
    )
    check.add_argument(
        "output_root",
        type=str,
        help="Directory for reports and the manifest",
    )
    check.add_argument(
        "--config",
        "-c",
        default=None,
        help="TOML settings file (default: ./doccheck.toml if present)",
    )
    check.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def _run_check(args: argparse.Namespace) -> int:
    """Execute the check command and map the outcome to an exit code."""
    from doccheck.services.run_service import run_check

    try:
        settings = _load(args.config)
    except (OSError, ValueError) as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CODES[RunOutcome.FAILED]

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    def on_progress(event: StageEvent) -> None:
        if args.verbose and event.status == StageProgress.RUNNING:
            print(f"  {event.label}...")

    input_root = Path(args.input_root).resolve()
    output_root = Path(args.output_root).resolve()
    print(f"Checking: {input_root}")

    manifest = asyncio.run(
        run_check(
            input_root,
            output_root,
            settings=settings,
            on_progress=on_progress,
        )
    )
    _print_summary(manifest, args.verbose)
    outcome = manifest.outcome or RunOutcome.FAILED
    return EXIT_CODES[outcome]


def _load(config: str | None) -> Settings:
    if config is None:
        return load_settings()
    return load_settings(Path(config))


def _print_summary(manifest: RunManifest, verbose: bool) -> None:
    if manifest.fatal_error:
        print(f"Error: {manifest.fatal_error}", file=sys.stderr)
    if verbose:
        for record in manifest.documents:
            print(f"  [{record.terminal_label}] {record.path}")
            for warning in record.warnings:
                print(f"    Warning: {warning}")
    counts = manifest.finding_counts
    print(
        f"\nDone! {len(manifest.documents)} documents, "
        f"{manifest.total_findings} findings "
        f"({counts.get('high', 0)} high, {counts.get('medium', 0)} medium, "
        f"{counts.get('low', 0)} low)"
    )
    if manifest.unresolved_ambiguities:
        print(
            f"{len(manifest.unresolved_ambiguities)} unresolved naming "
            "ambiguities need a manual decision"
        )
    print(f"Outcome: {manifest.outcome}")
    print(f"Output: {manifest.output_root}/")


if __name__ == "__main__":
    sys.exit(main())
