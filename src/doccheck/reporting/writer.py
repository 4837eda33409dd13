"""Write reports and the manifest; wrap OS failures as IOWriteError."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from doccheck.errors import IOWriteError
from doccheck.reporting.manifest import RunManifest, render_tracker

logger = logging.getLogger(__name__)


def report_path_for(
    output_root: Path, document_path: str, suffix: str
) -> Path:
    """``guide/intro.mdx`` -> ``<output_root>/guide/intro.mdx.review.md``.

    The source suffix is kept so ``intro.md`` and ``intro.mdx`` get
    separate reports.
    """
    rel = PurePosixPath(document_path)
    return output_root.joinpath(*rel.parent.parts, rel.name + suffix)


def write_text(path: Path, content: str) -> Path:
    """Create parent directories and write ``content``.

    Raises :class:`IOWriteError` if the location is not writable.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as exc:
        raise IOWriteError(path, exc.strerror or str(exc)) from exc
    logger.debug("event=file_written path=%s bytes=%d", path, len(content))
    return path


def write_report(
    output_root: Path, document_path: str, content: str, suffix: str
) -> Path:
    return write_text(
        report_path_for(output_root, document_path, suffix), content
    )


def write_manifest(
    output_root: Path,
    manifest: RunManifest,
    manifest_filename: str,
    tracker_filename: str,
) -> tuple[Path, Path]:
    """Persist ``manifest.json`` and the markdown progress tracker."""
    json_path = write_text(
        output_root / manifest_filename,
        manifest.model_dump_json(indent=2) + "\n",
    )
    tracker_path = write_text(
        output_root / tracker_filename, render_tracker(manifest)
    )
    return json_path, tracker_path
