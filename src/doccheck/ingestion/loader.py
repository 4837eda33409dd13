"""Discover and load documentation pages from an input root."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pathspec
import yaml

from doccheck.config import Settings
from doccheck.errors import DocumentLoadError, IOReadError
from doccheck.ingestion.schemas import Document, Token

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
_HEADING_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)
_TOKEN_RE = re.compile(r"\S+")


def discover_documents(
    root: Path, settings: Settings, exclude: Path | None = None
) -> list[Path]:
    """Return every document under ``root``, sorted.

    * Skips hidden directories and ``settings.skip_directories``.
    * Honours the root ``.gitignore``.
    * Keeps files whose suffix is in ``settings.extensions``.
    * Skips ``exclude`` (the report directory when nested in ``root``).

    Raises :class:`IOReadError` if the root cannot be listed.
    """
    if not root.exists():
        raise IOReadError(root, "does not exist")
    if not root.is_dir():
        raise IOReadError(root, "not a directory")

    extensions = set(settings.extensions)
    skip_dirs = set(settings.skip_directories)
    gitignore_spec = _load_gitignore(root)
    excluded = exclude.resolve() if exclude is not None else None
    try:
        files = _walk_files(root, skip_dirs, gitignore_spec, excluded)
    except OSError as exc:
        raise IOReadError(root, str(exc)) from exc
    return [f for f in files if f.suffix.lower() in extensions]


def _walk_files(
    root: Path,
    skip_dirs: set[str],
    gitignore_spec: pathspec.PathSpec,
    excluded: Path | None = None,
) -> list[Path]:
    """Collect regular files, skipping hidden and excluded directories.

    Symlinks resolving outside the root are skipped.
    """
    resolved_root = root.resolve()
    return _walk_files_inner(
        root, root, skip_dirs, gitignore_spec, resolved_root, excluded
    )


def _walk_files_inner(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    gitignore_spec: pathspec.PathSpec,
    resolved_root: Path,
    excluded: Path | None,
) -> list[Path]:
    files: list[Path] = []
    for item in sorted(current.iterdir()):
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name.startswith(".") or item.name in skip_dirs:
                continue
            if gitignore_spec.match_file(rel + "/"):
                continue
            if excluded is not None and item.resolve() == excluded:
                continue
            files.extend(
                _walk_files_inner(
                    item, root, skip_dirs, gitignore_spec,
                    resolved_root, excluded,
                )
            )
        elif item.is_file():
            if not gitignore_spec.match_file(rel):
                files.append(item)
    return files


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.PathSpec.from_lines("gitignore", [])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.PathSpec.from_lines("gitignore", f)
    except OSError:
        logger.warning("event=gitignore_unreadable path=%s", gitignore)
        return pathspec.PathSpec.from_lines("gitignore", [])


def load_document(root: Path, path: Path) -> Document:
    """Read one page into an immutable :class:`Document`.

    Raises :class:`DocumentLoadError` on I/O or decode failure.
    """
    rel = path.relative_to(root).as_posix()
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(rel, str(exc)) from exc
    return build_document(rel, text)


def build_document(rel_path: str, text: str) -> Document:
    """Tokenize ``text`` and derive a title."""
    tokens = tuple(
        Token(line=lineno, column=m.start() + 1, text=m.group())
        for lineno, line in enumerate(text.splitlines(), 1)
        for m in _TOKEN_RE.finditer(line)
    )
    return Document(
        path=rel_path,
        text=text,
        title=extract_title(rel_path, text),
        tokens=tokens,
    )


def extract_title(rel_path: str, text: str) -> str:
    """Frontmatter ``title:``, else the first ``#`` heading, else the stem."""
    fm = _FRONTMATTER_RE.match(text)
    if fm:
        title = _frontmatter_title(rel_path, fm.group(1))
        if title:
            return title
        body = text[fm.end():]
    else:
        body = text
    heading = _HEADING_RE.search(body)
    if heading:
        return heading.group(1)
    return Path(rel_path).stem


def _frontmatter_title(rel_path: str, block: str) -> str | None:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        logger.debug(
            "event=frontmatter_invalid path=%s error=%s", rel_path, exc
        )
        return None
    if not isinstance(data, dict):
        return None
    title = data.get("title")
    if title is None:
        return None
    return str(title).strip() or None
