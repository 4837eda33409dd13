"""Term extraction from a single document.

Extraction is pure: the same Document always yields the same ordered
occurrences. Matchers run independently per prose line; overlapping
matches at one offset keep the longest.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from doccheck.analysis.schemas import ListingEntry, TermOccurrence
from doccheck.constants import TermKind
from doccheck.errors import ParseWarning
from doccheck.ingestion.schemas import Document, Location

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s{0,3}(?P<fence>`{3,}|~{3,})")
_CODE_SPAN_RE = re.compile(r"`([^`\n]+)`")
_PACKAGE_RE = re.compile(r"@[a-z0-9][\w.-]*/[a-z0-9][\w.-]*[a-z0-9]")
_EXTENSION_RE = re.compile(r"\*(?:\.[A-Za-z0-9]+)+")
_FLAG_RE = re.compile(r"--?[A-Za-z][\w-]*")
_COMMAND_SHAPE_RE = re.compile(r"^[A-Za-z][\w-]*(?:\s+\S+)*$")
_SUBCOMMAND_RE = re.compile(r"^[a-z][a-z0-9-]*(?::[a-z0-9-]+)?$")
_HEADING_RE = re.compile(r"^#{1,6}\s+(?P<text>.+?)\s*#*\s*$")
_TABLE_SEPARATOR_RE = re.compile(r"^\|?\s*:?-{3,}")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<body>.*)$")
_SEPARATORS_RE = re.compile(r"[-_.\s]")
_PROMPT_RE = re.compile(r"^\$\s+")


@dataclass(frozen=True)
class Match:
    """A raw matcher hit on one line (0-based columns)."""

    start: int
    end: int
    kind: TermKind
    surface: str
    invocation: tuple[str, ...] | None = None

    @property
    def length(self) -> int:
        return self.end - self.start


Matcher: TypeAlias = Callable[[str], Iterator[Match]]


# ── Normalization ────────────────────────────────────────


def normalize(surface: str) -> str:
    """Strip formatting but keep case and separators."""
    text = surface.strip().strip("`'\"")
    text = _PROMPT_RE.sub("", text)
    return text.rstrip(".,;:!?)").strip()


def variant_key(normalized: str) -> str:
    """Lowercase, separator-free key shared by case/separator variants.

    Leading dashes are kept so ``--name`` never collides with ``name``.
    """
    stripped = normalized.lstrip("-")
    dashes = normalized[: len(normalized) - len(stripped)]
    return dashes + _SEPARATORS_RE.sub("", stripped.lower())


def subcommand_path(invocation: tuple[str, ...]) -> tuple[str, ...]:
    """Leading subcommand words after the head of an invocation.

    Stops at the first flag, placeholder or argument-looking token.
    """
    path: list[str] = []
    for word in invocation[1:]:
        if not _SUBCOMMAND_RE.match(word):
            break
        path.append(word)
    return tuple(path)


def invocation_flags(invocation: tuple[str, ...]) -> tuple[str, ...]:
    flags: list[str] = []
    for word in invocation[1:]:
        m = _FLAG_RE.fullmatch(word.split("=", 1)[0])
        if m and word.startswith("-"):
            flags.append(m.group())
    return tuple(flags)


# ── Matchers ─────────────────────────────────────────────


def match_packages(line: str) -> Iterator[Match]:
    for m in _PACKAGE_RE.finditer(line):
        yield Match(m.start(), m.end(), TermKind.PACKAGE, m.group())


def match_extensions(line: str) -> Iterator[Match]:
    for m in _EXTENSION_RE.finditer(line):
        yield Match(m.start(), m.end(), TermKind.EXTENSION, m.group())


def match_flags(line: str) -> Iterator[Match]:
    """Inline code spans that are a flag, e.g. ```--force```."""
    for m in _CODE_SPAN_RE.finditer(line):
        content = m.group(1).strip()
        if not content.startswith("-"):
            continue
        flag = _FLAG_RE.match(content)
        if flag:
            yield Match(m.start(), m.end(), TermKind.FLAG, flag.group())


def match_commands(line: str) -> Iterator[Match]:
    """Inline code spans shaped like ``word [subword ...]``."""
    for m in _CODE_SPAN_RE.finditer(line):
        content = _PROMPT_RE.sub("", m.group(1).strip())
        if not _COMMAND_SHAPE_RE.match(content):
            continue
        words = tuple(content.split())
        yield Match(
            m.start(),
            m.end(),
            TermKind.COMMAND,
            words[0],
            invocation=words,
        )


DEFAULT_MATCHERS: tuple[Matcher, ...] = (
    match_packages,
    match_extensions,
    match_flags,
    match_commands,
)


def _dedupe(matches: list[Match]) -> list[Match]:
    """Keep the longest match at each start offset."""
    ordered = sorted(matches, key=lambda m: (m.start, -m.length))
    kept: list[Match] = []
    seen_starts: set[int] = set()
    for match in ordered:
        if match.start in seen_starts:
            continue
        seen_starts.add(match.start)
        kept.append(match)
    return kept


# ── Prose iteration ──────────────────────────────────────


def iter_prose_lines(
    document: Document,
    warnings: list[ParseWarning] | None = None,
) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, text)`` for lines outside fenced code.

    An opening fence with no matching close is reported as a
    :class:`ParseWarning`; the rest of the document is then read as
    prose.
    """
    lines = document.lines
    i = 0
    while i < len(lines):
        opening = _FENCE_RE.match(lines[i])
        if opening is None:
            yield i + 1, lines[i]
            i += 1
            continue
        fence = opening.group("fence")
        close = _find_fence_close(lines, i + 1, fence)
        if close is None:
            # Only the caller collecting warnings logs them, so a
            # document read by several passes warns once.
            if warnings is not None:
                warning = ParseWarning(
                    document.path, i + 1, "unbalanced code fence"
                )
                logger.warning(
                    "event=parse_warning path=%s line=%d reason=%s",
                    document.path,
                    i + 1,
                    warning.message,
                )
                warnings.append(warning)
            i += 1
            continue
        i = close + 1


def _find_fence_close(
    lines: list[str], start: int, fence: str
) -> int | None:
    for j in range(start, len(lines)):
        stripped = lines[j].strip()
        if (
            stripped.startswith(fence[0] * len(fence))
            and set(stripped) == {fence[0]}
        ):
            return j
    return None


# ── Extraction ───────────────────────────────────────────


def extract_terms(
    document: Document,
    matchers: tuple[Matcher, ...] = DEFAULT_MATCHERS,
    warnings: list[ParseWarning] | None = None,
) -> Iterator[TermOccurrence]:
    """Lazily yield term occurrences in document order.

    Restartable: each call re-reads the immutable document.
    """
    for lineno, line in iter_prose_lines(document, warnings):
        hits: list[Match] = []
        for matcher in matchers:
            hits.extend(matcher(line))
        for match in _dedupe(hits):
            yield from _occurrences(document.path, lineno, match)


def _occurrences(
    path: str, lineno: int, match: Match
) -> Iterator[TermOccurrence]:
    location = Location.at(path, lineno)
    normalized = normalize(match.surface)
    if not normalized:
        return
    yield TermOccurrence(
        surface=match.surface,
        normalized=normalized,
        kind=match.kind,
        location=location,
        column=match.start + 1,
        invocation=match.invocation,
    )
    if match.invocation is None:
        return
    # Flags used inside a command span are terms of their own
    for flag in invocation_flags(match.invocation):
        yield TermOccurrence(
            surface=flag,
            normalized=normalize(flag),
            kind=TermKind.FLAG,
            location=location,
            column=match.start + 1,
        )


def extract_listing_entries(
    document: Document,
    listing_headings: list[str],
    listing_marker: str,
) -> list[ListingEntry]:
    """Names enumerated by authoritative listings in ``document``.

    A listing is the first table or list following the marker comment
    or a heading named in ``listing_headings``.
    """
    entries: list[ListingEntry] = []
    armed = False
    in_block = False
    headings = {h.lower() for h in listing_headings}
    for lineno, line in iter_prose_lines(document):
        stripped = line.strip()
        heading = _HEADING_RE.match(stripped)
        if heading is not None:
            armed = heading.group("text").strip().lower() in headings
            in_block = False
            continue
        if listing_marker and stripped == listing_marker:
            armed = True
            in_block = False
            continue
        if not armed:
            continue
        names = _row_names(stripped)
        if names is None:
            if in_block:
                armed = False
                in_block = False
            continue
        in_block = True
        location = Location.at(document.path, lineno)
        entries.extend(
            ListingEntry(name=name, location=location) for name in names
        )
    return entries


def _row_names(stripped: str) -> list[str] | None:
    """Names in one table row or list item; None if not a row."""
    if stripped.startswith("|"):
        if _TABLE_SEPARATOR_RE.match(stripped):
            return []
        cells = [c.strip() for c in stripped.strip("|").split("|")]
        body = " | ".join(cells)
        first = cells[0] if cells else ""
    else:
        item = _LIST_ITEM_RE.match(stripped)
        if item is None:
            return None
        body = item.group("body")
        first = body.split(" ", 1)[0] if body else ""
    spans = _CODE_SPAN_RE.findall(body)
    if not spans:
        spans = [first.strip("*_")]
    names: list[str] = []
    for span in spans:
        for word in _PROMPT_RE.sub("", span).split():
            word = word.split("=", 1)[0]
            if word.startswith(("<", "[", "{")):
                continue
            word = normalize(word)
            if word and word not in names:
                names.append(word)
    return names
