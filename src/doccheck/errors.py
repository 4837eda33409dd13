"""Error taxonomy for a consistency-check run.

Per-document errors are isolated by the run coordinator and recorded in
the manifest; only :class:`IOReadError` on the input root aborts a run.
"""

from __future__ import annotations

from pathlib import Path


class DocCheckError(Exception):
    """Base class for all doccheck errors."""


class ParseWarning(UserWarning):
    """Non-fatal extraction problem, e.g. an unbalanced code fence.

    Collected by the extractor rather than raised.
    """

    def __init__(self, path: str, line: int, message: str) -> None:
        super().__init__(f"{path}:{line}: {message}")
        self.path = path
        self.line = line
        self.message = message


class ConflictError(DocCheckError):
    """Two alias groups with incompatible canonical spellings."""

    def __init__(
        self,
        first: str,
        second: str,
        canonicals: tuple[str, str],
        rules: tuple[str, str],
    ) -> None:
        super().__init__(
            f"cannot merge {first!r} and {second!r}: canonical "
            f"{canonicals[0]!r} ({rules[0]}) conflicts with "
            f"{canonicals[1]!r} ({rules[1]})"
        )
        self.first = first
        self.second = second
        self.canonicals = canonicals
        self.rules = rules


class MalformedFindingError(DocCheckError):
    """A finding without a resolvable location reached the emitter."""


class IOWriteError(DocCheckError):
    """An output file could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot write {path}: {reason}")
        self.path = path
        self.reason = reason


class IOReadError(DocCheckError):
    """The input root could not be read. Fatal for the run."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class DocumentLoadError(DocCheckError):
    """A single document could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot load {path}: {reason}")
        self.path = path
        self.reason = reason
