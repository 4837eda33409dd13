"""Pydantic models for the ingestion data flow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    """A whitespace-delimited token with its 1-based position."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    text: str


class Location(BaseModel):
    """A line range inside one document (1-based, inclusive)."""

    model_config = ConfigDict(frozen=True)

    path: str
    line_start: int
    line_end: int

    @classmethod
    def at(cls, path: str, line: int) -> Location:
        return cls(path=path, line_start=line, line_end=line)

    def __str__(self) -> str:
        if self.line_start == self.line_end:
            return f"{self.path}:{self.line_start}"
        return f"{self.path}:{self.line_start}-{self.line_end}"


class Document(BaseModel):
    """A single loaded page. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    path: str  # POSIX path relative to the input root
    text: str
    title: str
    tokens: tuple[Token, ...] = Field(default_factory=tuple)

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def has_line(self, line: int) -> bool:
        return 1 <= line <= self.line_count

    def line_text(self, line: int) -> str:
        """Return the 1-based line, or raise IndexError."""
        if not self.has_line(line):
            msg = f"{self.path} has no line {line}"
            raise IndexError(msg)
        return self.lines[line - 1]
