"""Glossary registry: terms and alias groups for one run.

The registry is created by the run coordinator and passed explicitly to
every stage that needs it. All reads and writes go through one lock, so
documents can be scanned from worker threads.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field

from doccheck.analysis.schemas import TermOccurrence
from doccheck.analysis.terms import invocation_flags, subcommand_path
from doccheck.constants import TermKind, TermRole
from doccheck.errors import ConflictError
from doccheck.ingestion.schemas import Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TermHandle:
    """Stable reference to a registered term."""

    normalized: str


@dataclass
class Term:
    """A normalized identifier and every place it occurs."""

    normalized: str
    kinds: set[TermKind] = field(default_factory=lambda: set[TermKind]())
    occurrences: list[TermOccurrence] = field(
        default_factory=lambda: list[TermOccurrence]()
    )
    invoked_with_subcommand: bool = False

    @property
    def surface(self) -> str:
        """Surface form of the first occurrence in path/line order."""
        first = min(self.occurrences, key=_occurrence_key)
        return first.surface

    @property
    def first_seen(self) -> str:
        return min(self.occurrences, key=_occurrence_key).location.path

    @property
    def locations(self) -> list[Location]:
        return sorted(
            {o.location for o in self.occurrences},
            key=lambda loc: (loc.path, loc.line_start),
        )


@dataclass
class AliasGroup:
    """Terms judged to name one concept."""

    group_id: int
    canonical: str
    rule: str
    members: set[str] = field(default_factory=lambda: set[str]())


@dataclass(frozen=True)
class InvocationRef:
    """A command-shaped span: head term plus its subcommand path."""

    head: str
    path: tuple[str, ...]
    flags: tuple[str, ...]
    location: Location


def _occurrence_key(o: TermOccurrence) -> tuple[str, int, int]:
    return (o.location.path, o.location.line_start, o.column)


class GlossaryRegistry:
    """Lock-guarded table of terms and alias groups."""

    def __init__(
        self,
        entry_points: list[str] | None = None,
        security_keywords: list[str] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._terms: dict[str, Term] = {}
        self._seen: set[TermOccurrence] = set()
        self._groups: dict[int, AliasGroup] = {}
        self._group_by_member: dict[str, int] = {}
        self._next_group_id = itertools.count(1)
        self._entry_points = set(entry_points or [])
        self._security_keywords = tuple(security_keywords or [])

    # ── Registration ──────────────────────────────────────

    def register(self, occurrence: TermOccurrence) -> TermHandle:
        """Insert the term if new and record the occurrence.

        Idempotent: registering an identical occurrence twice records it
        once and returns the same handle.
        """
        with self._lock:
            term = self._terms.get(occurrence.normalized)
            if term is None:
                term = Term(normalized=occurrence.normalized)
                self._terms[occurrence.normalized] = term
            if occurrence not in self._seen:
                self._seen.add(occurrence)
                term.occurrences.append(occurrence)
                term.kinds.add(occurrence.kind)
                if occurrence.invocation and subcommand_path(
                    occurrence.invocation
                ):
                    term.invoked_with_subcommand = True
            return TermHandle(occurrence.normalized)

    # ── Lookup ────────────────────────────────────────────

    def term(self, normalized: str) -> Term | None:
        with self._lock:
            return self._terms.get(normalized)

    def terms(self) -> list[Term]:
        """All terms, sorted by normalized form."""
        with self._lock:
            return [self._terms[k] for k in sorted(self._terms)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._terms)

    def __contains__(self, normalized: object) -> bool:
        with self._lock:
            return normalized in self._terms

    def invocations(self) -> list[InvocationRef]:
        """Every command span with a head term, in path/line order."""
        refs: list[InvocationRef] = []
        with self._lock:
            for term in self._terms.values():
                for o in term.occurrences:
                    if o.invocation is None:
                        continue
                    refs.append(
                        InvocationRef(
                            head=term.normalized,
                            path=subcommand_path(o.invocation),
                            flags=invocation_flags(o.invocation),
                            location=o.location,
                        )
                    )
        return sorted(
            refs,
            key=lambda r: (
                r.location.path, r.location.line_start, r.head, r.path
            ),
        )

    # ── Roles ─────────────────────────────────────────────

    def role_of(self, normalized: str) -> TermRole:
        """Entry point > package > security parameter > ordinary."""
        with self._lock:
            term = self._terms.get(normalized)
            if term is None:
                return TermRole.ORDINARY
            if (
                normalized in self._entry_points
                or term.invoked_with_subcommand
            ):
                return TermRole.ENTRY_POINT
            if TermKind.PACKAGE in term.kinds:
                return TermRole.PACKAGE
            if TermKind.FLAG in term.kinds and any(
                kw in normalized.lower() for kw in self._security_keywords
            ):
                return TermRole.SECURITY
            return TermRole.ORDINARY

    def role_of_group(self, group: AliasGroup) -> TermRole:
        """The strongest role among the group's members."""
        order = (
            TermRole.ENTRY_POINT,
            TermRole.PACKAGE,
            TermRole.SECURITY,
            TermRole.ORDINARY,
        )
        roles = {self.role_of(m) for m in group.members}
        return next(r for r in order if r in roles)

    # ── Alias groups ──────────────────────────────────────

    def group_of(self, normalized: str) -> AliasGroup | None:
        with self._lock:
            gid = self._group_by_member.get(normalized)
            return self._groups[gid] if gid is not None else None

    def groups(self) -> list[AliasGroup]:
        """All alias groups, sorted by canonical spelling."""
        with self._lock:
            return sorted(
                self._groups.values(),
                key=lambda g: (g.canonical, g.group_id),
            )

    def merge(
        self,
        term_a: str,
        term_b: str,
        *,
        rule: str,
        canonical: str | None = None,
    ) -> AliasGroup:
        """Join two terms into one alias group.

        * Neither grouped: a new group whose canonical is ``canonical``
          or the most used spelling of the two.
        * One grouped: the other joins that group.
        * Distinct groups: folded together when their canonical spellings
          agree or were chosen by the same rule; otherwise
          :class:`ConflictError`.
        """
        with self._lock:
            for name in (term_a, term_b):
                if name not in self._terms:
                    msg = f"unknown term {name!r}"
                    raise KeyError(msg)
            gid_a = self._group_by_member.get(term_a)
            gid_b = self._group_by_member.get(term_b)

            if gid_a is not None and gid_b is not None:
                if gid_a == gid_b:
                    return self._groups[gid_a]
                first, second = self._groups[gid_a], self._groups[gid_b]
                if (
                    first.canonical != second.canonical
                    and first.rule != second.rule
                ):
                    raise ConflictError(
                        term_a,
                        term_b,
                        (first.canonical, second.canonical),
                        (first.rule, second.rule),
                    )
                for member in second.members:
                    self._group_by_member[member] = first.group_id
                first.members |= second.members
                del self._groups[second.group_id]
                return first

            if gid_a is not None:
                return self._join(gid_a, term_b)
            if gid_b is not None:
                return self._join(gid_b, term_a)

            group = AliasGroup(
                group_id=next(self._next_group_id),
                canonical=canonical
                or self.preferred_spelling([term_a, term_b]),
                rule=rule,
                members={term_a, term_b},
            )
            self._groups[group.group_id] = group
            self._group_by_member[term_a] = group.group_id
            self._group_by_member[term_b] = group.group_id
            return group

    def _join(self, gid: int, name: str) -> AliasGroup:
        group = self._groups[gid]
        group.members.add(name)
        self._group_by_member[name] = gid
        return group

    def preferred_spelling(self, names: list[str]) -> str:
        """Most frequent spelling; ties go to the smallest string."""
        with self._lock:
            counts = Counter(
                {n: len(self._terms[n].occurrences) for n in names}
            )
        return min(counts, key=lambda n: (-counts[n], n))
