"""Alias grouping passes run at the start of checking.

Each pass merges on literal evidence only: spelling variants, aliases
declared in configuration, and related heads that invoke an identical
subcommand path.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict

from doccheck.analysis.glossary import GlossaryRegistry
from doccheck.analysis.terms import variant_key
from doccheck.constants import AliasRule
from doccheck.errors import ConflictError

logger = logging.getLogger(__name__)


def build_alias_groups(
    registry: GlossaryRegistry,
    declared: dict[str, list[str]] | None = None,
    entry_points: list[str] | None = None,
) -> list[ConflictError]:
    """Run every grouping pass; return the conflicts left unresolved."""
    conflicts: list[ConflictError] = []
    merge_case_variants(registry, conflicts)
    merge_declared_aliases(registry, declared or {}, conflicts)
    merge_shared_invocations(registry, conflicts, entry_points)
    for conflict in conflicts:
        logger.warning("event=alias_conflict detail=%s", conflict)
    return conflicts


def merge_case_variants(
    registry: GlossaryRegistry, conflicts: list[ConflictError]
) -> None:
    """``hyperdev`` / ``HyperDev`` / ``hyper-dev`` share one group."""
    buckets: dict[str, list[str]] = defaultdict(list)
    for term in registry.terms():
        buckets[variant_key(term.normalized)].append(term.normalized)
    for names in buckets.values():
        if len(names) < 2:
            continue
        canonical = registry.preferred_spelling(names)
        _merge_all(
            registry, canonical, names, AliasRule.CASE_VARIANT,
            conflicts, canonical=canonical,
        )


def merge_declared_aliases(
    registry: GlossaryRegistry,
    declared: dict[str, list[str]],
    conflicts: list[ConflictError],
) -> None:
    """Aliases listed in configuration, canonical spelling as declared."""
    for canonical in sorted(declared):
        names = [
            n for n in [canonical, *declared[canonical]] if n in registry
        ]
        if len(names) < 2:
            continue
        _merge_all(
            registry, names[0], names, AliasRule.DECLARED,
            conflicts, canonical=canonical,
        )


def merge_shared_invocations(
    registry: GlossaryRegistry,
    conflicts: list[ConflictError],
    entry_points: list[str] | None = None,
) -> None:
    """Heads that run the same subcommand path name the same CLI.

    A shared path alone is weak evidence (``npm install`` and
    ``pnpm install``), so a pair only merges when both heads are
    configured entry points or one spelling extends the other
    (``hyper`` / ``hyperdev``).
    """
    known = set(entry_points or [])
    heads_by_path: dict[tuple[str, ...], set[str]] = defaultdict(set)
    for ref in registry.invocations():
        if ref.path:
            heads_by_path[ref.path].add(ref.head)
    for path in sorted(heads_by_path):
        for a, b in itertools.combinations(sorted(heads_by_path[path]), 2):
            if not _same_cli(a, b, known):
                continue
            try:
                registry.merge(a, b, rule=AliasRule.SHARED_INVOCATION)
            except ConflictError as exc:
                conflicts.append(exc)


def _same_cli(a: str, b: str, entry_points: set[str]) -> bool:
    if a in entry_points and b in entry_points:
        return True
    key_a, key_b = variant_key(a), variant_key(b)
    return key_a.startswith(key_b) or key_b.startswith(key_a)


def _merge_all(
    registry: GlossaryRegistry,
    anchor: str,
    names: list[str],
    rule: str,
    conflicts: list[ConflictError],
    canonical: str | None = None,
) -> None:
    for name in names:
        if name == anchor:
            continue
        try:
            registry.merge(anchor, name, rule=rule, canonical=canonical)
        except ConflictError as exc:
            conflicts.append(exc)
