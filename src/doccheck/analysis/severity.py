"""Deterministic severity assignment from rule base + term role."""

from __future__ import annotations

from doccheck.constants import Severity, TermRole

# Roles that raise any rule's base severity by one level
ESCALATING_ROLES: frozenset[TermRole] = frozenset({
    TermRole.ENTRY_POINT,
    TermRole.SECURITY,
})


def assign_severity(
    base: Severity,
    role: TermRole,
    extra_roles: frozenset[TermRole] = frozenset(),
) -> Severity:
    """Escalate ``base`` once if ``role`` escalates; never lowers it."""
    if role in ESCALATING_ROLES or role in extra_roles:
        return base.escalate()
    return base
