"""Consistency rules. Each is an independent pass over the corpus."""

from doccheck.rules.base import ConsistencyRule
from doccheck.rules.contradiction import ContradictionRule
from doccheck.rules.missing_definition import MissingDefinitionRule
from doccheck.rules.naming_drift import NamingDriftRule

__all__ = [
    "ConsistencyRule",
    "ContradictionRule",
    "MissingDefinitionRule",
    "NamingDriftRule",
    "default_rules",
]


def default_rules() -> list[ConsistencyRule]:
    """Fresh instances of the built-in rules, in report order."""
    return [
        NamingDriftRule(),
        MissingDefinitionRule(),
        ContradictionRule(),
    ]
