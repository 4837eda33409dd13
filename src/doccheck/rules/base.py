"""Rule interface: given the corpus, produce findings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from doccheck.analysis.corpus import Corpus
from doccheck.analysis.schemas import Finding
from doccheck.constants import Category, Severity


class ConsistencyRule(ABC):
    """One independent pass over the whole corpus.

    Rules only read the corpus, so several can run at once. New rules
    are added to the rule list passed to the run coordinator.
    """

    name: ClassVar[str]
    category: ClassVar[Category]
    base_severity: ClassVar[Severity]

    @abstractmethod
    def check(self, corpus: Corpus) -> list[Finding]:
        """Return this rule's findings in a deterministic order."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
