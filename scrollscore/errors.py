"""ScrollScore — Error Taxonomy.

All engine failures derive from ScoringError so downstream consumers can
degrade to a default score or label with a single except clause.

  InvalidConfiguration → a static table or constant is malformed
  TableIncomplete      → a tier table has no terminal default rule
  UnknownCategory      → an ingested item is outside a closed universe
"""

from __future__ import annotations

from typing import Any, Sequence


class ScoringError(Exception):
    """Base class for every error raised by the scoring engine."""


class InvalidConfiguration(ScoringError):
    """Raised when a table or constant cannot produce bounded scores."""


class TableIncomplete(InvalidConfiguration):
    """Raised when a tier table does not end with an unconditional rule."""

    def __init__(self, labels: Sequence[str]) -> None:
        self.labels = tuple(labels)
        if self.labels:
            detail = f"last rule '{self.labels[-1]}' is conditional"
        else:
            detail = "table has no rules"
        super().__init__(f"Tier table needs a terminal default rule: {detail}")


class UnknownCategory(ScoringError):
    """Raised when an item falls outside a closed enumeration."""

    def __init__(self, category: Any, universe: Sequence[Any]) -> None:
        self.category = category
        self.universe = tuple(universe)
        allowed = ", ".join(str(c) for c in self.universe)
        super().__init__(
            f"Unknown category {category!r}; expected one of: {allowed}"
        )
