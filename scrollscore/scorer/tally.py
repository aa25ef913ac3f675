"""ScrollScore — Frequency Tally.

Counts categorical items against a closed universe. Unlike the bonus and
tier lookups, ingestion is strict: an item outside the universe raises
UnknownCategory instead of being skipped.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Hashable, Iterable, Iterator, Mapping, Sequence

from scrollscore.errors import InvalidConfiguration, UnknownCategory


def validate_universe(universe: Iterable[Hashable]) -> tuple[Hashable, ...]:
    """Return the universe as a tuple, rejecting empty or repeated entries.

    Raises:
        InvalidConfiguration: If the universe is empty or has duplicates.
    """
    categories = tuple(universe)
    if not categories:
        raise InvalidConfiguration("Universe must declare at least one category")
    repeated = sorted({str(c) for c in categories if categories.count(c) > 1})
    if repeated:
        raise InvalidConfiguration(
            f"Universe declares categories more than once: {repeated}"
        )
    return categories


class FrequencyDistribution(Mapping[Hashable, int]):
    """Occurrence counts covering every category of a closed universe.

    Iteration follows universe declaration order.

    Attributes:
        universe: The closed enumeration, in declaration order.
    """

    def __init__(
        self,
        universe: Sequence[Hashable],
        counts: Mapping[Hashable, int] | None = None,
    ) -> None:
        self.universe = validate_universe(universe)
        counts = dict(counts or {})
        for category in counts:
            if category not in self.universe:
                raise UnknownCategory(category, self.universe)
        if any(count < 0 for count in counts.values()):
            raise InvalidConfiguration(f"Negative count in {counts}")
        self._counts = MappingProxyType(
            {category: counts.get(category, 0) for category in self.universe}
        )

    def __getitem__(self, category: Hashable) -> int:
        return self._counts[category]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def dominant(self) -> Hashable:
        """Category with the highest count; ties go to the earliest declared."""
        best = self.universe[0]
        for category in self.universe[1:]:
            if self._counts[category] > self._counts[best]:
                best = category
        return best

    def share(self, category: Hashable) -> float:
        """Percentage of the total held by category (0 for an empty tally)."""
        total = self.total
        if total == 0:
            return 0.0
        return round(self._counts[category] / total * 100, 1)

    def as_dict(self) -> dict[Hashable, int]:
        return dict(self._counts)

    def __repr__(self) -> str:
        return f"FrequencyDistribution({self.as_dict()!r})"


def tally(items: Iterable[Any], universe: Sequence[Hashable]) -> FrequencyDistribution:
    """Count items against a closed universe.

    Args:
        items: Categorical items, e.g. track frequencies.
        universe: Every valid category, in declaration order.

    Returns:
        A FrequencyDistribution with one entry per universe category.

    Raises:
        UnknownCategory: On the first item outside the universe.
        InvalidConfiguration: If the universe is empty or has duplicates.
    """
    categories = validate_universe(universe)
    counts = dict.fromkeys(categories, 0)
    for item in items:
        if item not in counts:
            raise UnknownCategory(item, categories)
        counts[item] += 1
    return FrequencyDistribution(categories, counts)


def dominant(dist: FrequencyDistribution) -> Hashable:
    """Return the most frequent category of a distribution.

    Ties resolve to the first category in universe order, so the result
    is deterministic. An all-zero distribution returns the first category.
    """
    return dist.dominant()
