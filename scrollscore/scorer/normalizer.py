"""ScrollScore — Distance Normalizer.

Turns the distance between a reference value and a sample into an
inverted percentage: identical values score 100, values a full
`max_distance` apart score 0.
"""

from __future__ import annotations

from typing import Iterable

from scrollscore.errors import InvalidConfiguration
from scrollscore.scorer.aggregator import clamp_score


def _check_max_distance(max_distance: float) -> None:
    if max_distance <= 0:
        raise InvalidConfiguration(
            f"max_distance must be positive, got {max_distance}"
        )


def normalize(reference: float, sample: float, max_distance: float) -> int:
    """Score how close sample is to reference on a 0-100 scale.

    score = clamp(round(100 - |reference - sample| / max_distance * 100))

    Args:
        reference: The reference value (e.g. a sigil's frequency).
        sample: The observed value (e.g. the user's frequency).
        max_distance: Largest possible distance across the whole domain of
            valid values. Anchors the scale to the value space rather than
            the observed pair.

    Returns:
        Score in [0, 100].

    Raises:
        InvalidConfiguration: If max_distance is zero or negative.
    """
    _check_max_distance(max_distance)
    distance = abs(reference - sample)
    return clamp_score(100 - (distance / max_distance) * 100)


class DistanceNormalizer:
    """A Distance Normalizer bound to a fixed max_distance.

    Attributes:
        max_distance: Largest possible distance across the value domain.
    """

    def __init__(self, max_distance: float) -> None:
        _check_max_distance(max_distance)
        self.max_distance = max_distance

    @classmethod
    def spanning(cls, values: Iterable[float]) -> "DistanceNormalizer":
        """Build a normalizer whose scale spans a closed set of values.

        Args:
            values: Every valid reference/sample value.

        Raises:
            InvalidConfiguration: If values is empty, or if every value is
                the same (the span is 0 and the constructor rejects it).
        """
        values = list(values)
        if not values:
            raise InvalidConfiguration("Cannot span an empty value set")
        return cls(max(values) - min(values))

    def normalize(self, reference: float, sample: float) -> int:
        """Score sample against reference. See normalize()."""
        return normalize(reference, sample, self.max_distance)

    def __repr__(self) -> str:
        return f"DistanceNormalizer(max_distance={self.max_distance})"
