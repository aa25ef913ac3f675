"""ScrollScore — Weighted Aggregator.

Combines weighted numeric signals with a table-driven additive bonus
into a single bounded score.

Pipeline: bind values → weighted sum → bonus lookup → round → clamp.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Hashable, Mapping, Optional, Sequence

from scrollscore.errors import InvalidConfiguration
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)

# ── Score bounds ─────────────────────────────────────────
SCORE_MIN = 0
SCORE_MAX = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding upward.

    Python's round() uses banker's rounding (round(86.5) == 86); scores
    were tuned with halves going up.
    """
    return int(math.floor(value + 0.5))


def clamp_score(raw: float) -> int:
    """Round a raw score and clamp it into [0, 100]."""
    return max(SCORE_MIN, min(SCORE_MAX, round_half_up(raw)))


@dataclass(frozen=True)
class Signal:
    """A named numeric input with its weight and declared valid range.

    Attributes:
        name: Signal name (e.g. "hrv").
        value: The reading. Must already be defaulted by the caller.
        weight: Multiplier applied to the value (0-1).
        minimum: Lower bound of the valid range.
        maximum: Upper bound of the valid range.
    """

    name: str
    value: Optional[float]
    weight: float
    minimum: float = 0.0
    maximum: float = 100.0

    def weighted(self) -> float:
        """Return value * weight.

        Raises:
            InvalidConfiguration: If the value was never supplied.
        """
        if self.value is None:
            raise InvalidConfiguration(
                f"Signal '{self.name}' has no value; "
                f"bind it to its documented default before weighting"
            )
        return self.value * self.weight


@dataclass(frozen=True)
class SignalSpec:
    """Caller-declared description of a signal: weight, range and default.

    Attributes:
        name: Signal name, used as the key into raw readings.
        weight: Weight in [0, 1].
        default: Value substituted when a reading is missing.
        minimum: Lower bound of the valid range.
        maximum: Upper bound of the valid range.
    """

    name: str
    weight: float
    default: float
    minimum: float = 0.0
    maximum: float = 100.0

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise InvalidConfiguration(
                f"Signal '{self.name}': minimum {self.minimum} "
                f"exceeds maximum {self.maximum}"
            )
        if not 0.0 <= self.weight <= 1.0:
            raise InvalidConfiguration(
                f"Signal '{self.name}': weight {self.weight} outside [0, 1]"
            )
        if not self.minimum <= self.default <= self.maximum:
            raise InvalidConfiguration(
                f"Signal '{self.name}': default {self.default} outside "
                f"[{self.minimum}, {self.maximum}]"
            )

    def bind(self, value: Optional[float]) -> Signal:
        """Create a Signal from a raw reading.

        None means "not measured" and is replaced by the default. NaN is
        treated the same way, with a warning. An explicit 0 is a real
        reading. Out-of-range readings are clamped into the declared range.

        Args:
            value: Raw reading, or None when missing.

        Returns:
            A Signal ready for weighting.
        """
        if value is None:
            logger.debug(
                "Signal '%s' missing, using default %s", self.name, self.default
            )
            value = self.default
        elif isinstance(value, float) and math.isnan(value):
            logger.warning(
                "Signal '%s' is NaN, using default %s", self.name, self.default
            )
            value = self.default
        elif not self.minimum <= value <= self.maximum:
            clamped = max(self.minimum, min(self.maximum, value))
            logger.warning(
                "Signal '%s'=%s outside [%s, %s], clamped to %s",
                self.name, value, self.minimum, self.maximum, clamped,
            )
            value = clamped

        return Signal(
            name=self.name,
            value=value,
            weight=self.weight,
            minimum=self.minimum,
            maximum=self.maximum,
        )


@dataclass(frozen=True)
class BonusTable:
    """Categorical key → fixed additive bonus, with a declared default.

    Lookups are permissive: unknown keys resolve to `default`.
    """

    bonuses: Mapping[Hashable, int] = field(default_factory=dict)
    default: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "bonuses", MappingProxyType(dict(self.bonuses)))

    def get(self, key: Any) -> int:
        """Return the bonus for key, or the default when key is unknown."""
        try:
            return self.bonuses.get(key, self.default)
        except TypeError:
            # unhashable key
            return self.default


def aggregate(
    signals: Sequence[Signal],
    bonus_key: Any,
    bonus_table: BonusTable,
) -> int:
    """Combine weighted signals and a bonus into a bounded score.

    raw = Σ(value_i * weight_i) + bonus_table.get(bonus_key)

    Args:
        signals: Bound signals. Missing values must already be defaulted.
        bonus_key: Key into the bonus table (e.g. a frequency).
        bonus_table: Bonus lookup with a default entry.

    Returns:
        The score, rounded and clamped to [0, 100].

    Raises:
        InvalidConfiguration: If a signal carries no value.
    """
    base = sum(signal.weighted() for signal in signals)
    return clamp_score(base + bonus_table.get(bonus_key))


@dataclass(frozen=True)
class AggregateBreakdown:
    """Score with the parts it was built from.

    Attributes:
        signals: The bound signals used.
        base_score: Weighted sum before bonus, rounded to 1 decimal.
        bonus: Bonus added from the table.
        score: Final clamped score (0-100).
    """

    signals: tuple[Signal, ...]
    base_score: float
    bonus: int
    score: int

    def values(self) -> dict[str, float]:
        """Bound signal values by name."""
        return {s.name: s.value for s in self.signals}


class WeightedAggregator:
    """A fixed signal set and bonus table, validated once.

    Attributes:
        specs: Ordered signal specifications.
        bonus_table: Bonus lookup applied to every score.
    """

    def __init__(
        self,
        specs: Sequence[SignalSpec],
        bonus_table: BonusTable,
    ) -> None:
        """Initialize the aggregator.

        Args:
            specs: Signal specifications (names must be unique).
            bonus_table: Bonus lookup table.

        Raises:
            InvalidConfiguration: If no specs are given or names repeat.
        """
        if not specs:
            raise InvalidConfiguration("Aggregator needs at least one signal")
        names = [spec.name for spec in specs]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidConfiguration(
                f"Duplicate signal names: {', '.join(duplicates)}"
            )

        self.specs = tuple(specs)
        self.bonus_table = bonus_table

        total = sum(spec.weight for spec in self.specs)
        if not 0.99 <= total <= 1.01:
            logger.warning(
                "Signal weights sum to %.4f (conventionally 1.0): %s",
                total, {spec.name: spec.weight for spec in self.specs},
            )

    def bind(self, readings: Mapping[str, Optional[float]]) -> tuple[Signal, ...]:
        """Bind raw readings (by name) to the declared signals."""
        return tuple(spec.bind(readings.get(spec.name)) for spec in self.specs)

    def score(
        self,
        readings: Mapping[str, Optional[float]],
        bonus_key: Any,
    ) -> AggregateBreakdown:
        """Score raw readings, filling missing ones with their defaults.

        Args:
            readings: Signal name → reading (absent or None = missing).
            bonus_key: Key into the bonus table.

        Returns:
            An AggregateBreakdown with the final score.
        """
        signals = self.bind(readings)
        base = sum(signal.weighted() for signal in signals)
        bonus = self.bonus_table.get(bonus_key)
        final = aggregate(signals, bonus_key, self.bonus_table)

        logger.info(
            "Aggregated %s: base=%.1f + bonus=%d = %d",
            bonus_key, base, bonus, final,
        )

        return AggregateBreakdown(
            signals=signals,
            base_score=round(base, 1),
            bonus=bonus,
            score=final,
        )
