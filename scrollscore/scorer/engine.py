"""ScrollScore — Scoring Engine.

One shared engine holding every named lookup table the callers score
against: bonus tables, distance scales, tier tables and tally universes.
Tables are validated as they are registered on an EngineBuilder, so a
built engine can no longer fail for configuration reasons except when
asked for a table that was never registered.

Usage:
    engine = (
        EngineBuilder()
        .bonus_table("frequency", BonusTable({432: 5, 528: 8, 963: 10}))
        .distance("sigil", 531)
        .tier_table("device", rules)
        .universe("frequency", [432, 528, 963])
        .build()
    )
    engine.normalize(963, 432, scale="sigil")
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Hashable, Iterable, Mapping, Sequence

from scrollscore.errors import InvalidConfiguration
from scrollscore.scorer.aggregator import BonusTable, Signal, aggregate
from scrollscore.scorer.classifier import TierRule, TierTable
from scrollscore.scorer.normalizer import DistanceNormalizer
from scrollscore.scorer.tally import FrequencyDistribution, tally, validate_universe
from scrollscore.utils.logger import get_logger

if TYPE_CHECKING:
    from scrollscore.config import AppConfig

logger = get_logger(__name__)


def _lookup(registry: Mapping[str, Any], kind: str, name: str) -> Any:
    try:
        return registry[name]
    except KeyError:
        known = ", ".join(sorted(registry)) or "none"
        raise InvalidConfiguration(
            f"No {kind} named '{name}' (registered: {known})"
        ) from None


class ScoringEngine:
    """Immutable collection of named scoring tables.

    Every method is a pure function of its arguments and the registered
    tables, so one engine can be shared freely between threads.
    """

    def __init__(
        self,
        bonus_tables: Mapping[str, BonusTable],
        distances: Mapping[str, DistanceNormalizer],
        tier_tables: Mapping[str, TierTable],
        universes: Mapping[str, tuple[Hashable, ...]],
    ) -> None:
        self._bonus_tables = MappingProxyType(dict(bonus_tables))
        self._distances = MappingProxyType(dict(distances))
        self._tier_tables = MappingProxyType(dict(tier_tables))
        self._universes = MappingProxyType(dict(universes))

    @classmethod
    def from_config(cls, config: "AppConfig") -> "ScoringEngine":
        """Build the engine with every table declared in the configuration."""
        return (
            EngineBuilder()
            .bonus_table("frequency", config.resonance.bonus_table())
            .distance("sigil", config.sigils.max_distance)
            .tier_table("device", config.device.tiers)
            .tier_table("energy", config.playlist.energy_bands)
            .universe("frequency", config.playlist.universe)
            .universe("energy", config.playlist.energy_bands.labels)
            .build()
        )

    # ── Table access ─────────────────────────────────────

    def bonus_table(self, name: str) -> BonusTable:
        return _lookup(self._bonus_tables, "bonus table", name)

    def distance(self, name: str) -> DistanceNormalizer:
        return _lookup(self._distances, "distance scale", name)

    def tier_table(self, name: str) -> TierTable:
        return _lookup(self._tier_tables, "tier table", name)

    def universe_of(self, name: str) -> tuple[Hashable, ...]:
        return _lookup(self._universes, "universe", name)

    # ── Operations ───────────────────────────────────────

    def aggregate(
        self,
        signals: Sequence[Signal],
        bonus_key: Any,
        table: str = "frequency",
    ) -> int:
        """Weighted sum of signals plus the bonus for bonus_key, clamped."""
        return aggregate(signals, bonus_key, self.bonus_table(table))

    def normalize(self, reference: float, sample: float, scale: str = "sigil") -> int:
        """Inverted-distance score of sample against reference."""
        return self.distance(scale).normalize(reference, sample)

    def classify(self, subject: Any, table: str = "device") -> str:
        """Label of the first tier rule matching subject."""
        return self.tier_table(table).classify(subject)

    def tally(self, items: Iterable[Any], universe: str = "frequency") -> FrequencyDistribution:
        """Count items against a registered universe (strict)."""
        return tally(items, self.universe_of(universe))

    @staticmethod
    def dominant(dist: FrequencyDistribution) -> Hashable:
        return dist.dominant()

    def __repr__(self) -> str:
        return (
            f"ScoringEngine(bonus_tables={list(self._bonus_tables)}, "
            f"distances={list(self._distances)}, "
            f"tier_tables={list(self._tier_tables)}, "
            f"universes={list(self._universes)})"
        )


class EngineBuilder:
    """Registers and validates tables, then builds a ScoringEngine."""

    def __init__(self) -> None:
        self._bonus_tables: dict[str, BonusTable] = {}
        self._distances: dict[str, DistanceNormalizer] = {}
        self._tier_tables: dict[str, TierTable] = {}
        self._universes: dict[str, tuple[Hashable, ...]] = {}

    def bonus_table(self, name: str, table: BonusTable | Mapping[Any, int]) -> "EngineBuilder":
        """Register a bonus table. A plain mapping gets a default of 0."""
        if not isinstance(table, BonusTable):
            table = BonusTable(table)
        self._bonus_tables[name] = table
        return self

    def distance(self, name: str, max_distance: float) -> "EngineBuilder":
        """Register a distance scale.

        Raises:
            InvalidConfiguration: If max_distance is not positive.
        """
        self._distances[name] = DistanceNormalizer(max_distance)
        return self

    def tier_table(self, name: str, rules: TierTable | Iterable[TierRule]) -> "EngineBuilder":
        """Register a tier table.

        Raises:
            TableIncomplete: If the rules lack a terminal default.
        """
        if not isinstance(rules, TierTable):
            rules = TierTable(rules)
        self._tier_tables[name] = rules
        return self

    def universe(self, name: str, categories: Iterable[Hashable]) -> "EngineBuilder":
        """Register a closed universe for tallies.

        Raises:
            InvalidConfiguration: If the universe is empty or repeats itself.
        """
        self._universes[name] = validate_universe(categories)
        return self

    def build(self) -> ScoringEngine:
        engine = ScoringEngine(
            bonus_tables=self._bonus_tables,
            distances=self._distances,
            tier_tables=self._tier_tables,
            universes=self._universes,
        )
        logger.debug("Built %r", engine)
        return engine
