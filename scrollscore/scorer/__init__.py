"""ScrollScore — Scorer Package.

The four scoring primitives (weighted aggregation, distance
normalization, tier classification, frequency tally) and the shared
engine that binds them to named tables.
"""

from scrollscore.scorer.aggregator import (
    AggregateBreakdown,
    BonusTable,
    Signal,
    SignalSpec,
    WeightedAggregator,
    aggregate,
    clamp_score,
)
from scrollscore.scorer.classifier import CapabilityFlagSet, TierRule, TierTable, classify
from scrollscore.scorer.engine import EngineBuilder, ScoringEngine
from scrollscore.scorer.normalizer import DistanceNormalizer, normalize
from scrollscore.scorer.tally import FrequencyDistribution, dominant, tally

__all__ = [
    "AggregateBreakdown",
    "BonusTable",
    "CapabilityFlagSet",
    "DistanceNormalizer",
    "EngineBuilder",
    "FrequencyDistribution",
    "ScoringEngine",
    "Signal",
    "SignalSpec",
    "TierRule",
    "TierTable",
    "WeightedAggregator",
    "aggregate",
    "clamp_score",
    "classify",
    "dominant",
    "normalize",
    "tally",
]
