"""
Tests for the shared scoring engine and its builder.
"""

import threading

import pytest

from scrollscore.errors import InvalidConfiguration, TableIncomplete, UnknownCategory
from scrollscore.scorer.aggregator import BonusTable, Signal
from scrollscore.scorer.classifier import CapabilityFlagSet, TierRule
from scrollscore.scorer.engine import EngineBuilder


@pytest.fixture
def built_engine():
    return (
        EngineBuilder()
        .bonus_table("frequency", {432: 5, 528: 8, 963: 10})
        .distance("sigil", 531)
        .tier_table("device", [TierRule("full", requires=("webxr",)), TierRule("none")])
        .universe("frequency", [432, 528, 963])
        .build()
    )


class TestEngineBuilder:
    """Tables are validated as they are registered."""

    def test_zero_distance_rejected(self):
        with pytest.raises(InvalidConfiguration):
            EngineBuilder().distance("sigil", 0)

    def test_tier_table_without_default_rejected(self):
        with pytest.raises(TableIncomplete):
            EngineBuilder().tier_table("device", [TierRule("full", requires=("webxr",))])

    def test_empty_universe_rejected(self):
        with pytest.raises(InvalidConfiguration):
            EngineBuilder().universe("frequency", [])

    def test_plain_mapping_bonus_defaults_to_zero(self, built_engine):
        assert built_engine.bonus_table("frequency").get(741) == 0

    def test_explicit_bonus_table_kept(self):
        engine = EngineBuilder().bonus_table("x", BonusTable({}, default=4)).build()
        assert engine.bonus_table("x").default == 4


class TestScoringEngine:
    """Test dispatch to named tables."""

    def test_aggregate(self, built_engine):
        signals = [Signal("hrv", 85, 0.4), Signal("breath", 90, 0.3), Signal("focus", 88, 0.3)]
        assert built_engine.aggregate(signals, 963) == 97

    def test_normalize(self, built_engine):
        assert built_engine.normalize(963, 432) == 0
        assert built_engine.normalize(528, 528, scale="sigil") == 100

    def test_classify(self, built_engine):
        assert built_engine.classify(CapabilityFlagSet(webxr=True)) == "full"
        assert built_engine.classify(CapabilityFlagSet()) == "none"

    def test_tally_and_dominant(self, built_engine):
        dist = built_engine.tally([528, 528, 963])
        assert dist == {432: 0, 528: 2, 963: 1}
        assert built_engine.dominant(dist) == 528

    def test_tally_rejects_unknown(self, built_engine):
        with pytest.raises(UnknownCategory):
            built_engine.tally([500])

    def test_unknown_table_name(self, built_engine):
        with pytest.raises(InvalidConfiguration, match="registered: frequency"):
            built_engine.aggregate([], 963, table="missing")
        with pytest.raises(InvalidConfiguration):
            built_engine.normalize(1, 2, scale="missing")
        with pytest.raises(InvalidConfiguration):
            built_engine.classify(CapabilityFlagSet(), table="missing")
        with pytest.raises(InvalidConfiguration):
            built_engine.tally([], universe="missing")

    def test_builder_changes_do_not_leak_into_engine(self):
        builder = EngineBuilder().distance("sigil", 531)
        engine = builder.build()
        builder.distance("other", 10)
        with pytest.raises(InvalidConfiguration):
            engine.distance("other")

    def test_concurrent_calls_are_independent(self, built_engine):
        results = []

        def worker():
            for _ in range(200):
                results.append(built_engine.normalize(963, 528))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 800
        assert set(results) == {built_engine.normalize(963, 528)}


class TestFromConfig:
    """Engine built from scoring.yaml."""

    def test_registered_tables(self, engine):
        assert engine.bonus_table("frequency").get(963) == 10
        assert engine.distance("sigil").max_distance == 531
        assert engine.tier_table("device").labels == ("full", "standard", "basic", "none")
        assert engine.universe_of("frequency") == (432, 528, 963)
        assert engine.universe_of("energy") == ("high", "medium", "low")

    def test_energy_bands(self, engine):
        assert engine.classify(90, table="energy") == "high"
        assert engine.classify(72, table="energy") == "medium"
        assert engine.classify(10, table="energy") == "low"
