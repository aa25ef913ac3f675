"""
Tests for the resonance callers.
"""

import pytest

from scrollscore.config import build_config
from scrollscore.errors import UnknownCategory
from scrollscore.resonance import (
    DeviceCapabilities,
    DeviceCompatibility,
    DNAResonance,
    PlaylistAnalyzer,
    SigilResonance,
    Track,
)
from scrollscore.scorer.engine import ScoringEngine


class TestDNAResonance:
    """Biometrics → resonance score."""

    @pytest.fixture
    def beam(self, engine, app_config):
        return DNAResonance(engine, app_config)

    def test_reference_reading(self, beam):
        reading = beam.resonate({"hrv": 85, "breath": 90, "focus": 88}, 963)
        assert reading.score == 97
        assert reading.bonus == 10
        assert reading.base_score == 87.4
        assert reading.profile.chakra == "Crown"

    def test_defaults_for_missing_biometrics(self, beam):
        reading = beam.resonate({}, 528)
        assert reading.biometrics == {"hrv": 70, "breath": 75, "focus": 80}
        # 74.5 + 8
        assert reading.score == 83

    def test_zero_reading_is_not_replaced(self, beam):
        reading = beam.resonate({"hrv": 0, "breath": 0, "focus": 0}, 432)
        assert reading.score == 5

    def test_default_frequency(self, beam):
        reading = beam.resonate({"hrv": 50, "breath": 50, "focus": 50})
        assert reading.frequency == 963
        assert reading.score == 60

    def test_unknown_frequency_is_permissive(self, beam):
        reading = beam.resonate({"hrv": 50, "breath": 50, "focus": 50}, 741)
        assert reading.bonus == 0
        assert reading.score == 50
        assert reading.profile.name == "Divine Connection"

    def test_nan_reading_uses_default(self, beam):
        reading = beam.resonate({"hrv": float("nan"), "breath": 90, "focus": 88}, 963)
        assert reading.biometrics["hrv"] == 70
        # 81.4 + 10
        assert reading.score == 91

    def test_clamped_to_100(self, beam):
        reading = beam.resonate({"hrv": 100, "breath": 100, "focus": 100}, 963)
        assert reading.score == 100

    def test_to_dict(self, beam):
        data = beam.resonate({"hrv": 85, "breath": 90, "focus": 88}, 963).to_dict()
        assert data["resonance"] == 97
        assert data["color"] == "#00CED1"


class TestSigilResonance:
    """Sigil frequency vs user frequency."""

    @pytest.fixture
    def sigils(self, engine, app_config):
        return SigilResonance(engine, app_config)

    def test_far_end_scores_zero(self, sigils):
        assert sigils.resonate("muhammad", 432).score == 0

    def test_matching_frequency_scores_100(self, sigils):
        assert sigils.resonate("imhotep", 528).score == 100

    def test_intermediate(self, sigils):
        assert sigils.resonate("musa", 963).score == 58

    def test_unknown_sigil_uses_default(self, sigils):
        reading = sigils.resonate("anubis", 963)
        assert reading.sigil.sigil_id == "muhammad"
        assert reading.score == 100

    def test_unsupported_user_frequency(self, sigils):
        with pytest.raises(UnknownCategory) as exc_info:
            sigils.resonate("musa", 500)
        assert exc_info.value.category == 500


class TestDeviceCompatibility:
    """Capabilities → AR tier."""

    @pytest.fixture
    def checker(self, engine, app_config):
        return DeviceCompatibility(engine, app_config)

    @pytest.mark.parametrize("capabilities,level,compatible", [
        (DeviceCapabilities(webxr=True), "full", True),
        (DeviceCapabilities(gyroscope=True, camera=True), "standard", True),
        (DeviceCapabilities(camera=True, accelerometer=True), "basic", False),
        (DeviceCapabilities(gyroscope=True, accelerometer=True), "none", False),
        (DeviceCapabilities(), "none", False),
    ])
    def test_levels(self, checker, capabilities, level, compatible):
        report = checker.check(capabilities)
        assert report.level == level
        assert report.compatible is compatible

    def test_from_mapping_ignores_unknown_flags(self, checker):
        capabilities = DeviceCapabilities.from_mapping({"camera": True, "lidar": True})
        assert capabilities == DeviceCapabilities(camera=True)
        assert checker.check(capabilities).to_dict() == {
            "level": "basic",
            "compatible": False,
            "webxr": False,
            "gyroscope": False,
            "accelerometer": False,
            "camera": True,
        }


class TestPlaylistAnalyzer:
    """Track list → distribution, dominant frequency, emotions, energy."""

    @pytest.fixture
    def analyzer(self, engine, app_config):
        return PlaylistAnalyzer(engine, app_config)

    @pytest.fixture
    def tracks(self, sample_tracks):
        return [Track.from_mapping(t) for t in sample_tracks]

    def test_distribution_and_dominant(self, analyzer, tracks):
        analysis = analyzer.analyze(tracks)
        assert analysis.distribution == {432: 1, 528: 2, 963: 2}
        assert analysis.total == 5
        # 528 and 963 tie; 528 is declared first
        assert analysis.dominant_frequency == 528

    def test_emotional_mapping(self, analyzer, tracks):
        emotions = analyzer.analyze(tracks).emotions
        assert emotions == {
            "peace": 16,
            "grounding": 17,
            "calm": 18,
            "love": 36,
            "joy": 32,
            "healing": 34,
            "transcendence": 38,
            "unity": 36,
            "enlightenment": 35,
        }

    def test_energy_summary(self, analyzer, tracks):
        energy = analyzer.analyze(tracks).energy
        assert energy.average == 76
        assert energy.minimum == 60
        assert energy.maximum == 90
        assert energy.bands == {"high": 2, "medium": 2, "low": 1}

    def test_tracks_without_energy(self, analyzer):
        analysis = analyzer.analyze([Track("Silence", 432)])
        assert analysis.energy is None
        assert analysis.dominant_frequency == 432

    def test_unknown_frequency_rejected(self, analyzer, tracks):
        tracks.append(Track("Awakening", 741))
        with pytest.raises(UnknownCategory):
            analyzer.analyze(tracks)

    def test_empty_playlist(self, analyzer):
        analysis = analyzer.analyze([])
        assert analysis.total == 0
        assert analysis.dominant_frequency == 432
        assert set(analysis.emotions.values()) == {0}
        assert analysis.dominant_emotion == "peace"
        assert analysis.energy is None

    def test_single_frequency_emotions(self, analyzer):
        analysis = analyzer.analyze([Track("A", 528), Track("B", 528)])
        assert analysis.emotions["love"] == 90
        assert analysis.emotions["peace"] == 0

    def test_dominant_emotion(self, analyzer, tracks):
        assert analyzer.analyze(tracks).dominant_emotion == "transcendence"

    def test_dominant_emotion_tie_goes_to_first_declared(self, raw_settings):
        raw_settings["playlist"]["emotions"][963]["transcendence"] = 90
        config = build_config(raw_settings)
        analyzer = PlaylistAnalyzer(ScoringEngine.from_config(config), config)
        analysis = analyzer.analyze([Track("A", 528), Track("B", 963)])
        # love, transcendence and unity all average 45
        assert analysis.emotions["love"] == analysis.emotions["transcendence"] == 45
        assert analysis.dominant_emotion == "love"

    def test_fractional_frequency_is_kept(self):
        assert Track.from_mapping({"name": "Off-tune", "frequency": 432.7}).frequency == 432.7
        assert Track.from_mapping({"name": "Tuned", "frequency": "528.0"}).frequency == 528

    def test_fractional_frequency_rejected(self, analyzer):
        track = Track.from_mapping({"name": "Off-tune", "frequency": 432.7})
        with pytest.raises(UnknownCategory) as exc_info:
            analyzer.analyze([track])
        assert exc_info.value.category == 432.7

    @pytest.mark.parametrize("entry", [432, "Awakening", None, [432]])
    def test_track_entry_must_be_mapping(self, entry):
        with pytest.raises(ValueError, match="mapping"):
            Track.from_mapping(entry)

    def test_track_frequency_not_a_number(self):
        with pytest.raises(ValueError):
            Track.from_mapping({"name": "Silence", "frequency": None})

    def test_track_missing_frequency(self):
        with pytest.raises(ValueError, match="frequency"):
            Track.from_mapping({"name": "No Tuning"})

    def test_to_dict(self, analyzer, tracks):
        data = analyzer.analyze(tracks).to_dict()
        assert data["dominant_frequency"] == 528
        assert data["energy"]["range"] == {"min": 60, "max": 90}
        assert data["dominant_emotion"] == "transcendence"
