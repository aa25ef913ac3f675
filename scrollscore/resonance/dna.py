"""ScrollScore — DNA Resonance.

Scores how well a user's biometrics align with a sacred frequency:
weighted HRV, breath and focus readings plus a per-frequency bonus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from scrollscore.config import AppConfig, FrequencyProfile
from scrollscore.scorer.aggregator import WeightedAggregator
from scrollscore.scorer.engine import ScoringEngine
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResonanceReading:
    """Result of aligning biometrics with a frequency.

    Attributes:
        score: Resonance score (0-100).
        frequency: Frequency the beam was tuned to.
        base_score: Weighted biometric sum before the bonus.
        bonus: Frequency bonus added.
        profile: Presentation profile of the frequency.
        biometrics: Bound readings actually used (defaults filled in).
    """

    score: int
    frequency: int
    base_score: float
    bonus: int
    profile: FrequencyProfile
    biometrics: dict[str, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resonance": self.score,
            "frequency": self.frequency,
            "base_score": self.base_score,
            "bonus": self.bonus,
            "profile": self.profile.name,
            "color": self.profile.color,
            "biometrics": dict(self.biometrics),
        }


class DNAResonance:
    """Biometric resonance scorer backed by the shared engine.

    Missing readings are replaced by the configured defaults
    (hrv 70, breath 75, focus 80). Frequencies without a bonus entry add
    the default bonus.
    """

    def __init__(self, engine: ScoringEngine, config: AppConfig) -> None:
        self.config = config
        self.aggregator = WeightedAggregator(
            config.resonance.signals,
            engine.bonus_table("frequency"),
        )

    def resonate(
        self,
        biometrics: Mapping[str, Optional[float]],
        frequency: Optional[int] = None,
    ) -> ResonanceReading:
        """Score biometrics against a frequency.

        Args:
            biometrics: Readings by signal name (hrv, breath, focus).
            frequency: Beam frequency in Hz. Defaults to the configured
                default frequency.

        Returns:
            A ResonanceReading.
        """
        if frequency is None:
            frequency = self.config.default_frequency

        breakdown = self.aggregator.score(biometrics, frequency)
        reading = ResonanceReading(
            score=breakdown.score,
            frequency=frequency,
            base_score=breakdown.base_score,
            bonus=breakdown.bonus,
            profile=self.config.profile_for(frequency),
            biometrics=breakdown.values(),
        )

        logger.info("DNA resonance at %dHz: %d/100", frequency, reading.score)
        return reading
