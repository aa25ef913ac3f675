"""ScrollScore — Sigil Resonance.

Scores how close a user's frequency is to a sigil's frequency. The scale
spans the whole set of supported frequencies, so a user at the far end
of the set from the sigil scores 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from scrollscore.config import AppConfig, SigilSpec
from scrollscore.errors import UnknownCategory
from scrollscore.scorer.engine import ScoringEngine
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SigilReading:
    """Resonance between a sigil and a user frequency."""

    sigil: SigilSpec
    user_frequency: int
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sigil": self.sigil.sigil_id,
            "name": self.sigil.name,
            "sigil_frequency": self.sigil.frequency,
            "user_frequency": self.user_frequency,
            "resonance": self.score,
        }


class SigilResonance:
    """Sigil-to-user resonance via the engine's 'sigil' distance scale.

    Sigil lookup is permissive (unknown ids use the default sigil). The
    user frequency is checked against the supported set and rejected with
    UnknownCategory when outside it.
    """

    def __init__(self, engine: ScoringEngine, config: AppConfig) -> None:
        self.engine = engine
        self.config = config.sigils

    def resonate(self, sigil_id: str, user_frequency: int) -> SigilReading:
        """Score a user's frequency against a sigil.

        Raises:
            UnknownCategory: If user_frequency is not a supported frequency.
        """
        if user_frequency not in self.config.supported_frequencies:
            raise UnknownCategory(user_frequency, self.config.supported_frequencies)

        sigil = self.config.sigil(sigil_id)
        score = self.engine.normalize(sigil.frequency, user_frequency, scale="sigil")

        logger.info(
            "Sigil %s (%dHz) vs user %dHz: %d/100",
            sigil.sigil_id, sigil.frequency, user_frequency, score,
        )
        return SigilReading(sigil=sigil, user_frequency=user_frequency, score=score)
