"""ScrollScore — Playlist Analysis.

Analyzes a playlist's tracks:
  1. Frequency distribution over the closed universe (strict tally).
  2. Dominant frequency (ties → first declared frequency).
  3. Emotional mapping averaged over all tracks, and its dominant emotion
     (ties → first declared emotion).
  4. Energy banding (high / medium / low) of caller-supplied levels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from scrollscore.config import AppConfig
from scrollscore.scorer.engine import ScoringEngine
from scrollscore.scorer.tally import FrequencyDistribution
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Track:
    """A playlist track.

    Attributes:
        name: Track title.
        frequency: Tuning frequency in Hz, kept exactly as given.
        artist: Artist name.
        duration: Length in seconds.
        energy: Energy level (0-100) if measured.
    """

    name: str
    frequency: Union[int, float]
    artist: str = ""
    duration: int = 0
    energy: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Track":
        """Build a Track from a dict (e.g. one entry of a playlist file).

        Raises:
            ValueError: If data is not a mapping, name or frequency is
                missing, or the frequency is not a number.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Track entry must be a mapping, got {data!r}")
        missing = [key for key in ("name", "frequency") if key not in data]
        if missing:
            raise ValueError(f"Track is missing: {', '.join(missing)}")
        energy = data.get("energy")
        return cls(
            name=str(data["name"]),
            frequency=_parse_frequency(data["frequency"]),
            artist=str(data.get("artist", "")),
            duration=int(data.get("duration", 0)),
            energy=int(energy) if energy is not None else None,
        )


def _parse_frequency(raw: Any) -> Union[int, float]:
    """Return a whole frequency as int; anything else stays a float.

    432.0 and "432" become 432, while 432.7 is kept so that the strict
    tally rejects it instead of counting it as 432.
    """
    try:
        value = float(raw)
    except TypeError:
        raise ValueError(f"Track frequency must be a number, got {raw!r}") from None
    return int(value) if value.is_integer() else value


@dataclass(frozen=True)
class EnergySummary:
    """Energy statistics of the tracks that carry an energy level."""

    average: int
    minimum: int
    maximum: int
    bands: FrequencyDistribution

    def to_dict(self) -> dict[str, Any]:
        return {
            "average": self.average,
            "range": {"min": self.minimum, "max": self.maximum},
            "distribution": self.bands.as_dict(),
        }


@dataclass(frozen=True)
class PlaylistAnalysis:
    """Full analysis of a playlist."""

    dominant_frequency: int
    distribution: FrequencyDistribution
    emotions: dict[str, int] = field(default_factory=dict)
    dominant_emotion: Optional[str] = None
    energy: Optional[EnergySummary] = None

    @property
    def total(self) -> int:
        return self.distribution.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "dominant_frequency": self.dominant_frequency,
            "distribution": self.distribution.as_dict(),
            "total": self.total,
            "emotions": dict(self.emotions),
            "dominant_emotion": self.dominant_emotion,
            "energy": self.energy.to_dict() if self.energy else None,
        }


class PlaylistAnalyzer:
    """Playlist analysis backed by the shared engine.

    Track frequencies outside the configured universe raise
    UnknownCategory; the analysis is never computed on a partial tally.
    """

    def __init__(self, engine: ScoringEngine, config: AppConfig) -> None:
        self.engine = engine
        self.config = config.playlist

    def analyze(self, tracks: Iterable[Track]) -> PlaylistAnalysis:
        """Analyze tracks.

        Raises:
            UnknownCategory: If a track's frequency is outside the universe.
        """
        tracks = list(tracks)
        distribution = self.engine.tally(
            (track.frequency for track in tracks), universe="frequency",
        )
        emotions = self.emotional_mapping(distribution)
        analysis = PlaylistAnalysis(
            dominant_frequency=self.engine.dominant(distribution),
            distribution=distribution,
            emotions=emotions,
            dominant_emotion=self.dominant_emotion(emotions),
            energy=self.energy_summary(tracks),
        )

        logger.info(
            "Analyzed %d tracks: dominant=%sHz (%s) distribution=%s",
            analysis.total, analysis.dominant_frequency,
            analysis.dominant_emotion, distribution.as_dict(),
        )
        return analysis

    def emotional_mapping(self, distribution: FrequencyDistribution) -> dict[str, int]:
        """Average emotion scores per track, floored.

        Every declared emotion is present; emotions no track carries score 0.
        """
        totals = dict.fromkeys(self.config.emotion_names, 0)
        for frequency, count in distribution.items():
            for emotion, score in self.config.emotions.get(frequency, {}).items():
                totals[emotion] += score * count

        if distribution.total == 0:
            return totals
        return {emotion: value // distribution.total for emotion, value in totals.items()}

    def dominant_emotion(self, emotions: Mapping[str, int]) -> Optional[str]:
        """Highest-scoring emotion; ties go to the first declared emotion."""
        return max(
            self.config.emotion_names,
            key=lambda name: emotions.get(name, 0),
            default=None,
        )

    def energy_summary(self, tracks: Iterable[Track]) -> Optional[EnergySummary]:
        """Band and summarize energy levels; None when no track has one."""
        levels = [track.energy for track in tracks if track.energy is not None]
        if not levels:
            return None

        bands = self.engine.tally(
            (self.engine.classify(level, table="energy") for level in levels),
            universe="energy",
        )
        return EnergySummary(
            average=sum(levels) // len(levels),
            minimum=min(levels),
            maximum=max(levels),
            bands=bands,
        )
