"""ScrollScore — Resonance Package.

Callers that feed the scoring engine: DNA resonance, sigil resonance,
AR device compatibility and playlist analysis.
"""

from scrollscore.resonance.device import CompatibilityReport, DeviceCapabilities, DeviceCompatibility
from scrollscore.resonance.dna import DNAResonance, ResonanceReading
from scrollscore.resonance.playlist import EnergySummary, PlaylistAnalysis, PlaylistAnalyzer, Track
from scrollscore.resonance.sigil import SigilReading, SigilResonance

__all__ = [
    "CompatibilityReport",
    "DNAResonance",
    "DeviceCapabilities",
    "DeviceCompatibility",
    "EnergySummary",
    "PlaylistAnalysis",
    "PlaylistAnalyzer",
    "ResonanceReading",
    "SigilReading",
    "SigilResonance",
    "Track",
]
