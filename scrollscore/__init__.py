"""ScrollScore — configuration-driven resonance and compatibility scoring."""

from scrollscore.errors import InvalidConfiguration, ScoringError, TableIncomplete, UnknownCategory

__version__ = "1.0.0"

__all__ = [
    "InvalidConfiguration",
    "ScoringError",
    "TableIncomplete",
    "UnknownCategory",
    "__version__",
]
