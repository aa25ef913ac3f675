"""
Pytest configuration and shared fixtures.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

# Keep test runs from writing scrollscore.log, even if the shell sets a directory
os.environ["SCROLLSCORE_LOG_DIR"] = ""

from scrollscore.config import AppConfig, load_config  # noqa: E402
from scrollscore.scorer.engine import ScoringEngine  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = PROJECT_ROOT / "scrollscore" / "data" / "scoring.yaml"


@pytest.fixture(scope="session")
def config_path() -> Path:
    """Path to the bundled scoring tables."""
    return CONFIG_PATH


@pytest.fixture(scope="session")
def _raw_settings() -> Dict[str, Any]:
    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def raw_settings(_raw_settings) -> Dict[str, Any]:
    """A fresh, mutable copy of the parsed scoring.yaml."""
    return copy.deepcopy(_raw_settings)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Configuration loaded from the bundled scoring.yaml."""
    return load_config(settings_path=CONFIG_PATH, env_path=tmp_path / "missing.env")


@pytest.fixture
def engine(app_config) -> ScoringEngine:
    """Engine built from the bundled configuration."""
    return ScoringEngine.from_config(app_config)


@pytest.fixture
def sample_tracks() -> list:
    """Five-track meditation playlist."""
    return [
        {"name": "Divine Awakening", "artist": "Sacred Sounds", "duration": 240, "frequency": 963, "energy": 90},
        {"name": "Heart Opening", "artist": "Love Frequency", "duration": 300, "frequency": 528, "energy": 75},
        {"name": "Cosmic Journey", "artist": "Stellar Harmony", "duration": 360, "frequency": 432, "energy": 60},
        {"name": "Inner Peace", "artist": "Tranquil Waves", "duration": 280, "frequency": 528, "energy": 85},
        {"name": "Spiritual Elevation", "artist": "Ascension Music", "duration": 320, "frequency": 963, "energy": 70},
    ]
