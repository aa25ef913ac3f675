"""ScrollScore — Configuration Loader.

Loads the scoring tables (bundled as scrollscore/data/scoring.yaml),
resolves environment variables referenced via ${VAR_NAME} or
${VAR_NAME:-fallback}, and
validates every table once so that scoring itself never fails for
configuration reasons.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from scrollscore.errors import InvalidConfiguration
from scrollscore.scorer.aggregator import BonusTable, SignalSpec
from scrollscore.scorer.classifier import TierTable
from scrollscore.scorer.normalizer import DistanceNormalizer
from scrollscore.scorer.tally import validate_universe
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)

# ── Path Constants ────────────────────────────────────────
PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"
SCORING_PATH = DATA_DIR / "scoring.yaml"

# ── Environment Variable Pattern ─────────────────────────
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?}")


# ═══════════════════════════════════════════════════════════
# Configuration Dataclasses
# ═══════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FrequencyProfile:
    """Presentation attributes of a frequency."""

    frequency: int
    name: str
    color: str
    effect: str = ""
    chakra: str = ""
    element: str = ""
    pattern: str = ""


@dataclass(frozen=True)
class ResonanceConfig:
    """Biometric signals and per-frequency bonuses for DNA resonance."""

    signals: tuple[SignalSpec, ...]
    frequency_bonuses: dict[int, int]
    default_bonus: int = 0

    def bonus_table(self) -> BonusTable:
        return BonusTable(self.frequency_bonuses, default=self.default_bonus)


@dataclass(frozen=True)
class SigilSpec:
    """A sacred sigil and the frequency it resonates at."""

    sigil_id: str
    name: str
    frequency: int
    power_level: int = 0
    rarity: str = ""


@dataclass(frozen=True)
class SigilConfig:
    """Sigil catalogue and the distance scale for sigil resonance."""

    catalog: dict[str, SigilSpec]
    default: str
    supported_frequencies: tuple[int, ...]
    max_distance: float

    def sigil(self, sigil_id: str) -> SigilSpec:
        """Look up a sigil; unknown ids fall back to the default sigil."""
        spec = self.catalog.get(str(sigil_id).lower())
        if spec is None:
            logger.warning(
                "Unknown sigil '%s', falling back to '%s'", sigil_id, self.default
            )
            spec = self.catalog[self.default]
        return spec


@dataclass(frozen=True)
class DeviceConfig:
    """Tier table for AR device compatibility."""

    tiers: TierTable
    compatible_tiers: tuple[str, ...]


@dataclass(frozen=True)
class PlaylistConfig:
    """Closed frequency universe, emotion profiles and energy bands."""

    universe: tuple[int, ...]
    emotions: dict[int, dict[str, int]]
    energy_bands: TierTable

    @property
    def emotion_names(self) -> tuple[str, ...]:
        """Every declared emotion, in declaration order."""
        names: dict[str, None] = {}
        for profile in self.emotions.values():
            names.update(dict.fromkeys(profile))
        return tuple(names)


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration container."""

    resonance: ResonanceConfig
    sigils: SigilConfig
    device: DeviceConfig
    playlist: PlaylistConfig
    profiles: dict[int, FrequencyProfile] = field(default_factory=dict)
    default_frequency: int = 963
    log_level: str = "INFO"

    def profile_for(self, frequency: Any) -> FrequencyProfile:
        """Profile of a frequency; unknown frequencies get the default's."""
        profile = self.profiles.get(frequency)
        if profile is None:
            profile = self.profiles[self.default_frequency]
        return profile


# ═══════════════════════════════════════════════════════════
# YAML Loading & Environment Variable Resolution
# ═══════════════════════════════════════════════════════════


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${VAR_NAME} references in YAML values.

    Args:
        value: A string, dict, list, or primitive from parsed YAML.

    Returns:
        The same structure with placeholders replaced. A placeholder
        written ${VAR:-fallback} uses the fallback when VAR is unset.

    Raises:
        ValueError: If a referenced variable is unset and has no fallback.
    """
    if isinstance(value, str):
        def _substitute(match: re.Match[str]) -> str:
            var_name, fallback = match.group(1), match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if fallback is not None:
                return fallback
            raise ValueError(
                f"Environment variable '${{{var_name}}}' is required but not set. "
                f"Add it to your .env file or export it in your shell."
            )

        return ENV_VAR_PATTERN.sub(_substitute, value)
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file with UTF-8 encoding.

    Raises:
        FileNotFoundError: If the YAML file does not exist.
        ValueError: If the file is empty.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Configuration file is empty: {path}")

    logger.debug("Loaded configuration from %s", path)
    return data


# ═══════════════════════════════════════════════════════════
# Dataclass Builders
# ═══════════════════════════════════════════════════════════


def _build_profiles(data: dict[str, Any]) -> tuple[dict[int, FrequencyProfile], int]:
    """Build the frequency profiles and default frequency.

    Args:
        data: The 'frequencies' section.
    """
    _validate_keys(data, ["default", "profiles"], "frequencies")

    profiles = {}
    for frequency, raw in data["profiles"].items():
        _validate_keys(raw, ["name", "color"], f"frequencies.profiles.{frequency}")
        profiles[int(frequency)] = FrequencyProfile(
            frequency=int(frequency),
            name=raw["name"],
            color=raw["color"],
            effect=raw.get("effect", ""),
            chakra=raw.get("chakra", ""),
            element=raw.get("element", ""),
            pattern=raw.get("pattern", ""),
        )

    default = int(data["default"])
    if default not in profiles:
        raise InvalidConfiguration(
            f"Default frequency {default} has no profile "
            f"(declared: {sorted(profiles)})"
        )
    return profiles, default


def _build_resonance_config(data: dict[str, Any]) -> ResonanceConfig:
    """Build a ResonanceConfig from the 'resonance' section.

    Raises:
        InvalidConfiguration: If a signal has a bad weight, range or default.
    """
    _validate_keys(data, ["signals", "frequency_bonuses"], "resonance")

    signals = []
    for raw in data["signals"]:
        _validate_keys(raw, ["name", "weight", "default"], "resonance.signals")
        signals.append(SignalSpec(
            name=raw["name"],
            weight=float(raw["weight"]),
            default=float(raw["default"]),
            minimum=float(raw.get("min", 0)),
            maximum=float(raw.get("max", 100)),
        ))

    return ResonanceConfig(
        signals=tuple(signals),
        frequency_bonuses={int(k): int(v) for k, v in data["frequency_bonuses"].items()},
        default_bonus=int(data.get("default_bonus", 0)),
    )


def _build_sigil_config(data: dict[str, Any]) -> SigilConfig:
    """Build a SigilConfig from the 'sigils' section.

    Raises:
        InvalidConfiguration: If max_distance is not positive or the
            default sigil is not in the catalogue.
    """
    _validate_keys(
        data, ["default", "supported_frequencies", "max_distance", "catalog"], "sigils",
    )

    catalog = {}
    for sigil_id, raw in data["catalog"].items():
        _validate_keys(raw, ["name", "frequency"], f"sigils.catalog.{sigil_id}")
        catalog[str(sigil_id).lower()] = SigilSpec(
            sigil_id=str(sigil_id).lower(),
            name=raw["name"],
            frequency=int(raw["frequency"]),
            power_level=int(raw.get("power_level", 0)),
            rarity=raw.get("rarity", ""),
        )

    default = str(data["default"]).lower()
    if default not in catalog:
        raise InvalidConfiguration(f"Default sigil '{default}' is not in the catalogue")

    supported = tuple(int(f) for f in validate_universe(data["supported_frequencies"]))
    for spec in catalog.values():
        if spec.frequency not in supported:
            raise InvalidConfiguration(
                f"Sigil '{spec.sigil_id}' frequency {spec.frequency} "
                f"is not a supported frequency"
            )

    max_distance = float(data["max_distance"])
    scale = DistanceNormalizer(max_distance)
    if len(supported) > 1:
        span = DistanceNormalizer.spanning(supported).max_distance
        if scale.max_distance < span:
            logger.warning(
                "sigils.max_distance=%s is smaller than the supported span %s; "
                "distant pairs will clamp to 0", max_distance, span,
            )

    return SigilConfig(
        catalog=catalog,
        default=default,
        supported_frequencies=supported,
        max_distance=max_distance,
    )


def _build_device_config(data: dict[str, Any]) -> DeviceConfig:
    """Build a DeviceConfig from the 'device' section.

    Raises:
        TableIncomplete: If the tier list lacks a terminal default.
    """
    _validate_keys(data, ["tiers"], "device")

    tiers = TierTable.from_config(data["tiers"])
    compatible = tuple(str(label) for label in data.get("compatible", []))
    unknown = [label for label in compatible if label not in tiers.labels]
    if unknown:
        raise InvalidConfiguration(
            f"device.compatible names undeclared tiers: {', '.join(unknown)}"
        )
    return DeviceConfig(tiers=tiers, compatible_tiers=compatible)


def _build_playlist_config(data: dict[str, Any]) -> PlaylistConfig:
    """Build a PlaylistConfig from the 'playlist' section.

    Raises:
        InvalidConfiguration: If the universe is empty or repeats itself,
            or an emotion profile names a frequency outside it.
        TableIncomplete: If the energy bands lack a terminal default.
    """
    _validate_keys(data, ["universe", "emotions", "energy_bands"], "playlist")

    universe = tuple(int(f) for f in validate_universe(data["universe"]))
    emotions = {
        int(frequency): {str(k): int(v) for k, v in profile.items()}
        for frequency, profile in data["emotions"].items()
    }
    outside = sorted(f for f in emotions if f not in universe)
    if outside:
        raise InvalidConfiguration(
            f"Emotion profiles for frequencies outside the universe: {outside}"
        )

    return PlaylistConfig(
        universe=universe,
        emotions=emotions,
        energy_bands=TierTable.from_config(data["energy_bands"]),
    )


def _validate_keys(data: Any, required: list[str], section: str) -> None:
    """Validate that all required keys exist in a config section.

    Raises:
        ValueError: If the section is not a mapping or a key is missing.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Configuration section '{section}' must be a mapping")
    missing = [key for key in required if key not in data]
    if missing:
        raise ValueError(
            f"Missing required configuration keys in '{section}': {', '.join(missing)}"
        )


# ═══════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════


def build_config(settings: dict[str, Any]) -> AppConfig:
    """Build a validated AppConfig from an already-parsed settings dict."""
    settings = _resolve_env_vars(settings)
    _validate_keys(
        settings, ["frequencies", "resonance", "sigils", "device", "playlist"], "settings",
    )

    profiles, default_frequency = _build_profiles(settings["frequencies"])
    return AppConfig(
        resonance=_build_resonance_config(settings["resonance"]),
        sigils=_build_sigil_config(settings["sigils"]),
        device=_build_device_config(settings["device"]),
        playlist=_build_playlist_config(settings["playlist"]),
        profiles=profiles,
        default_frequency=default_frequency,
        log_level=str(settings.get("logging", {}).get("level", "INFO")).upper(),
    )


def load_config(
    settings_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> AppConfig:
    """Load the complete scoring configuration.

    Args:
        settings_path: Override path to scoring.yaml. Defaults to
            $SCROLLSCORE_CONFIG, then the bundled scoring.yaml.
        env_path: Override path to the .env file. Defaults to .env in the
            current working directory.

    Returns:
        A fully validated AppConfig instance.

    Raises:
        FileNotFoundError: If the config file is missing.
        ValueError: If required keys are missing or env vars are unset.
        InvalidConfiguration: If a table cannot produce bounded scores.
    """
    env_file = env_path or (Path.cwd() / ".env")
    load_dotenv(env_file)
    logger.debug("Loaded environment from %s", env_file)

    settings_file = Path(
        settings_path or os.environ.get("SCROLLSCORE_CONFIG") or SCORING_PATH
    )
    config = build_config(_load_yaml(settings_file))

    logger.info("Configuration loaded from %s", settings_file)
    logger.debug("Frequency universe: %s", config.playlist.universe)
    logger.debug("Device tiers: %s", config.device.tiers.labels)
    return config
