"""ScrollScore — AR Device Compatibility.

Classifies a device's capabilities into an AR experience tier
(full / standard / basic / none) with the engine's 'device' tier table.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from scrollscore.config import AppConfig
from scrollscore.scorer.classifier import CapabilityFlagSet
from scrollscore.scorer.engine import ScoringEngine
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeviceCapabilities:
    """Capabilities reported by a device probe."""

    webxr: bool = False
    gyroscope: bool = False
    accelerometer: bool = False
    camera: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DeviceCapabilities":
        """Build from a probe dict. Missing or unknown flags are ignored."""
        return cls(
            webxr=bool(data.get("webxr", False)),
            gyroscope=bool(data.get("gyroscope", False)),
            accelerometer=bool(data.get("accelerometer", False)),
            camera=bool(data.get("camera", False)),
        )

    def to_flags(self) -> CapabilityFlagSet:
        return CapabilityFlagSet(asdict(self))


@dataclass(frozen=True)
class CompatibilityReport:
    """AR tier of a device and whether the AR experience can start."""

    level: str
    compatible: bool
    capabilities: DeviceCapabilities

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "compatible": self.compatible,
            **asdict(self.capabilities),
        }


class DeviceCompatibility:
    """Maps device capabilities to an AR tier."""

    def __init__(self, engine: ScoringEngine, config: AppConfig) -> None:
        self.engine = engine
        self.compatible_tiers = config.device.compatible_tiers

    def check(self, capabilities: DeviceCapabilities) -> CompatibilityReport:
        level = self.engine.classify(capabilities.to_flags(), table="device")
        report = CompatibilityReport(
            level=level,
            compatible=level in self.compatible_tiers,
            capabilities=capabilities,
        )
        logger.info(
            "Device tier=%s compatible=%s (%s)",
            level, report.compatible,
            ", ".join(capabilities.to_flags().enabled()) or "no capabilities",
        )
        return report
