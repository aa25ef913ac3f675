"""ScrollScore — Command Line.

Loads the scoring tables, builds the engine once and runs one of the
resonance callers, printing the result as JSON.

Usage:
    scrollscore dna --hrv 85 --breath 90 --focus 88 --frequency 963
    scrollscore sigil musa --frequency 528
    scrollscore device --gyroscope --camera
    scrollscore playlist tracks.yaml

An engine error is reported as "score unavailable" with the default
score or label (exit status 2) instead of a traceback.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from scrollscore import __version__
from scrollscore.config import AppConfig, load_config
from scrollscore.errors import ScoringError
from scrollscore.resonance.device import DeviceCapabilities, DeviceCompatibility
from scrollscore.resonance.dna import DNAResonance
from scrollscore.resonance.playlist import PlaylistAnalyzer, Track
from scrollscore.resonance.sigil import SigilResonance
from scrollscore.scorer.engine import ScoringEngine
from scrollscore.utils.logger import get_logger, set_level

logger = get_logger(__name__)

# ── Exit codes ───────────────────────────────────────────
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_UNAVAILABLE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scrollscore",
        description="Resonance and compatibility scoring.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="Path to scoring.yaml")
    parser.add_argument("--log-level", help="Console log level (DEBUG, INFO, ...)")

    sub = parser.add_subparsers(dest="command", required=True)

    dna = sub.add_parser("dna", help="Biometric DNA resonance score")
    dna.add_argument("--hrv", type=float)
    dna.add_argument("--breath", type=float)
    dna.add_argument("--focus", type=float)
    dna.add_argument("--frequency", type=int)

    sigil = sub.add_parser("sigil", help="Sigil-to-user frequency resonance")
    sigil.add_argument("sigil")
    sigil.add_argument("--frequency", type=int, required=True)

    device = sub.add_parser("device", help="AR device compatibility tier")
    for flag in ("webxr", "gyroscope", "accelerometer", "camera"):
        device.add_argument(f"--{flag}", action="store_true")

    playlist = sub.add_parser("playlist", help="Playlist frequency analysis")
    playlist.add_argument("file", type=Path, help="YAML or JSON list of tracks")

    return parser


def _load_tracks(path: Path) -> list[Track]:
    """Read a playlist file: a list of tracks, or a mapping with 'tracks'."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)  # JSON is a subset of YAML
    if isinstance(data, dict):
        data = data.get("tracks", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of tracks")
    return [Track.from_mapping(entry) for entry in data]


def _unavailable(args: argparse.Namespace, config: AppConfig, error: ScoringError) -> dict[str, Any]:
    """Degraded result reported when the engine rejects the input."""
    result: dict[str, Any] = {"available": False, "error": str(error)}
    if args.command == "device":
        result["level"] = config.device.tiers.default
        result["compatible"] = False
    else:
        result["score"] = 0
    return result


def run(args: argparse.Namespace, config: AppConfig, engine: ScoringEngine) -> dict[str, Any]:
    """Dispatch a parsed command to its caller and return a JSON-able dict."""
    if args.command == "dna":
        readings = {"hrv": args.hrv, "breath": args.breath, "focus": args.focus}
        return DNAResonance(engine, config).resonate(readings, args.frequency).to_dict()

    if args.command == "sigil":
        return SigilResonance(engine, config).resonate(args.sigil, args.frequency).to_dict()

    if args.command == "device":
        capabilities = DeviceCapabilities(
            webxr=args.webxr,
            gyroscope=args.gyroscope,
            accelerometer=args.accelerometer,
            camera=args.camera,
        )
        return DeviceCompatibility(engine, config).check(capabilities).to_dict()

    if args.command == "playlist":
        tracks = _load_tracks(args.file)
        return PlaylistAnalyzer(engine, config).analyze(tracks).to_dict()

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entry point. Returns the process exit status."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(settings_path=args.config)
        set_level(args.log_level or config.log_level)
        engine = ScoringEngine.from_config(config)
    except (FileNotFoundError, ValueError, ScoringError) as e:
        logger.error("Configuration error: %s", e)
        return EXIT_USAGE

    try:
        result = run(args, config, engine)
        status = EXIT_OK
    except ScoringError as e:
        logger.warning("Score unavailable: %s", e)
        result = _unavailable(args, config, e)
        status = EXIT_UNAVAILABLE
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Cannot read input: %s", e)
        return EXIT_USAGE

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return status


if __name__ == "__main__":
    sys.exit(main())
