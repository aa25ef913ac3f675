#!/usr/bin/env python3
"""ScrollScore — Runner.

Performs pre-flight checks and forwards the remaining arguments to the
scrollscore command line.

Usage:
    python scripts/run.py dna --hrv 85 --breath 90 --focus 88
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

DEFAULT_CONFIG = PROJECT_ROOT / "scrollscore" / "data" / "scoring.yaml"


def preflight_checks() -> bool:
    """Check the .env file and scoring configuration before running.

    Returns:
        True if the scoring configuration can be found.
    """
    ok = True

    env_path = PROJECT_ROOT / ".env"
    if env_path.exists():
        from dotenv import load_dotenv
        load_dotenv(env_path)
        print("✅ .env loaded", file=sys.stderr)
    else:
        print("⚠️  .env not found, using defaults (see .env.example)", file=sys.stderr)

    # Running from a checkout: keep a log file next to the sources
    os.environ.setdefault("SCROLLSCORE_LOG_DIR", str(PROJECT_ROOT / "logs"))

    config_path = Path(os.environ.get("SCROLLSCORE_CONFIG") or DEFAULT_CONFIG)
    if config_path.exists():
        print(f"✅ {config_path} exists", file=sys.stderr)
    else:
        print(f"❌ {config_path} not found!", file=sys.stderr)
        ok = False

    return ok


def main() -> None:
    """Entry point: run checks then the command line."""
    if not preflight_checks():
        print("❌ Pre-flight checks failed! Fix the issues above and try again.", file=sys.stderr)
        sys.exit(1)

    from scrollscore.main import main as app_main
    sys.exit(app_main(sys.argv[1:]))


if __name__ == "__main__":
    main()
