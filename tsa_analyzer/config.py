"""Configuration paths and analysis constants."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("TSA_HOME", str(Path.home() / ".tsa"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
PROJECT_CONFIG_NAME = "tsa.toml"
MANIFEST_NAME = "tsconfig.json"

SUPPORTED_EXTENSIONS = {".ts", ".tsx"}
SKIP_DIRS = {
    "node_modules", ".git", "dist", "build", "out", "coverage",
    ".next", ".nuxt", ".cache", ".turbo", ".tsa",
}

# Detector thresholds
LARGE_ARRAY_THRESHOLD = 1000
COMPLEXITY_THRESHOLD = 10
HIGH_COMPLEXITY_THRESHOLD = 20
CODE_EXCERPT_LIMIT = 100
MODERATE_HEALTH_THRESHOLD = 10

MAX_WORKERS = int(os.environ.get("TSA_MAX_WORKERS", "3"))


def ensure_base_dirs() -> None:
    """Create the base directory for user-level settings if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
