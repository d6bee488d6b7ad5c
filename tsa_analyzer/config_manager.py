"""Analysis settings stored in TOML files.

Settings are resolved in three layers, later layers winning:

1. built-in defaults (``DEFAULT_SETTINGS``)
2. the ``[analysis]`` table of ``~/.tsa/config.toml``
3. the ``[analysis]`` table of ``<project>/tsa.toml``
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config

logger = logging.getLogger(__name__)

SECTION = "analysis"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "extensions": sorted(config.SUPPORTED_EXTENSIONS),
    "exclude": [],
    "skip_syntax_errors": False,
    "max_workers": config.MAX_WORKERS,
}


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}


def _section(data: Dict[str, Any]) -> Dict[str, Any]:
    section = data.get(SECTION, {})
    if not isinstance(section, dict):
        return {}
    unknown = set(section) - set(DEFAULT_SETTINGS)
    if unknown:
        logger.warning("Unknown analysis settings ignored: %s", ", ".join(sorted(unknown)))
    return {k: v for k, v in section.items() if k in DEFAULT_SETTINGS}


def load_full_config() -> Dict[str, Any]:
    """Load the entire user-level TOML config (all sections)."""
    return _read_toml(config.CONFIG_FILE)


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Resolve analysis settings for *project_root*.

    Args:
        project_root: Project directory that may hold a ``tsa.toml``.

    Returns:
        Settings dictionary with every key of ``DEFAULT_SETTINGS`` present.
    """
    overrides = _section(load_full_config())
    if project_root is not None:
        overrides.update(_section(_read_toml(project_root / config.PROJECT_CONFIG_NAME)))
    return merge_settings(overrides)


def merge_settings(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Fresh copy of the defaults with *overrides* applied and normalized."""
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    settings.update(copy.deepcopy(overrides or {}))

    settings["extensions"] = [
        ext if ext.startswith(".") else f".{ext}" for ext in settings["extensions"]
    ]
    settings["max_workers"] = max(1, int(settings["max_workers"]))
    return settings


def save_config(settings: Dict[str, Any]) -> None:
    """Write *settings* to the user-level ``[analysis]`` table.

    Other sections of the file are preserved.
    """
    full = load_full_config()
    section = full.get(SECTION, {})
    section.update({k: v for k, v in settings.items() if k in DEFAULT_SETTINGS})
    full[SECTION] = section

    config.ensure_base_dirs()
    with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
        toml.dump(full, f)
