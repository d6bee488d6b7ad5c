"""Read the file scope (``files``/``include``/``exclude``) of a tsconfig.json.

tsconfig files are JSON with comments and trailing commas, so both are
stripped before handing the text to :mod:`json`. Patterns follow the
TypeScript rules: paths are relative to the manifest's directory, ``*``
and ``?`` stay within one path segment, ``**/`` spans any number of
directories, and a pattern without wildcards names a file or a whole
directory. ``extends`` is not followed.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = ["**/*"]

# Strings are matched first so that "//" or "/*" inside them survive
_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas."""
    text = _COMMENT_RE.sub(lambda m: m.group(1) or "", text)
    text = _TRAILING_COMMA_RE.sub(lambda m: m.group(1) or "", text)
    return json.loads(text)


def _normalize(pattern: str) -> str:
    pattern = pattern.replace("\\", "/").strip()
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern.rstrip("/")


def pattern_to_regex(pattern: str) -> Pattern[str]:
    """Compile a tsconfig include/exclude pattern against relative posix paths."""
    pattern = _normalize(pattern)
    if pattern in ("", "."):
        return re.compile(r".*")
    if not any(ch in pattern for ch in "*?"):
        # Literal file, or a directory and everything below it
        return re.compile(re.escape(pattern) + r"(?:/.*)?")

    parts: List[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append(r"(?:[^/]+/)*")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(r".*")
            i += 2
        elif pattern[i] == "*":
            parts.append(r"[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append(r"[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts))


class TsConfigScope:
    """Decides whether a file belongs to the project a tsconfig.json describes."""

    def __init__(
        self,
        base_dir: Path,
        files: Optional[List[str]] = None,
        include: Optional[List[str]] = None,
        exclude: Optional[List[str]] = None,
    ):
        self.base_dir = base_dir
        self.files = {_normalize(f) for f in files or []}
        if include is None:
            # An explicit "files" list without "include" restricts the scope to it
            include = [] if files else DEFAULT_INCLUDE
        self._include = [pattern_to_regex(p) for p in include]
        self._exclude = [pattern_to_regex(p) for p in exclude or []]

    @classmethod
    def from_manifest(cls, manifest: Path) -> "TsConfigScope":
        """Build the scope of *manifest*; unreadable manifests include everything."""
        base_dir = manifest.parent
        try:
            data: Dict[str, Any] = parse_jsonc(manifest.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Could not read %s (%s); analysing all source files", manifest, exc)
            return cls(base_dir)
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level is not an object", manifest)
            return cls(base_dir)

        def _list(key: str) -> Optional[List[str]]:
            value = data.get(key)
            if value is None:
                return None
            if not isinstance(value, list):
                logger.warning("Ignoring non-list '%s' in %s", key, manifest)
                return None
            return [str(v) for v in value]

        return cls(base_dir, files=_list("files"), include=_list("include"), exclude=_list("exclude"))

    def contains(self, file_path: Path) -> bool:
        try:
            rel = file_path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return False
        # Files named explicitly are in scope even when an exclude matches
        if rel in self.files:
            return True
        if not any(p.fullmatch(rel) for p in self._include):
            return False
        return not any(p.fullmatch(rel) for p in self._exclude)
