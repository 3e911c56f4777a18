"""Filename and glob matching.

A plain pattern is compared against each file name: exact equality
first, then glob semantics (``*`` is any run of characters, ``?`` is one
character). Patterns containing ``/`` describe a directory and are
matched as a suffix of the current scan path.
"""

from __future__ import annotations

import re
import threading
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from stackmap.core.logging import get_logger
from stackmap.core.models import PACKAGE_MANAGER_TYPE, Rule

LOGGER = get_logger(__name__)

_GLOB_ESCAPES = set(".+()[]{}^$|\\")


def glob_to_regex(glob: str) -> str:
    """Translate a glob into an anchored regular expression string."""
    parts = ["^"]
    for char in glob:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char in _GLOB_ESCAPES:
            parts.append("\\" + char)
        else:
            parts.append(char)
    parts.append("$")
    return "".join(parts)


def is_glob_pattern(pattern: str) -> bool:
    return "*" in pattern or "?" in pattern


class GlobCache:
    """Thread-safe memo of compiled globs keyed by their regex text."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._compiled: Dict[str, Optional[Pattern[str]]] = {}

    def get(self, glob: str) -> Optional[Pattern[str]]:
        key = glob_to_regex(glob)
        cached = self._compiled.get(key)
        if cached is not None or key in self._compiled:
            return cached
        try:
            compiled: Optional[Pattern[str]] = re.compile(key)
        except re.error as e:
            LOGGER.debug(f"Invalid glob {glob!r}: {e}")
            compiled = None
        with self._lock:
            return self._compiled.setdefault(key, compiled)

    def __len__(self) -> int:
        return len(self._compiled)

    def clear(self) -> None:
        with self._lock:
            self._compiled.clear()


_DEFAULT_CACHE = GlobCache()


def match_file_name(pattern: str, file_name: str, cache: GlobCache = _DEFAULT_CACHE) -> bool:
    if pattern == file_name:
        return True
    if not is_glob_pattern(pattern):
        return False
    compiled = cache.get(pattern)
    return compiled is not None and compiled.fullmatch(file_name) is not None


class FileMatcher:
    """Reports techs whose filename patterns hit in one directory.

    Rules of type ``package_manager`` are left out; a lock file alone does
    not make a component.
    """

    def __init__(self, rules: Iterable[Rule], cache: Optional[GlobCache] = None):
        self._cache = cache if cache is not None else _DEFAULT_CACHE
        self._entries: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (rule.tech, tuple(rule.files))
            for rule in rules
            if rule.files and rule.type != PACKAGE_MANAGER_TYPE
        )

    def __len__(self) -> int:
        return len(self._entries)

    def _match_pattern(
        self, pattern: str, file_names: Sequence[str], current_path: str
    ) -> Optional[str]:
        if "/" in pattern:
            return pattern if current_path.endswith(pattern) else None
        for name in file_names:
            if match_file_name(pattern, name, self._cache):
                return name
        return None

    def match(self, file_names: Sequence[str], current_path: str = "") -> Dict[str, List[str]]:
        matched: Dict[str, List[str]] = {}
        for tech, patterns in self._entries:
            if tech in matched:
                continue
            for pattern in patterns:
                hit = self._match_pattern(pattern, file_names, current_path)
                if hit is not None:
                    matched[tech] = [f"matched file: {hit}"]
                    break
        return matched
