"""Content matching strategy interface."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Optional, Pattern, Tuple

from stackmap.core.logging import get_logger
from stackmap.core.models import ContentRule

LOGGER = get_logger(__name__)

MatchResult = Tuple[bool, str]
NO_MATCH: MatchResult = (False, "")


class CompiledContentMatcher(ABC):
    """A content check ready to run against file text."""

    def __init__(self, tech: str):
        self.tech = tech

    @abstractmethod
    def match(self, content: str) -> MatchResult:
        """Return ``(matched, reason)``. Malformed content is simply no match."""


class ContentMatcherType(ABC):
    """A named strategy that compiles content rules of one kind."""

    @property
    @abstractmethod
    def type(self) -> str:
        """Identifier used in rule files (``regex``, ``json-path`` ...)."""

    @abstractmethod
    def compile(self, rule: ContentRule, tech: str) -> Optional[CompiledContentMatcher]:
        """Compile ``rule`` or return ``None`` when it is unusable."""


def is_regex_value(value: str) -> bool:
    return len(value) > 2 and value.startswith("/") and value.endswith("/")


def compile_value_regex(value: str) -> Optional[Pattern[str]]:
    """Compile a ``/regex/`` expected value; ``None`` if it does not parse."""
    try:
        return re.compile(value[1:-1])
    except re.error as e:
        LOGGER.debug(f"Skipping invalid value pattern {value!r}: {e}")
        return None


def value_to_string(value: Any) -> str:
    """Stringify a parsed JSON/YAML scalar the way it reads in the source."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def split_path(path: str) -> Tuple[str, ...]:
    """Split a simplified ``$.a.b`` path into its keys. ``$`` alone is the root."""
    path = path.strip()
    if path in ("$", ""):
        return ()
    if path.startswith("$."):
        path = path[2:]
    return tuple(part for part in path.split(".") if part)


class _Missing:
    pass


MISSING = _Missing()


def resolve_path(data: Any, keys: Tuple[str, ...]) -> Any:
    """Descend mappings along ``keys``; returns :data:`MISSING` when absent."""
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return MISSING
        current = current[key]
    return current
