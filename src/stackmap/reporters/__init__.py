"""Reporters for stackmap output formatting.

Built-in reporters are registered here; additional ones are discovered
via Python entry points (stackmap.reporters group).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from stackmap.plugins import discover_plugins
from stackmap.reporters.base import Reporter
from stackmap.reporters.json_reporter import JSONReporter
from stackmap.reporters.summary_reporter import SummaryReporter

REPORTER_ENTRY_POINT_GROUP = "stackmap.reporters"

BUILTIN_REPORTERS: Dict[str, Type[Reporter]] = {
    "json": JSONReporter,
    "summary": SummaryReporter,
}


def discover_reporters() -> Dict[str, Type[Reporter]]:
    """Built-in reporters plus any installed through entry points."""
    reporters = dict(BUILTIN_REPORTERS)
    for name, reporter_class in discover_plugins(REPORTER_ENTRY_POINT_GROUP, Reporter).items():
        reporters.setdefault(name, reporter_class)
    return reporters


def get_reporter(name: str) -> Optional[Reporter]:
    """Get an instantiated reporter by name, or None if unknown."""
    reporter_class = discover_reporters().get(name)
    return reporter_class() if reporter_class is not None else None


def list_available_reporters() -> List[str]:
    return sorted(discover_reporters())


__all__ = [
    "Reporter",
    "JSONReporter",
    "SummaryReporter",
    "discover_reporters",
    "get_reporter",
    "list_available_reporters",
]
