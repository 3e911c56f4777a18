"""Dependency-name matching.

Every dependency pattern of every rule is compiled into a regular
expression and bucketed by dependency type. A pattern wrapped in slashes
(``/^@scope\\//``) is used as a regex as-is; anything else must match the
package name exactly.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple

from stackmap.core.component import Component
from stackmap.core.logging import get_logger
from stackmap.core.models import Dependency, DependencyPattern, Rule

LOGGER = get_logger(__name__)

_REGEX_METACHARACTERS = frozenset("\\.+*?()|[]{}^$")


def quote_meta(text: str) -> str:
    """Escape only regex metacharacters, leaving ``-``, ``@`` and ``/`` readable."""
    return "".join("\\" + char if char in _REGEX_METACHARACTERS else char for char in text)


def compile_dependency_pattern(pattern: DependencyPattern) -> Optional[Pattern[str]]:
    """Compile one dependency pattern, or ``None`` if it is invalid."""
    if not pattern.name:
        return None
    if pattern.is_regex:
        source = pattern.name[1:-1]
    else:
        source = f"^{quote_meta(pattern.name)}$"
    try:
        return re.compile(source)
    except re.error as e:
        LOGGER.debug(f"Skipping invalid dependency pattern {pattern.name!r}: {e}")
        return None


class DependencyMatcher:
    """Matches package names against rule dependency patterns.

    Built once per rule set and read-only afterwards, so one instance can
    be shared by concurrent directory scans.
    """

    def __init__(self, rules: Iterable[Rule], primary_techs: Optional[Mapping[str, bool]] = None):
        buckets: Dict[str, List[Tuple[str, Pattern[str]]]] = {}
        for rule in rules:
            for dep in rule.dependencies:
                compiled = compile_dependency_pattern(dep)
                if compiled is None:
                    continue
                buckets.setdefault(dep.type, []).append((rule.tech, compiled))
        self._buckets: Dict[str, Tuple[Tuple[str, Pattern[str]], ...]] = {
            dep_type: tuple(entries) for dep_type, entries in buckets.items()
        }
        self._primary_techs: Dict[str, bool] = dict(primary_techs or {})

    @property
    def dependency_types(self) -> List[str]:
        return sorted(self._buckets)

    def match_dependencies(self, packages: Sequence[str], dep_type: str) -> Dict[str, List[str]]:
        """Return ``{tech: [reason, ...]}`` for every rule hit by ``packages``.

        Each tech appears once; distinct reasons from different patterns
        of the same tech are kept in pattern order.
        """
        matched: Dict[str, List[str]] = {}
        for tech, regex in self._buckets.get(dep_type, ()):
            reason = f"{tech} matched: {regex.pattern}"
            if reason in matched.get(tech, ()):
                continue
            if any(regex.search(package) for package in packages):
                matched.setdefault(tech, []).append(reason)
        return matched

    def is_primary_tech(self, tech: str) -> bool:
        return self._primary_techs.get(tech, False)

    def add_primary_tech_if_needed(self, component: Component, tech: str) -> None:
        if self.is_primary_tech(tech):
            component.add_primary_tech(tech)

    def apply(self, component: Component, dependencies: Iterable[Dependency]) -> Dict[str, List[str]]:
        """Match ``dependencies`` and record every hit on ``component``."""
        by_type: Dict[str, List[str]] = {}
        for dep in dependencies:
            by_type.setdefault(dep.type, []).append(dep.name)

        matched: Dict[str, List[str]] = {}
        for dep_type, names in by_type.items():
            for tech, reasons in self.match_dependencies(names, dep_type).items():
                for reason in reasons:
                    component.add_tech(tech, reason)
                    if reason not in matched.setdefault(tech, []):
                        matched[tech].append(reason)
                self.add_primary_tech_if_needed(component, tech)
        return matched
