"""Compile a rule set into its four matcher families."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from stackmap.core.logging import get_logger
from stackmap.core.models import Rule
from stackmap.matching.categories import (
    CategoryTable,
    should_add_primary_tech,
    should_create_component,
)
from stackmap.matching.content.registry import (
    ContentMatcherRegistry,
    ContentTypeRegistry,
    default_content_types,
)
from stackmap.matching.dependency import DependencyMatcher
from stackmap.matching.extension import ExtensionMatcher
from stackmap.matching.files import FileMatcher, GlobCache

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CompiledRuleSet:
    """Read-only output of :class:`PatternCompiler`.

    Safe to share between threads: nothing in here is mutated after
    construction except the glob cache, which locks its own inserts.
    """

    rules: Tuple[Rule, ...]
    extensions: ExtensionMatcher
    files: FileMatcher
    content: ContentMatcherRegistry
    dependencies: DependencyMatcher
    categories: CategoryTable
    component_techs: Dict[str, bool] = field(default_factory=dict)
    primary_techs: Dict[str, bool] = field(default_factory=dict)
    by_tech: Dict[str, Rule] = field(default_factory=dict)

    def rule_for(self, tech: str) -> Optional[Rule]:
        return self.by_tech.get(tech)

    def creates_component(self, tech: str) -> bool:
        return self.component_techs.get(tech, False)

    def is_primary_tech(self, tech: str) -> bool:
        return self.primary_techs.get(tech, False)

    def promotes_without_component(self, tech: str) -> bool:
        """Primary on the current component without creating a new one."""
        return self.is_primary_tech(tech) and not self.creates_component(tech)

    @property
    def techs(self) -> List[str]:
        return sorted(self.by_tech)


class PatternCompiler:
    """Turns rules into extension, file, content and dependency matchers.

    Bad patterns drop only themselves; the rest of the set still compiles.
    """

    def __init__(
        self,
        categories: Optional[CategoryTable] = None,
        content_types: Optional[ContentTypeRegistry] = None,
        glob_cache: Optional[GlobCache] = None,
    ):
        self.categories = categories or CategoryTable()
        self.content_types = content_types or default_content_types()
        self.glob_cache = glob_cache

    def compile(self, rules: Iterable[Rule]) -> CompiledRuleSet:
        rule_list = tuple(rules)

        by_tech: Dict[str, Rule] = {}
        component_techs: Dict[str, bool] = {}
        primary_techs: Dict[str, bool] = {}
        for rule in rule_list:
            if rule.tech in by_tech:
                LOGGER.debug(f"Duplicate rule for tech {rule.tech}, keeping the first")
                continue
            by_tech[rule.tech] = rule
            component_techs[rule.tech] = should_create_component(rule, self.categories)
            primary_techs[rule.tech] = should_add_primary_tech(rule, self.categories)

        compiled = CompiledRuleSet(
            rules=rule_list,
            extensions=ExtensionMatcher(rule_list),
            files=FileMatcher(rule_list, cache=self.glob_cache),
            content=ContentMatcherRegistry.from_rules(rule_list, self.content_types),
            dependencies=DependencyMatcher(rule_list, primary_techs=primary_techs),
            categories=self.categories,
            component_techs=component_techs,
            primary_techs=primary_techs,
            by_tech=by_tech,
        )
        LOGGER.debug(
            f"Compiled {len(rule_list)} rules: {len(compiled.extensions)} extension, "
            f"{len(compiled.files)} file, {len(compiled.dependencies.dependency_types)} dependency types"
        )
        return compiled
