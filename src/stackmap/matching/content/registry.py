"""Content matcher registries.

:class:`ContentTypeRegistry` holds the strategies that know how to
compile a content rule. :class:`ContentMatcherRegistry` holds the compiled
matchers of one rule set, indexed by filename and by extension.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from stackmap.core.logging import get_logger
from stackmap.core.models import ContentType, Rule
from stackmap.matching.content.base import CompiledContentMatcher, ContentMatcherType
from stackmap.matching.content.regex import RegexContentType
from stackmap.matching.content.structured import JSONPathContentType, YAMLPathContentType
from stackmap.matching.content.xml_path import XMLPathContentType
from stackmap.matching.extension import normalize_extension

LOGGER = get_logger(__name__)


class ContentTypeRegistry:
    """Strategies by type name. Unknown types fall back to regex."""

    def __init__(self) -> None:
        self._types: Dict[str, ContentMatcherType] = {}

    def register(self, content_type: ContentMatcherType) -> None:
        self._types[content_type.type] = content_type

    def get(self, type_name: str) -> ContentMatcherType:
        found = self._types.get(type_name or ContentType.REGEX.value)
        if found is None:
            LOGGER.debug(f"Unknown content type {type_name!r}, using regex")
            found = self._types[ContentType.REGEX.value]
        return found

    def names(self) -> List[str]:
        return sorted(self._types)


def default_content_types() -> ContentTypeRegistry:
    registry = ContentTypeRegistry()
    registry.register(RegexContentType())
    registry.register(JSONPathContentType())
    registry.register(YAMLPathContentType())
    registry.register(XMLPathContentType())
    return registry


MatchMap = Dict[str, List[str]]


class ContentMatcherRegistry:
    """Compiled content matchers keyed by filename and by extension."""

    def __init__(self) -> None:
        self._by_extension: Dict[str, List[CompiledContentMatcher]] = {}
        self._by_filename: Dict[str, List[CompiledContentMatcher]] = {}

    @classmethod
    def from_rules(
        cls, rules: Iterable[Rule], content_types: Optional[ContentTypeRegistry] = None
    ) -> "ContentMatcherRegistry":
        registry = cls()
        types = content_types or default_content_types()
        for rule in rules:
            registry._add_rule(rule, types)
        return registry

    def _add_rule(self, rule: Rule, types: ContentTypeRegistry) -> None:
        if not rule.content:
            return
        has_scope = any(c.files or c.extensions for c in rule.content)
        if not has_scope and not rule.extensions:
            LOGGER.debug(f"Rule {rule.tech} has content checks but no files or extensions")
            return

        for content_rule in rule.content:
            matcher = types.get(content_rule.type).compile(content_rule, rule.tech)
            if matcher is None:
                LOGGER.debug(f"Skipping content check of type {content_rule.type} for {rule.tech}")
                continue
            if content_rule.files:
                for name in content_rule.files:
                    self._by_filename.setdefault(name, []).append(matcher)
                continue
            for ext in content_rule.extensions or rule.extensions:
                key = normalize_extension(ext)
                self._by_extension.setdefault(key, []).append(matcher)

    @property
    def extensions(self) -> Tuple[str, ...]:
        return tuple(sorted(self._by_extension))

    @property
    def filenames(self) -> Tuple[str, ...]:
        return tuple(sorted(self._by_filename))

    def wants(self, file_name: str, ext: str) -> bool:
        """True if some matcher would inspect a file with this name."""
        return file_name in self._by_filename or (
            bool(ext) and normalize_extension(ext) in self._by_extension
        )

    @staticmethod
    def _run(matchers: Iterable[CompiledContentMatcher], content: str) -> MatchMap:
        matched: MatchMap = {}
        for matcher in matchers:
            if matcher.tech in matched:
                continue
            ok, reason = matcher.match(content)
            if ok:
                matched[matcher.tech] = [reason]
        return matched

    def match_content(self, ext: str, content: str) -> MatchMap:
        return self._run(self._by_extension.get(normalize_extension(ext), ()), content)

    def match_content_by_filename(self, file_name: str, content: str) -> MatchMap:
        return self._run(self._by_filename.get(file_name, ()), content)

    def match_file(self, file_name: str, ext: str, content: str) -> MatchMap:
        """Run filename-scoped matchers, then extension-scoped ones.

        A tech already satisfied by its filename check is not reported twice.
        """
        matched = self.match_content_by_filename(file_name, content)
        if ext:
            for tech, reasons in self.match_content(ext, content).items():
                matched.setdefault(tech, reasons)
        return matched
