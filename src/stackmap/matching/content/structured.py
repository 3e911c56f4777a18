"""Path-based matching over JSON and YAML documents.

Both formats parse into plain dicts and lists, so they share one
matcher: descend the dot path, then check existence, compare the
stringified value literally, or search it with a ``/regex/`` value.
"""

from __future__ import annotations

import json
from abc import abstractmethod
from typing import Any, Optional, Pattern, Tuple

import yaml

from stackmap.core.models import ContentRule, ContentType
from stackmap.matching.content.base import (
    MISSING,
    NO_MATCH,
    CompiledContentMatcher,
    ContentMatcherType,
    MatchResult,
    compile_value_regex,
    is_regex_value,
    resolve_path,
    split_path,
    value_to_string,
)


class CompiledPathMatcher(CompiledContentMatcher):
    """Shared descend-and-compare logic; subclasses supply parsing and wording."""

    def __init__(self, tech: str, path: str, value: str, regex: Optional[Pattern[str]]):
        super().__init__(tech)
        self.path = path
        self.value = value
        self.keys: Tuple[str, ...] = split_path(path)
        self.regex = regex

    @abstractmethod
    def parse(self, content: str) -> Any:
        """Parse ``content``; raise ``ValueError`` for malformed input.

        Documents nested past the interpreter recursion limit raise
        ``RecursionError``, which ``match`` also treats as no match.
        """

    @abstractmethod
    def reason(self, kind: str) -> str:
        ...

    def match(self, content: str) -> MatchResult:
        try:
            data = self.parse(content)
        except (ValueError, RecursionError):
            return NO_MATCH

        found = resolve_path(data, self.keys)
        if found is MISSING:
            return NO_MATCH

        if not self.value:
            return True, self.reason("exists")

        actual = value_to_string(found)
        if self.regex is not None:
            if self.regex.search(actual):
                return True, self.reason("regex")
            return NO_MATCH
        if actual == self.value:
            return True, self.reason("equals")
        return NO_MATCH


class CompiledJSONPathMatcher(CompiledPathMatcher):
    def parse(self, content: str) -> Any:
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("JSON root is not an object")
        return data

    def reason(self, kind: str) -> str:
        if kind == "exists":
            return f"json path exists: {self.path}"
        if kind == "regex":
            return f"json path {self.path} matched pattern: {self.value}"
        return f"json path {self.path} matched: {self.value}"


class CompiledYAMLPathMatcher(CompiledPathMatcher):
    """Matches against the first document of a YAML stream."""

    def parse(self, content: str) -> Any:
        try:
            data = next(iter(yaml.safe_load_all(content)), None)
        except yaml.YAMLError as e:
            raise ValueError(str(e)) from e
        if not isinstance(data, dict):
            raise ValueError("YAML root is not a mapping")
        return data

    def reason(self, kind: str) -> str:
        if kind == "exists":
            return f"yaml-path {self.path} exists"
        if kind == "regex":
            return f"yaml-path {self.path} matches {self.value}"
        return f"yaml-path {self.path} equals {self.value}"


class _PathContentType(ContentMatcherType):
    matcher_class = CompiledPathMatcher

    def compile(self, rule: ContentRule, tech: str) -> Optional[CompiledContentMatcher]:
        if not rule.path:
            return None
        regex = None
        if is_regex_value(rule.value):
            regex = compile_value_regex(rule.value)
            if regex is None:
                return None
        return self.matcher_class(tech, rule.path, rule.value, regex)


class JSONPathContentType(_PathContentType):
    matcher_class = CompiledJSONPathMatcher

    @property
    def type(self) -> str:
        return ContentType.JSON_PATH.value


class YAMLPathContentType(_PathContentType):
    matcher_class = CompiledYAMLPathMatcher

    @property
    def type(self) -> str:
        return ContentType.YAML_PATH.value
