"""Streaming XML element-path matching."""

from __future__ import annotations

import io
from typing import List, Optional, Pattern

import defusedxml.ElementTree as ET  # type: ignore[import-untyped]
from defusedxml import DefusedXmlException  # type: ignore[import-untyped]

from stackmap.core.models import ContentRule, ContentType
from stackmap.matching.content.base import (
    NO_MATCH,
    CompiledContentMatcher,
    ContentMatcherType,
    MatchResult,
    compile_value_regex,
    is_regex_value,
)


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


class CompiledXMLPathMatcher(CompiledContentMatcher):
    """Walks element events and checks the text of the first path hit.

    ``$.project.groupId`` addresses ``<project><groupId>`` regardless of
    XML namespaces.
    """

    def __init__(self, tech: str, path: str, value: str, regex: Optional[Pattern[str]]):
        super().__init__(tech)
        self.path = path if path.startswith("$.") else f"$.{path.lstrip('$.')}"
        self.value = value
        self.regex = regex

    def _matches_value(self, text: str) -> bool:
        if not self.value:
            return True
        if self.regex is not None:
            return self.regex.search(text) is not None
        return text.strip() == self.value.strip()

    def match(self, content: str) -> MatchResult:
        stack: List[str] = []
        source = io.BytesIO(content.encode("utf-8"))
        try:
            for event, elem in ET.iterparse(source, events=("start", "end")):
                if event == "start":
                    stack.append(_local_name(elem.tag))
                    continue
                if "$." + ".".join(stack) == self.path:
                    text = (elem.text or "").strip()
                    if self._matches_value(text):
                        return True, f'matched xml-path "{self.path}" with value "{text}"'
                if stack:
                    stack.pop()
        except (ET.ParseError, DefusedXmlException):
            return NO_MATCH
        return NO_MATCH


class XMLPathContentType(ContentMatcherType):
    @property
    def type(self) -> str:
        return ContentType.XML_PATH.value

    def compile(self, rule: ContentRule, tech: str) -> Optional[CompiledContentMatcher]:
        if not rule.path:
            return None
        regex = None
        if is_regex_value(rule.value):
            regex = compile_value_regex(rule.value)
            if regex is None:
                return None
        return CompiledXMLPathMatcher(tech, rule.path, rule.value, regex)
