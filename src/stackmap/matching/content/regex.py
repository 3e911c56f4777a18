"""Raw-text regular expression content matching."""

from __future__ import annotations

import re
from typing import Optional, Pattern

from stackmap.core.logging import get_logger
from stackmap.core.models import ContentRule, ContentType
from stackmap.matching.content.base import (
    NO_MATCH,
    CompiledContentMatcher,
    ContentMatcherType,
    MatchResult,
)

LOGGER = get_logger(__name__)


class CompiledRegexMatcher(CompiledContentMatcher):
    def __init__(self, tech: str, regex: Pattern[str]):
        super().__init__(tech)
        self.regex = regex

    def match(self, content: str) -> MatchResult:
        if self.regex.search(content):
            return True, f"content matched: {self.regex.pattern}"
        return NO_MATCH


class RegexContentType(ContentMatcherType):
    @property
    def type(self) -> str:
        return ContentType.REGEX.value

    def compile(self, rule: ContentRule, tech: str) -> Optional[CompiledContentMatcher]:
        if not rule.pattern:
            return None
        try:
            regex = re.compile(rule.pattern)
        except re.error as e:
            LOGGER.debug(f"Skipping invalid content pattern for {tech}: {e}")
            return None
        return CompiledRegexMatcher(tech, regex)
