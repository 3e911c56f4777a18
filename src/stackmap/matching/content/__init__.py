"""Content matching strategies (regex, JSON/YAML/XML paths)."""

from stackmap.matching.content.base import CompiledContentMatcher, ContentMatcherType
from stackmap.matching.content.registry import (
    ContentMatcherRegistry,
    ContentTypeRegistry,
    default_content_types,
)

__all__ = [
    "CompiledContentMatcher",
    "ContentMatcherRegistry",
    "ContentMatcherType",
    "ContentTypeRegistry",
    "default_content_types",
]
