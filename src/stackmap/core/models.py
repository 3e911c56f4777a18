from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Reserved reason keys that never become technologies.
REASON_KEY_GLOBAL = "_"
REASON_KEY_LICENSE = "_license"
REASON_KEY_DOCKER = "_docker"

RESERVED_REASON_KEYS = frozenset({REASON_KEY_GLOBAL, REASON_KEY_LICENSE, REASON_KEY_DOCKER})

# Rule type whose filename matches never promote a primary tech.
PACKAGE_MANAGER_TYPE = "package_manager"

# Property keys whose list values are concatenated on merge.
ARRAY_MERGE_PROPERTY_KEYS = frozenset({"docker", "terraform"})


class ContentType(str, Enum):
    """Built-in content matching strategies."""

    REGEX = "regex"
    JSON_PATH = "json-path"
    YAML_PATH = "yaml-path"
    XML_PATH = "xml-path"


@dataclass
class DependencyPattern:
    """A dependency name (literal or /regex/) scoped to a dependency type."""

    type: str
    name: str
    example: str = ""

    @property
    def is_regex(self) -> bool:
        return len(self.name) > 2 and self.name.startswith("/") and self.name.endswith("/")


@dataclass
class ContentRule:
    """Content check attached to a rule, scoped by filenames or extensions."""

    type: str = ContentType.REGEX.value
    pattern: str = ""
    path: str = ""
    value: str = ""
    extensions: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentRule":
        return cls(
            type=str(data.get("type") or ContentType.REGEX.value),
            pattern=str(data.get("pattern") or ""),
            path=str(data.get("path") or ""),
            value="" if data.get("value") is None else str(data.get("value")),
            extensions=[str(e) for e in data.get("extensions") or []],
            files=[str(f) for f in data.get("files") or []],
        )


@dataclass
class Rule:
    """Declarative technology definition.

    ``is_component`` and ``is_primary_tech`` are tri-state: ``None`` means
    the value is taken from the category table.
    """

    tech: str
    name: str
    type: str
    description: str = ""
    is_component: Optional[bool] = None
    is_primary_tech: Optional[bool] = None
    dependencies: List[DependencyPattern] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    content: List[ContentRule] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_type: str = "") -> "Rule":
        """Build a rule from its parsed YAML mapping."""
        dependencies = [
            DependencyPattern(
                type=str(dep.get("type") or ""),
                name=str(dep.get("name") or ""),
                example=str(dep.get("example") or ""),
            )
            for dep in data.get("dependencies") or []
            if isinstance(dep, dict)
        ]
        content = [
            ContentRule.from_dict(item)
            for item in data.get("content") or []
            if isinstance(item, dict)
        ]
        return cls(
            tech=str(data.get("tech") or ""),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or default_type),
            description=str(data.get("description") or ""),
            is_component=data.get("is_component"),
            is_primary_tech=data.get("is_primary_tech"),
            dependencies=dependencies,
            files=[str(f) for f in data.get("files") or []],
            extensions=[str(e) for e in data.get("extensions") or []],
            content=content,
            properties=dict(data.get("properties") or {}),
        )


@dataclass(frozen=True)
class Dependency:
    """A declared dependency of a component."""

    type: str
    name: str
    version: str = ""
    source_file: str = ""

    @property
    def key(self) -> tuple:
        return (self.type, self.name, self.version)

    def to_list(self) -> List[str]:
        """Positional form used in serialized output."""
        values = [self.type, self.name, self.version]
        if self.source_file:
            values.append(self.source_file)
        return values


@dataclass
class License:
    """A license record with its provenance."""

    license_name: str
    detection_type: str = "direct"
    source_file: str = ""
    confidence: float = 1.0
    original_license: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "license_name": self.license_name,
            "detection_type": self.detection_type,
            "source_file": self.source_file,
            "confidence": self.confidence,
        }
        if self.original_license:
            data["original_license"] = self.original_license
        return data


@dataclass
class GitInfo:
    """Version-control metadata attached to a component."""

    branch: str = ""
    commit: str = ""
    remote_url: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"branch": self.branch, "commit": self.commit, "remote_url": self.remote_url}


@dataclass
class FileEntry:
    """A single directory entry as reported by a filesystem provider."""

    name: str
    path: str
    is_dir: bool = False
    size: int = 0
