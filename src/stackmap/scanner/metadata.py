"""Scan metadata and result containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Set

from stackmap import __version__
from stackmap.core.component import Component

OUTPUT_FORMAT = "stackmap"


@dataclass
class ScanMetadata:
    """Summary numbers for one scan, emitted next to the tree."""

    scan_path: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    )
    format: str = OUTPUT_FORMAT
    version: str = __version__
    duration_ms: int = 0
    file_count: int = 0
    component_count: int = 0
    language_count: int = 0
    tech_count: int = 0
    techs_count: int = 0
    techs: List[str] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    def collect(self, root: Component) -> None:
        """Fill the counters from a finished tree."""
        languages: Set[str] = set()
        primary: Set[str] = set()
        all_techs: Set[str] = set()
        components = 0
        for node in root.walk():
            components += 1
            languages.update(node.languages)
            primary.update(node.tech)
            all_techs.update(node.techs)
            all_techs.update(node.tech)
        self.component_count = components
        self.language_count = len(languages)
        self.tech_count = len(primary)
        self.techs_count = len(all_techs)
        self.techs = sorted(all_techs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "timestamp": self.timestamp,
            "scan_path": self.scan_path,
            "version": self.version,
            "duration_ms": self.duration_ms,
            "file_count": self.file_count,
            "component_count": self.component_count,
            "language_count": self.language_count,
            "tech_count": self.tech_count,
            "techs_count": self.techs_count,
            "techs": list(self.techs),
            "properties": self.properties,
        }


@dataclass
class ScanResult:
    """A finished, identified and resolved component tree."""

    tree: Component
    metadata: ScanMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {"metadata": self.metadata.to_dict(), "tree": self.tree.to_dict()}
