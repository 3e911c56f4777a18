"""Typed scan configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_MAX_FILE_SIZE = 1024 * 1024


@dataclass
class TechOverride:
    """A technology forced onto the root component from configuration."""

    tech: str
    reason: str = ""


@dataclass
class StackmapConfig:
    """Settings for one scan, after all config layers are merged."""

    root_id: Optional[str] = None
    require_root_id: bool = False
    exclude: List[str] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)
    techs: List[TechOverride] = field(default_factory=list)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    workers: int = 1
    rules_dir: Optional[Path] = None
    use_gitignore: bool = True
    use_git: bool = True

    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
