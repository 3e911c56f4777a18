"""Detector plugin contract and registry.

Detectors turn the files of one directory into components. Built-in
ecosystems register themselves explicitly through a ``register``
function; third-party detectors can also be installed as entry points:

    [project.entry-points."stackmap.detectors"]
    cargo = "stackmap_cargo:CargoDetector"
"""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from typing import Dict, List, Type

from stackmap.core.component import Component
from stackmap.core.logging import get_logger
from stackmap.core.models import FileEntry
from stackmap.core.provider import FilesystemProvider
from stackmap.matching.dependency import DependencyMatcher
from stackmap.plugins import discover_plugins
from stackmap.resolver.providers import PackageProviderRegistry

LOGGER = get_logger(__name__)

DETECTOR_ENTRY_POINT_GROUP = "stackmap.detectors"


class Detector(ABC):
    """Produces components for one ecosystem from a directory listing."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Detector identifier (e.g. ``python``)."""

    @abstractmethod
    def detect(
        self,
        files: List[FileEntry],
        current_path: str,
        base_path: str,
        provider: FilesystemProvider,
        matcher: DependencyMatcher,
    ) -> List[Component]:
        """Return the components found in ``current_path``.

        Unreadable or malformed manifests yield no component; they never
        raise.
        """


def relative_file_path(provider: FilesystemProvider, current_path: str, file_name: str) -> str:
    """Path of a manifest relative to the scan root, always starting with ``/``."""
    rel = provider.relative_path(provider.join(current_path, file_name))
    return rel if rel.startswith("/") else "/" + rel


def directory_name(current_path: str) -> str:
    return posixpath.basename(current_path.replace("\\", "/").rstrip("/")) or "root"


class DetectorRegistry:
    """Detectors and package providers assembled before a scan starts."""

    def __init__(self) -> None:
        self._detectors: Dict[str, Detector] = {}
        self.providers = PackageProviderRegistry()

    def register(self, detector: Detector) -> None:
        if detector.name in self._detectors:
            LOGGER.debug(f"Replacing detector {detector.name}")
        self._detectors[detector.name] = detector

    def get(self, name: str) -> Detector | None:
        return self._detectors.get(name)

    @property
    def detectors(self) -> List[Detector]:
        return list(self._detectors.values())

    def names(self) -> List[str]:
        return list(self._detectors)

    def __len__(self) -> int:
        return len(self._detectors)


def discover_detectors(group: str = DETECTOR_ENTRY_POINT_GROUP) -> Dict[str, Type[Detector]]:
    """Find detector classes installed under the ``stackmap.detectors`` group."""
    return discover_plugins(group, Detector)
