"""Node.js project detection from ``package.json``."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from stackmap.core.component import Component
from stackmap.core.logging import get_logger
from stackmap.core.models import Dependency, FileEntry, License
from stackmap.core.provider import FilesystemProvider
from stackmap.detectors.base import Detector, DetectorRegistry, relative_file_path
from stackmap.matching.dependency import DependencyMatcher
from stackmap.resolver.providers import PackageProvider, single_property_extractor

LOGGER = get_logger(__name__)

DEPENDENCY_TYPE = "npm"
PACKAGE_JSON = "package.json"
PACKAGE_LOCK = "package-lock.json"
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")


def _read_json(provider: FilesystemProvider, path: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(provider.read_text(path))
    except OSError as e:
        LOGGER.debug(f"Cannot read {path}: {e}")
        return None
    except ValueError as e:
        LOGGER.debug(f"Invalid JSON in {path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def locked_versions(lock: Dict[str, Any]) -> Dict[str, str]:
    """Installed versions of top-level packages from a v1/v2/v3 lock file."""
    versions: Dict[str, str] = {}
    for key, entry in (lock.get("packages") or {}).items():
        if not key.startswith("node_modules/") or not isinstance(entry, dict):
            continue
        name = key[len("node_modules/"):]
        if "/node_modules/" in name:
            continue
        if entry.get("version"):
            versions[name] = str(entry["version"])
    for name, entry in (lock.get("dependencies") or {}).items():
        if isinstance(entry, dict) and entry.get("version"):
            versions.setdefault(name, str(entry["version"]))
    return versions


def _license_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("type") or "")
    return ""


class NodeJSDetector(Detector):
    """Creates a component for each named ``package.json``."""

    @property
    def name(self) -> str:
        return "nodejs"

    def detect(
        self,
        files: List[FileEntry],
        current_path: str,
        base_path: str,
        provider: FilesystemProvider,
        matcher: DependencyMatcher,
    ) -> List[Component]:
        names = {f.name for f in files if not f.is_dir}
        if PACKAGE_JSON not in names:
            return []

        package = _read_json(provider, provider.join(current_path, PACKAGE_JSON))
        if not package or not package.get("name"):
            return []

        name = str(package["name"])
        component = Component(name, [relative_file_path(provider, current_path, PACKAGE_JSON)])
        component.component_type = "nodejs"
        component.add_primary_tech("nodejs")
        component.set_component_property("nodejs", "package_name", name)

        versions: Dict[str, str] = {}
        if PACKAGE_LOCK in names:
            lock = _read_json(provider, provider.join(current_path, PACKAGE_LOCK))
            if lock:
                versions = locked_versions(lock)

        for section in DEPENDENCY_SECTIONS:
            for dep_name, spec in (package.get(section) or {}).items():
                version = versions.get(dep_name) or str(spec or "")
                component.add_dependency(
                    Dependency(DEPENDENCY_TYPE, dep_name, version, PACKAGE_JSON)
                )
        matcher.apply(component, component.dependencies)

        license_name = _license_name(package.get("license"))
        if license_name:
            component.add_license(License(license_name, "direct", PACKAGE_JSON))
            component.add_license_reason(f"license from {PACKAGE_JSON}: {license_name}")
        return [component]


def npm_package_provider() -> PackageProvider:
    return PackageProvider(
        dependency_type=DEPENDENCY_TYPE,
        extract=single_property_extractor("nodejs"),
    )


def register(registry: DetectorRegistry) -> None:
    registry.register(NodeJSDetector())
    registry.providers.register(npm_package_provider())
