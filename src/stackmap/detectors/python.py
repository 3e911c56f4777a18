"""Python project detection from ``pyproject.toml`` and requirements files."""

from __future__ import annotations

import re
import sys
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from stackmap.core.component import VIRTUAL_COMPONENT_NAME, Component
from stackmap.core.logging import get_logger
from stackmap.core.models import Dependency, FileEntry, License
from stackmap.core.provider import FilesystemProvider
from stackmap.detectors.base import Detector, DetectorRegistry, relative_file_path
from stackmap.matching.dependency import DependencyMatcher
from stackmap.resolver.providers import PackageProvider, single_property_extractor

LOGGER = get_logger(__name__)

DEPENDENCY_TYPE = "python"
PYPROJECT = "pyproject.toml"
REQUIREMENTS_PATTERN = re.compile(r"^requirements([-_.][\w.-]+)?\.txt$")

_REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(\[[^\]]*\])?\s*(.*)$")
_PEP503_SEPARATORS = re.compile(r"[-_.]+")


def normalize_package_name(name: str) -> str:
    """PEP 503 normalization: lowercase, runs of ``-_.`` become ``-``."""
    return _PEP503_SEPARATORS.sub("-", name).lower()


def parse_requirement(line: str) -> Optional[tuple]:
    """Split a PEP 508 requirement into ``(name, version_spec)``."""
    line = line.split("#", 1)[0].strip()
    if not line or line.startswith("-") or "://" in line:
        return None
    match = _REQUIREMENT.match(line)
    if match is None:
        return None
    spec = match.group(3).split(";", 1)[0].strip()
    return match.group(1), spec


def parse_requirements_text(text: str, source_file: str) -> List[Dependency]:
    deps: List[Dependency] = []
    for line in text.splitlines():
        parsed = parse_requirement(line)
        if parsed is not None:
            deps.append(Dependency(DEPENDENCY_TYPE, parsed[0], parsed[1], source_file))
    return deps


def _normalized(deps: List[Dependency]) -> List[Dependency]:
    return [Dependency(d.type, normalize_package_name(d.name), d.version) for d in deps]


def _poetry_version(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("version", ""))
    return ""


def parse_pyproject(data: Dict[str, Any]) -> tuple:
    """Return ``(name, dependencies, license)`` from a parsed pyproject."""
    project = data.get("project") or {}
    poetry = (data.get("tool") or {}).get("poetry") or {}
    name = str(project.get("name") or poetry.get("name") or "")

    deps: List[Dependency] = []
    requirements = list(project.get("dependencies") or [])
    for extra in (project.get("optional-dependencies") or {}).values():
        requirements.extend(extra or [])
    for requirement in requirements:
        parsed = parse_requirement(str(requirement))
        if parsed is not None:
            deps.append(Dependency(DEPENDENCY_TYPE, parsed[0], parsed[1], PYPROJECT))

    poetry_sections = [poetry.get("dependencies") or {}, poetry.get("dev-dependencies") or {}]
    for group in (poetry.get("group") or {}).values():
        poetry_sections.append((group or {}).get("dependencies") or {})
    for section in poetry_sections:
        for dep_name, value in section.items():
            if dep_name.lower() == "python":
                continue
            deps.append(Dependency(DEPENDENCY_TYPE, dep_name, _poetry_version(value), PYPROJECT))

    license_value = project.get("license") or poetry.get("license")
    if isinstance(license_value, dict):
        license_value = license_value.get("text") or license_value.get("file")
    return name, deps, (str(license_value) if license_value else "")


class PythonDetector(Detector):
    """Creates a component per ``pyproject.toml`` and merges loose requirements."""

    @property
    def name(self) -> str:
        return "python"

    def detect(
        self,
        files: List[FileEntry],
        current_path: str,
        base_path: str,
        provider: FilesystemProvider,
        matcher: DependencyMatcher,
    ) -> List[Component]:
        names = {f.name for f in files if not f.is_dir}
        if PYPROJECT in names:
            component = self._from_pyproject(current_path, provider, matcher)
            return [component] if component is not None else []

        requirement_files = sorted(n for n in names if REQUIREMENTS_PATTERN.match(n))
        if requirement_files:
            return [self._from_requirements(requirement_files, current_path, provider, matcher)]
        return []

    def _from_pyproject(
        self, current_path: str, provider: FilesystemProvider, matcher: DependencyMatcher
    ) -> Optional[Component]:
        path = provider.join(current_path, PYPROJECT)
        try:
            data = tomllib.loads(provider.read_text(path))
        except OSError as e:
            LOGGER.debug(f"Cannot read {path}: {e}")
            return None
        except tomllib.TOMLDecodeError as e:
            LOGGER.debug(f"Invalid TOML in {path}: {e}")
            return None

        name, deps, license_name = parse_pyproject(data)
        if not name:
            return None

        component = Component(name, [relative_file_path(provider, current_path, PYPROJECT)])
        component.component_type = "python"
        component.add_primary_tech("python")
        component.set_component_property("python", "package_name", name)
        for dep in deps:
            component.add_dependency(dep)
        matcher.apply(component, _normalized(component.dependencies))

        if license_name:
            component.add_license(License(license_name, "direct", PYPROJECT))
            component.add_license_reason(f"license from {PYPROJECT}: {license_name}")
        return component

    def _from_requirements(
        self,
        requirement_files: List[str],
        current_path: str,
        provider: FilesystemProvider,
        matcher: DependencyMatcher,
    ) -> Component:
        # No project metadata here: the dependencies belong to the enclosing component.
        component = Component(VIRTUAL_COMPONENT_NAME, [])
        for file_name in requirement_files:
            path = provider.join(current_path, file_name)
            try:
                text = provider.read_text(path)
            except OSError as e:
                LOGGER.debug(f"Cannot read {path}: {e}")
                continue
            component.add_path(relative_file_path(provider, current_path, file_name))
            for dep in parse_requirements_text(text, file_name):
                component.add_dependency(dep)
        matcher.apply(component, _normalized(component.dependencies))
        return component


def python_package_provider() -> PackageProvider:
    return PackageProvider(
        dependency_type=DEPENDENCY_TYPE,
        extract=single_property_extractor("python"),
        match=lambda declared, published: normalize_package_name(declared)
        == normalize_package_name(published),
    )


def register(registry: DetectorRegistry) -> None:
    registry.register(PythonDetector())
    registry.providers.register(python_package_provider())
