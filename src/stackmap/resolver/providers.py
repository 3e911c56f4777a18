"""Package providers.

A provider tells the resolver, for one dependency type, which package
names a component publishes and how a declared dependency name is
compared with a published one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from stackmap.core.component import Component
from stackmap.core.logging import get_logger

LOGGER = get_logger(__name__)

PackageExtractor = Callable[[Component], List[str]]
PackageMatcher = Callable[[str, str], bool]


@dataclass(frozen=True)
class PackageProvider:
    """Resolution strategy for one dependency type.

    Attributes:
        dependency_type: The ``Dependency.type`` this provider handles.
        extract: Returns the package names a component publishes.
        match: Optional ``(declared, published) -> bool`` comparison used
            when the exact index lookup misses.
    """

    dependency_type: str
    extract: PackageExtractor
    match: Optional[PackageMatcher] = None


def single_property_extractor(tech_key: str, property_key: str = "package_name") -> PackageExtractor:
    """Extractor reading ``properties[tech_key][property_key]``."""

    def extract(component: Component) -> List[str]:
        bag = component.properties.get(tech_key)
        if not isinstance(bag, dict):
            return []
        value = bag.get(property_key)
        if isinstance(value, str) and value:
            return [value]
        if isinstance(value, list):
            return [v for v in value if isinstance(v, str) and v]
        return []

    return extract


class PackageProviderRegistry:
    """Explicit registry of providers, one per dependency type."""

    def __init__(self) -> None:
        self._providers: Dict[str, PackageProvider] = {}

    def register(self, provider: PackageProvider) -> None:
        if provider.dependency_type in self._providers:
            LOGGER.debug(f"Replacing package provider for {provider.dependency_type}")
        self._providers[provider.dependency_type] = provider

    def get(self, dependency_type: str) -> Optional[PackageProvider]:
        return self._providers.get(dependency_type)

    def all(self) -> List[PackageProvider]:
        return list(self._providers.values())

    def __contains__(self, dependency_type: object) -> bool:
        return dependency_type in self._providers

    def __len__(self) -> int:
        return len(self._providers)
