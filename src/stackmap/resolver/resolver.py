"""Two-pass dependency resolution over a finished component tree.

The index pass records which component publishes each
``(dependency_type, package_name)``. The resolve pass walks every
declared dependency and, when another component publishes it, adds a
component reference from the dependent to the provider. Components are
never created, merged or removed here.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from stackmap.core.component import Component
from stackmap.core.logging import get_logger
from stackmap.resolver.providers import PackageProviderRegistry

LOGGER = get_logger(__name__)


class ComponentIndex:
    """``dependency_type -> package_name -> component``.

    Entries hold the component objects themselves rather than their IDs.
    A tagged and an untagged sibling with the same name and first path
    never merge yet hash to the same ID, so an ID-keyed table would
    alias them.
    """

    def __init__(self) -> None:
        self._packages: Dict[str, Dict[str, Component]] = {}

    def add(self, dependency_type: str, package_name: str, component: Component) -> None:
        self._packages.setdefault(dependency_type, {})[package_name] = component

    def lookup(self, dependency_type: str, package_name: str) -> Optional[Component]:
        return self._packages.get(dependency_type, {}).get(package_name)

    def packages(self, dependency_type: str) -> Iterator[Tuple[str, Component]]:
        yield from self._packages.get(dependency_type, {}).items()

    def __len__(self) -> int:
        return sum(len(names) for names in self._packages.values())


class ComponentResolver:
    """Adds component references between dependents and providers."""

    def __init__(self, providers: PackageProviderRegistry):
        self.providers = providers

    def build_index(self, root: Component) -> ComponentIndex:
        index = ComponentIndex()
        for component in root.walk():
            if not component.properties:
                continue
            for provider in self.providers.all():
                for package_name in provider.extract(component):
                    index.add(provider.dependency_type, package_name, component)
        return index

    def resolve(self, root: Component) -> int:
        """Resolve the whole tree in place. Returns the number of references added.

        The tree must already carry its final IDs.
        """
        assert root.frozen, "resolve() requires IDs to be assigned first"

        index = self.build_index(root)
        LOGGER.debug(f"Indexed {len(index)} published packages")

        added = 0
        for component in root.walk():
            for dep in component.dependencies:
                provider = self.providers.get(dep.type)
                if provider is None:
                    continue
                target = index.lookup(dep.type, dep.name)
                if target is None and provider.match is not None:
                    for package_name, candidate in index.packages(dep.type):
                        if provider.match(dep.name, package_name):
                            target = candidate
                            break
                if target is None or target is component:
                    continue
                before = len(component.component_refs)
                component.add_component_ref(target, dep.name)
                added += len(component.component_refs) - before
        LOGGER.debug(f"Resolved {added} component references")
        return added
