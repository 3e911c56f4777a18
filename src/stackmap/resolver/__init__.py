"""Cross-component dependency resolution."""

from stackmap.resolver.providers import (
    PackageProvider,
    PackageProviderRegistry,
    single_property_extractor,
)
from stackmap.resolver.resolver import ComponentIndex, ComponentResolver

__all__ = [
    "ComponentIndex",
    "ComponentResolver",
    "PackageProvider",
    "PackageProviderRegistry",
    "single_property_extractor",
]
