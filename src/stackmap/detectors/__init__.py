"""Ecosystem detectors.

:func:`default_registry` assembles the built-in detectors and package
providers, plus any detector installed through entry points.
"""

from __future__ import annotations

from stackmap.core.logging import get_logger
from stackmap.detectors import nodejs, python
from stackmap.detectors.base import Detector, DetectorRegistry, discover_detectors

LOGGER = get_logger(__name__)

BUILTIN_MODULES = (python, nodejs)


def default_registry(include_plugins: bool = True) -> DetectorRegistry:
    registry = DetectorRegistry()
    for module in BUILTIN_MODULES:
        module.register(registry)

    if include_plugins:
        for name, detector_class in discover_detectors().items():
            try:
                registry.register(detector_class())
            except Exception as e:
                LOGGER.warning(f"Failed to initialize detector '{name}': {e}")
    return registry


__all__ = ["Detector", "DetectorRegistry", "default_registry", "discover_detectors"]
