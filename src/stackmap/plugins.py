"""Entry-point discovery for detector and reporter plugins.

Third-party packages register classes under the ``stackmap.detectors``
or ``stackmap.reporters`` groups in their packaging metadata.
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Dict, Type, TypeVar

from stackmap.core.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


def discover_plugins(group: str, base_class: Type[T]) -> Dict[str, Type[T]]:
    """Discover all installed plugins of ``base_class`` for an entry point group.

    Plugins that fail to load, or that do not subclass ``base_class``, are
    logged and skipped.
    """
    found: Dict[str, Type[T]] = {}

    try:
        eps = entry_points(group=group)
    except TypeError:
        # Python 3.9 compatibility
        all_eps = entry_points()
        eps = all_eps.get(group, [])  # type: ignore[attr-defined]

    for ep in eps:
        try:
            plugin_class = ep.load()
            if not isinstance(plugin_class, type) or not issubclass(plugin_class, base_class):
                LOGGER.warning(
                    f"Plugin '{ep.name}' does not inherit from {base_class.__name__}, skipping"
                )
                continue
            found[ep.name] = plugin_class
            LOGGER.debug(f"Discovered plugin: {ep.name} ({group})")
        except Exception as e:
            LOGGER.warning(f"Failed to load plugin '{ep.name}': {e}")

    return found
