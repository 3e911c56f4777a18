"""Tests for entry-point plugin discovery."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from stackmap.detectors.base import DETECTOR_ENTRY_POINT_GROUP, Detector, discover_detectors
from stackmap.detectors.python import PythonDetector
from stackmap.plugins import discover_plugins


def _entry_point(name: str, loaded=None, error: Exception | None = None) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    if error is not None:
        ep.load.side_effect = error
    else:
        ep.load.return_value = loaded
    return ep


class TestDiscoverPlugins:
    """Tests for generic discover_plugins function."""

    def test_returns_empty_dict_for_unknown_group(self) -> None:
        """Test that an unknown group returns an empty dict."""
        assert discover_plugins("stackmap.nonexistent", Detector) == {}

    def test_loads_subclasses(self) -> None:
        """Test that valid plugin classes are returned by entry point name."""
        eps = [_entry_point("py", PythonDetector)]
        with patch("stackmap.plugins.entry_points", return_value=eps):
            plugins = discover_plugins(DETECTOR_ENTRY_POINT_GROUP, Detector)

        assert plugins == {"py": PythonDetector}

    def test_skips_wrong_base_class(self) -> None:
        """Test that classes not inheriting from the base are skipped."""
        eps = [_entry_point("bad", dict), _entry_point("func", len)]
        with patch("stackmap.plugins.entry_points", return_value=eps):
            assert discover_plugins(DETECTOR_ENTRY_POINT_GROUP, Detector) == {}

    def test_skips_plugins_that_fail_to_load(self) -> None:
        """Test that a plugin raising on import does not break discovery."""
        eps = [
            _entry_point("broken", error=ImportError("no module")),
            _entry_point("py", PythonDetector),
        ]
        with patch("stackmap.plugins.entry_points", return_value=eps):
            plugins = discover_plugins(DETECTOR_ENTRY_POINT_GROUP, Detector)

        assert list(plugins) == ["py"]

    def test_discover_detectors_uses_detector_group(self) -> None:
        """Test that discover_detectors queries the stackmap.detectors group."""
        with patch("stackmap.detectors.base.discover_plugins", return_value={}) as discover:
            assert discover_detectors() == {}
        discover.assert_called_once_with(DETECTOR_ENTRY_POINT_GROUP, Detector)
