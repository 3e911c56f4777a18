"""Tests for stackmap.detectors.nodejs."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from stackmap.core.component import Component
from stackmap.core.models import Dependency
from stackmap.core.provider import InMemoryProvider
from stackmap.detectors.base import DetectorRegistry, directory_name
from stackmap.detectors.nodejs import NodeJSDetector, locked_versions, register
from stackmap.matching.compiler import CompiledRuleSet


def _detect(files: Dict[str, Any], rule_set: CompiledRuleSet) -> List[Component]:
    provider = InMemoryProvider(
        {k: v if isinstance(v, str) else json.dumps(v) for k, v in files.items()}
    )
    entries = provider.list_dir("/project/web")
    return NodeJSDetector().detect(
        entries, "/project/web", provider.base_path, provider, rule_set.dependencies
    )


PACKAGE = {
    "name": "web",
    "license": "MIT",
    "dependencies": {"react": "^18.2.0", "pg": "^8.11.0"},
    "devDependencies": {"jest": "^29.0.0"},
}


class TestLockedVersions:
    """Tests for lock file version extraction."""

    def test_packages_section(self) -> None:
        lock = {
            "packages": {
                "": {"name": "web"},
                "node_modules/react": {"version": "18.2.0"},
                "node_modules/a/node_modules/b": {"version": "1.0.0"},
                "node_modules/@scope/pkg": {"version": "2.0.0"},
            }
        }
        assert locked_versions(lock) == {"react": "18.2.0", "@scope/pkg": "2.0.0"}

    def test_legacy_dependencies_section(self) -> None:
        lock = {"dependencies": {"react": {"version": "17.0.2"}, "bad": "x"}}
        assert locked_versions(lock) == {"react": "17.0.2"}


class TestNodeJSDetector:
    """Tests for package.json components."""

    def test_package_json_component(self, builtin_rule_set: CompiledRuleSet) -> None:
        components = _detect({"web/package.json": PACKAGE}, builtin_rule_set)

        assert len(components) == 1
        web = components[0]
        assert web.name == "web"
        assert web.path == ["/web/package.json"]
        assert web.tech[0] == "nodejs"
        assert "postgresql" in web.tech
        assert {"react", "jest", "postgresql"} <= set(web.techs)
        assert web.properties["nodejs"] == {"package_name": "web"}
        assert [lic.license_name for lic in web.licenses] == ["MIT"]
        assert len(web.dependencies) == 3

    def test_lock_versions_override_ranges(self, builtin_rule_set: CompiledRuleSet) -> None:
        lock = {"packages": {"node_modules/react": {"version": "18.3.1"}}}
        components = _detect(
            {"web/package.json": PACKAGE, "web/package-lock.json": lock}, builtin_rule_set
        )

        deps = components[0].dependencies
        assert Dependency("npm", "react", "18.3.1", "package.json") in deps
        assert Dependency("npm", "pg", "^8.11.0", "package.json") in deps

    def test_license_object(self, builtin_rule_set: CompiledRuleSet) -> None:
        package = {"name": "web", "license": {"type": "ISC"}}
        components = _detect({"web/package.json": package}, builtin_rule_set)
        assert components[0].licenses[0].license_name == "ISC"

    def test_unnamed_package_yields_nothing(self, builtin_rule_set: CompiledRuleSet) -> None:
        package = {"private": True, "dependencies": {"react": "^18"}}
        assert _detect({"web/package.json": package}, builtin_rule_set) == []

    def test_malformed_json_yields_nothing(self, builtin_rule_set: CompiledRuleSet) -> None:
        assert _detect({"web/package.json": "{not json"}, builtin_rule_set) == []

    def test_no_package_json(self, builtin_rule_set: CompiledRuleSet) -> None:
        assert _detect({"web/index.js": "x"}, builtin_rule_set) == []


class TestRegistration:
    """Tests for registry wiring."""

    def test_register_adds_detector_and_provider(self) -> None:
        registry = DetectorRegistry()
        register(registry)

        assert registry.names() == ["nodejs"]
        assert registry.providers.get("npm") is not None

    def test_directory_name(self) -> None:
        assert directory_name("/project/web/") == "web"
        assert directory_name("/") == "root"
