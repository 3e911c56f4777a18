"""Tests for stackmap.scanner.parallel."""

from __future__ import annotations

import json
from typing import Any, Dict
from unittest.mock import patch

from stackmap.config.models import StackmapConfig
from stackmap.core.component import Component
from stackmap.core.provider import InMemoryProvider
from stackmap.detectors.base import DetectorRegistry
from stackmap.matching.compiler import CompiledRuleSet
from stackmap.scanner.ignore import IgnoreStack
from stackmap.scanner.parallel import ParallelWalker
from stackmap.scanner.scanner import Scanner

PROJECT: Dict[str, Any] = {
    "api/pyproject.toml": '[project]\nname = "api"\ndependencies = ["flask", "psycopg2"]\n',
    "api/app.py": "x",
    "web/package.json": {"name": "web", "dependencies": {"react": "^18", "pg": "^8", "api": "1"}},
    "web/src/index.tsx": "x",
    "infra/Dockerfile": "FROM python:3.12\n",
    "svc/go.mod": "module svc\n",
    "svc/main.go": "package main\n",
    "README.md": "# project",
}


def _scanner(rule_set: CompiledRuleSet, registry: DetectorRegistry, workers: int) -> Scanner:
    provider = InMemoryProvider(
        {k: v if isinstance(v, str) else json.dumps(v) for k, v in PROJECT.items()}
    )
    config = StackmapConfig(use_git=False, root_id="r", workers=workers)
    return Scanner(provider, rule_set, registry, config)


class TestParallelWalker:
    """Tests for concurrent subtree walking."""

    def test_matches_sequential_walk(
        self, builtin_rule_set: CompiledRuleSet, registry: DetectorRegistry
    ) -> None:
        sequential = _scanner(builtin_rule_set, registry, workers=1).scan()
        parallel = _scanner(builtin_rule_set, registry, workers=4).scan()

        assert parallel.tree.to_dict() == sequential.tree.to_dict()
        assert parallel.metadata.file_count == sequential.metadata.file_count == 8

    def test_uses_parallel_walker_when_workers_set(
        self, builtin_rule_set: CompiledRuleSet, registry: DetectorRegistry
    ) -> None:
        scanner = _scanner(builtin_rule_set, registry, workers=2)
        with patch.object(ParallelWalker, "walk", return_value=0) as walk:
            scanner.build_tree()
        walk.assert_called_once()

    def test_failed_subtree_is_skipped(
        self, builtin_rule_set: CompiledRuleSet, registry: DetectorRegistry
    ) -> None:
        scanner = _scanner(builtin_rule_set, registry, workers=2)
        original_walk = Scanner.walk

        def flaky_walk(self, parent, dir_path, ignore, stats):
            if dir_path.endswith("/web"):
                raise RuntimeError("disk error")
            return original_walk(self, parent, dir_path, ignore, stats)

        with patch.object(Scanner, "walk", flaky_walk):
            root, file_count = scanner.build_tree()

        names = [c.name for c in root.children]
        assert "api" in names
        assert "web" not in names
        assert file_count == 6

    def test_no_subdirectories(
        self, builtin_rule_set: CompiledRuleSet, registry: DetectorRegistry
    ) -> None:
        scanner = _scanner(builtin_rule_set, registry, workers=2)
        scanner.provider = InMemoryProvider({"a.py": "x", "b.py": "y"})
        root, file_count = scanner.build_tree()

        assert file_count == 2
        assert root.languages == {"python": 2}

    def test_walk_returns_file_count(
        self, builtin_rule_set: CompiledRuleSet, registry: DetectorRegistry
    ) -> None:
        scanner = _scanner(builtin_rule_set, registry, workers=3)
        root = Component("main", ["/"])

        count = ParallelWalker(scanner, 3).walk(root, "/project", IgnoreStack())

        assert count == 8
        assert [c.name for c in root.children] == ["api", "web"]
