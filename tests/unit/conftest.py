"""Shared fixtures for stackmap unit tests."""

from __future__ import annotations

from typing import Any, Dict, Iterable

import pytest

from stackmap.core.models import Rule
from stackmap.detectors import default_registry
from stackmap.detectors.base import DetectorRegistry
from stackmap.matching.categories import CategoryTable
from stackmap.matching.compiler import CompiledRuleSet, PatternCompiler
from stackmap.rules.loader import load_builtin_rules, load_categories


@pytest.fixture(scope="session")
def categories() -> CategoryTable:
    return load_categories()


@pytest.fixture(scope="session")
def builtin_rule_set(categories: CategoryTable) -> CompiledRuleSet:
    """The shipped rules, compiled once per test session."""
    return PatternCompiler(categories=categories).compile(load_builtin_rules())


@pytest.fixture
def registry() -> DetectorRegistry:
    """Built-in detectors only; installed plugins stay out of unit tests."""
    return default_registry(include_plugins=False)


def make_rule(**fields: Any) -> Rule:
    """Build a Rule from keyword fields using the rule-file schema."""
    data: Dict[str, Any] = {"name": fields.get("tech", "").title(), "type": "framework"}
    data.update(fields)
    return Rule.from_dict(data)


def compile_rules(rules: Iterable[Rule], categories: CategoryTable | None = None) -> CompiledRuleSet:
    return PatternCompiler(categories=categories).compile(rules)


@pytest.fixture
def rule_factory():
    """Factory fixture around :func:`make_rule`."""
    return make_rule


@pytest.fixture
def compile_rule_set():
    """Factory fixture around :func:`compile_rules`."""
    return compile_rules
