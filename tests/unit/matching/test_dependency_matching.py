"""Tests for stackmap.matching.dependency."""

from __future__ import annotations

from stackmap.core.component import Component
from stackmap.core.models import Dependency, DependencyPattern
from stackmap.matching.dependency import (
    DependencyMatcher,
    compile_dependency_pattern,
    quote_meta,
)


class TestCompileDependencyPattern:
    """Tests for literal and /regex/ dependency names."""

    def test_literal_is_anchored_and_escaped(self) -> None:
        regex = compile_dependency_pattern(DependencyPattern("npm", "@scope/pkg.js"))
        assert regex is not None
        assert regex.search("@scope/pkg.js")
        assert not regex.search("@scope/pkgXjs")
        assert not regex.search("@scope/pkg.js-extra")

    def test_literal_keeps_dashes_and_scopes_readable(self) -> None:
        assert quote_meta("psycopg2-binary") == "psycopg2-binary"
        assert quote_meta("@types/node") == "@types/node"
        assert quote_meta("a.b+c(d)") == r"a\.b\+c\(d\)"

    def test_slash_delimited_is_regex(self) -> None:
        regex = compile_dependency_pattern(DependencyPattern("npm", r"/^@scope\//"))
        assert regex is not None
        assert regex.search("@scope/anything")
        assert not regex.search("@other/anything")

    def test_invalid_regex_is_none(self) -> None:
        assert compile_dependency_pattern(DependencyPattern("npm", "/([/")) is None

    def test_empty_name_is_none(self) -> None:
        assert compile_dependency_pattern(DependencyPattern("npm", "")) is None


class TestDependencyMatcher:
    """Tests for dependency-driven tech detection."""

    def test_literal_matches_only_exact_name(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(tech="react", dependencies=[{"type": "npm", "name": "react"}]),
        ])
        assert matcher.match_dependencies(["react-dom"], "npm") == {}
        assert matcher.match_dependencies(["react"], "npm") == {
            "react": ["react matched: ^react$"],
        }

    def test_dashed_literal_reason_is_unescaped(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(
                tech="postgresql", dependencies=[{"type": "python", "name": "psycopg2-binary"}]
            ),
        ])
        assert matcher.match_dependencies(["psycopg2-binary"], "python") == {
            "postgresql": ["postgresql matched: ^psycopg2-binary$"],
        }

    def test_regex_pattern_matches_prefix(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(tech="scoped", dependencies=[{"type": "npm", "name": r"/^@scope\//"}]),
        ])
        assert matcher.match_dependencies(["@scope/a", "lodash"], "npm") == {
            "scoped": [r"scoped matched: ^@scope\/"],
        }

    def test_types_are_separate_buckets(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(tech="redis", dependencies=[{"type": "python", "name": "redis"}]),
        ])
        assert matcher.match_dependencies(["redis"], "npm") == {}
        assert matcher.dependency_types == ["python"]

    def test_distinct_reasons_are_aggregated(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(
                tech="postgresql",
                dependencies=[
                    {"type": "python", "name": "psycopg"},
                    {"type": "python", "name": "asyncpg"},
                ],
            ),
        ])
        result = matcher.match_dependencies(["asyncpg", "psycopg"], "python")
        assert result == {
            "postgresql": ["postgresql matched: ^psycopg$", "postgresql matched: ^asyncpg$"],
        }

    def test_apply_records_flask_reason(self, rule_factory) -> None:
        matcher = DependencyMatcher([
            rule_factory(tech="flask", dependencies=[{"type": "python", "name": "flask"}]),
        ])
        component = Component("api", ["/api/pyproject.toml"])

        matched = matcher.apply(component, [Dependency("python", "flask", "2.0")])

        assert matched == {"flask": ["flask matched: ^flask$"]}
        assert "flask" in component.techs
        assert component.reason["flask"] == ["flask matched: ^flask$"]
        assert component.tech == []

    def test_apply_promotes_primary_techs(self, rule_factory) -> None:
        matcher = DependencyMatcher(
            [rule_factory(tech="postgresql", type="database",
                          dependencies=[{"type": "python", "name": "asyncpg"}])],
            primary_techs={"postgresql": True},
        )
        component = Component("api", ["/api/pyproject.toml"])

        matcher.apply(component, [Dependency("python", "asyncpg", "0.29")])

        assert component.tech == ["postgresql"]
        assert matcher.is_primary_tech("postgresql")
        assert not matcher.is_primary_tech("flask")
