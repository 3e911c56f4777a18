"""Tests for stackmap.matching.extension."""

from __future__ import annotations

from stackmap.matching.extension import ExtensionMatcher, normalize_extension


class TestNormalizeExtension:
    """Tests for extension normalization."""

    def test_adds_leading_dot(self) -> None:
        assert normalize_extension("py") == ".py"
        assert normalize_extension(".py") == ".py"

    def test_empty(self) -> None:
        assert normalize_extension("  ") == ""


class TestExtensionMatcher:
    """Tests for extension rules."""

    def test_reports_first_hit_per_tech(self, rule_factory) -> None:
        matcher = ExtensionMatcher([
            rule_factory(tech="python", type="language", extensions=["py", ".pyi"]),
            rule_factory(tech="golang", type="language", extensions=[".go"]),
        ])

        result = matcher.match({".py", ".pyi", ".md"})

        assert result == {"python": ["matched extension: .py"]}

    def test_no_extensions_no_match(self, rule_factory) -> None:
        matcher = ExtensionMatcher([rule_factory(tech="python", type="language", extensions=[".py"])])
        assert matcher.match([]) == {}

    def test_rules_without_extensions_are_ignored(self, rule_factory) -> None:
        matcher = ExtensionMatcher([rule_factory(tech="flask")])
        assert len(matcher) == 0
