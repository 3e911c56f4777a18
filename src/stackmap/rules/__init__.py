"""Built-in technology rules and the loaders that read rule files."""

from stackmap.rules.loader import (
    RuleError,
    load_builtin_rules,
    load_categories,
    load_rule_file,
    load_rules,
    merge_rules,
    validate_rule,
)

__all__ = [
    "RuleError",
    "load_builtin_rules",
    "load_categories",
    "load_rule_file",
    "load_rules",
    "merge_rules",
    "validate_rule",
]
