"""Rule file loading and validation.

Rules live one per file under ``<root>/<type>/<tech>.yaml``. When a rule
does not state its ``type`` the name of its folder is used.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from stackmap.core.logging import get_logger
from stackmap.core.models import ContentType, Rule
from stackmap.matching.categories import CategoryTable

LOGGER = get_logger(__name__)

RULES_PACKAGE_DIR = Path(__file__).parent
BUILTIN_RULES_DIR = RULES_PACKAGE_DIR / "builtin"
CATEGORIES_FILE = RULES_PACKAGE_DIR / "categories.yaml"

RULE_SUFFIXES = (".yaml", ".yml")
_PATH_CONTENT_TYPES = {
    ContentType.JSON_PATH.value,
    ContentType.YAML_PATH.value,
    ContentType.XML_PATH.value,
}


class RuleError(Exception):
    """A rule file could not be parsed or is invalid."""

    pass


def validate_rule(rule: Rule) -> None:
    """Raise :class:`RuleError` if ``rule`` is missing required fields."""
    if not rule.tech:
        raise RuleError("tech is required")
    if not rule.name:
        raise RuleError("name is required")
    if not rule.type:
        raise RuleError("type is required")
    for i, dep in enumerate(rule.dependencies):
        if not dep.type:
            raise RuleError(f"dependency {i}: type is required")
        if not dep.name:
            raise RuleError(f"dependency {i}: name is required")
    for i, content in enumerate(rule.content):
        if content.type in _PATH_CONTENT_TYPES:
            if not content.path:
                raise RuleError(f"content {i}: {content.type} requires path")
        elif not content.pattern:
            raise RuleError(f"content {i}: regex requires pattern")


def derive_type_from_path(path: Path) -> str:
    return path.parent.name


def load_rule_file(path: Path) -> Rule:
    """Parse and validate a single rule file.

    Raises:
        RuleError: If the file cannot be read, parsed or validated.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RuleError(f"Failed to read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleError(f"Failed to parse rule file {path}: {e}") from e

    if not isinstance(data, dict):
        raise RuleError(f"Rule file {path} must contain a mapping")

    rule = Rule.from_dict(data, default_type=derive_type_from_path(path))
    try:
        validate_rule(rule)
    except RuleError as e:
        raise RuleError(f"Invalid rule in {path}: {e}") from e
    return rule


def load_rules(directory: Union[str, Path], strict: bool = False) -> List[Rule]:
    """Load every rule file below ``directory`` in sorted path order.

    Invalid files are logged and skipped unless ``strict`` is set.
    """
    root = Path(directory)
    if not root.is_dir():
        raise RuleError(f"Rules directory not found: {root}")

    rules: List[Rule] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix not in RULE_SUFFIXES:
            continue
        if path.name.startswith("_") or path.parent == root:
            continue
        try:
            rules.append(load_rule_file(path))
        except RuleError as e:
            if strict:
                raise
            LOGGER.warning(str(e))
    LOGGER.debug(f"Loaded {len(rules)} rules from {root}")
    return rules


def load_builtin_rules() -> List[Rule]:
    return load_rules(BUILTIN_RULES_DIR, strict=True)


def load_categories(path: Optional[Path] = None) -> CategoryTable:
    """Read the category table (``type -> {is_component, description}``)."""
    source = path or CATEGORIES_FILE
    try:
        with open(source, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
    except OSError as e:
        raise RuleError(f"Failed to read categories file {source}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleError(f"Failed to parse categories file {source}: {e}") from e
    return CategoryTable.from_dict(data.get("categories", data))


def merge_rules(base: List[Rule], extra: List[Rule]) -> List[Rule]:
    """Overlay ``extra`` on ``base``; an extra rule replaces a base rule with the same tech."""
    overrides = {rule.tech: rule for rule in extra}
    merged = [overrides.pop(rule.tech, rule) for rule in base]
    merged.extend(rule for rule in extra if rule.tech in overrides)
    return merged
