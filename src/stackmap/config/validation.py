"""Configuration validation for stackmap.

Warns on unknown keys (with a typo suggestion) and reports wrongly typed
values as errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from stackmap.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at runtime
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


# Expected type per top-level key
VALID_TOP_LEVEL_KEYS: Dict[str, Tuple[type, ...]] = {
    "root_id": (str,),
    "require_root_id": (bool,),
    "exclude": (list,),
    "properties": (dict,),
    "techs": (list,),
    "max_file_size": (int,),
    "workers": (int,),
    "rules_dir": (str,),
    "use_gitignore": (bool,),
    "use_git": (bool,),
}

VALID_TECH_KEYS: Set[str] = {"tech", "reason"}


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a parsed config mapping.

    Does not raise; returns every issue found.
    """
    issues: List[ConfigValidationIssue] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        issues.append(ConfigValidationIssue(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return issues  # type: ignore[unreachable]

    for key, value in data.items():
        expected = VALID_TOP_LEVEL_KEYS.get(key)
        if expected is None:
            issues.append(ConfigValidationIssue(
                message=f"Unknown config key '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest_key(key, set(VALID_TOP_LEVEL_KEYS)),
            ))
            continue
        if value is None:
            continue
        # bool is an int subclass; keep integers strict
        if not isinstance(value, expected) or (int in expected and isinstance(value, bool)):
            names = " or ".join(t.__name__ for t in expected)
            issues.append(ConfigValidationIssue(
                message=f"'{key}' must be {names}, got {type(value).__name__}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))

    techs = data.get("techs")
    for index, item in enumerate(techs if isinstance(techs, list) else []):
        if isinstance(item, str):
            continue
        if not isinstance(item, dict) or "tech" not in item:
            issues.append(ConfigValidationIssue(
                message=f"techs[{index}] must be a string or a mapping with 'tech'",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="techs",
            ))
            continue
        for sub_key in item:
            if sub_key not in VALID_TECH_KEYS:
                issues.append(ConfigValidationIssue(
                    message=f"Unknown key '{sub_key}' in techs[{index}]",
                    source=source,
                    severity=ValidationSeverity.WARNING,
                    key=f"techs.{sub_key}",
                    suggestion=_suggest_key(sub_key, VALID_TECH_KEYS),
                ))

    return issues


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Closest matching valid key, or None if no good match."""
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None
