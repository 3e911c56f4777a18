"""Configuration file loading and merging.

Handles loading scan configuration with:
- Project-level config (.stackmap.yml in the scan root, or --config)
- Environment settings (STACKMAP_*)
- Environment variable expansion (${VAR}) inside the YAML
- CLI overrides with the highest precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from stackmap.config.models import DEFAULT_MAX_FILE_SIZE, StackmapConfig, TechOverride
from stackmap.config.validation import ValidationSeverity, validate_config
from stackmap.core.logging import get_logger

LOGGER = get_logger(__name__)

PROJECT_CONFIG_NAMES = [".stackmap.yml", ".stackmap.yaml", "stackmap.yml", "stackmap.yaml"]

ENV_PREFIX = "STACKMAP_"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading, parsing or policy error."""

    pass


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StackmapConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Environment settings (STACKMAP_ROOT_ID, STACKMAP_EXCLUDE, ...)
    3. Custom config file (cli_config_path) OR project config (.stackmap.yml)
    4. Built-in defaults

    Raises:
        ConfigError: If a config file is missing, unparsable or invalid.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        config_path: Optional[Path] = cli_config_path
        label = "custom"
    else:
        config_path = find_project_config(project_root)
        label = "project"

    if config_path is not None:
        try:
            file_dict = load_yaml_file(config_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        _raise_on_errors(file_dict, str(config_path))
        merged = merge_configs(merged, file_dict)
        sources.append(f"{label}:{config_path}")
        LOGGER.debug(f"Loaded {label} config from {config_path}")

    env_dict = settings_from_env(os.environ if environ is None else environ)
    if env_dict:
        merged = merge_configs(merged, env_dict)
        sources.append("env")

    if cli_overrides:
        overrides = {k: v for k, v in cli_overrides.items() if v is not None}
        merged = merge_configs(merged, overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources
    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _raise_on_errors(data: Dict[str, Any], source: str) -> None:
    for issue in validate_config(data, source=source):
        if issue.severity == ValidationSeverity.ERROR:
            raise ConfigError(f"{source}: {issue.message}")
        message = f"{source}: {issue.message}"
        if issue.suggestion:
            message += f" (did you mean '{issue.suggestion}'?)"
        LOGGER.warning(message)


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find the first known config file name in ``project_root``."""
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and expand environment variables in it.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand ``${VAR}`` and ``${VAR:-default}`` in string values."""
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def settings_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Read STACKMAP_* settings into a config dict."""
    settings: Dict[str, Any] = {}

    if environ.get(f"{ENV_PREFIX}ROOT_ID"):
        settings["root_id"] = environ[f"{ENV_PREFIX}ROOT_ID"]
    if environ.get(f"{ENV_PREFIX}EXCLUDE"):
        settings["exclude"] = [
            p.strip() for p in environ[f"{ENV_PREFIX}EXCLUDE"].split(",") if p.strip()
        ]
    for key in ("workers", "max_file_size"):
        raw = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if not raw:
            continue
        try:
            settings[key] = int(raw)
        except ValueError as e:
            raise ConfigError(f"{ENV_PREFIX}{key.upper()} must be an integer, got {raw!r}") from e
    if environ.get(f"{ENV_PREFIX}REQUIRE_ROOT_ID"):
        settings["require_root_id"] = environ[f"{ENV_PREFIX}REQUIRE_ROOT_ID"].lower() in (
            "1",
            "true",
            "yes",
        )
    return settings


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _parse_techs(data: Any) -> List[TechOverride]:
    techs: List[TechOverride] = []
    for item in data or []:
        if isinstance(item, str):
            techs.append(TechOverride(tech=item))
        elif isinstance(item, dict) and item.get("tech"):
            techs.append(TechOverride(tech=str(item["tech"]), reason=str(item.get("reason") or "")))
    return techs


def dict_to_config(data: Dict[str, Any]) -> StackmapConfig:
    """Convert a merged config dict into :class:`StackmapConfig`."""
    rules_dir = data.get("rules_dir")
    workers = int(data.get("workers") or 1)
    if workers < 1:
        raise ConfigError(f"workers must be at least 1, got {workers}")

    return StackmapConfig(
        root_id=str(data["root_id"]) if data.get("root_id") else None,
        require_root_id=bool(data.get("require_root_id", False)),
        exclude=[str(p) for p in data.get("exclude") or []],
        properties=dict(data.get("properties") or {}),
        techs=_parse_techs(data.get("techs")),
        max_file_size=int(data.get("max_file_size") or DEFAULT_MAX_FILE_SIZE),
        workers=workers,
        rules_dir=Path(rules_dir) if rules_dir else None,
        use_gitignore=bool(data.get("use_gitignore", True)),
        use_git=bool(data.get("use_git", True)),
    )
