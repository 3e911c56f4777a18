"""Scan configuration loading and validation."""

from stackmap.config.loader import ConfigError, load_config
from stackmap.config.models import StackmapConfig, TechOverride

__all__ = ["ConfigError", "StackmapConfig", "TechOverride", "load_config"]
