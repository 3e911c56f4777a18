"""Bridge between CLI arguments and configuration overrides."""

from __future__ import annotations

import argparse
from typing import Any, Dict


class ConfigBridge:
    """Translates CLI arguments to config override dicts."""

    @staticmethod
    def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
        """Convert CLI arguments to a config override dict.

        Only options given on the command line are included, so config
        file and environment values survive when a flag is absent.
        """
        overrides: Dict[str, Any] = {}

        root_id = getattr(args, "root_id", None)
        if root_id:
            overrides["root_id"] = root_id

        exclude = getattr(args, "exclude", None)
        if exclude:
            overrides["exclude"] = list(exclude)

        workers = getattr(args, "workers", None)
        if workers is not None:
            overrides["workers"] = workers

        rules_dir = getattr(args, "rules_dir", None)
        if rules_dir is not None:
            overrides["rules_dir"] = str(rules_dir)

        return overrides
