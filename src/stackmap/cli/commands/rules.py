"""Rules command implementation."""

from __future__ import annotations

from argparse import Namespace
from collections import defaultdict
from typing import Dict, List

from stackmap.cli.commands import Command
from stackmap.cli.exit_codes import EXIT_SUCCESS
from stackmap.config.models import StackmapConfig
from stackmap.core.models import Rule
from stackmap.scanner import build_rule_set


class RulesCommand(Command):
    """Lists the technology rules in effect, grouped by category."""

    @property
    def name(self) -> str:
        return "rules"

    def execute(self, args: Namespace, config: StackmapConfig | None = None) -> int:
        config = config or StackmapConfig()
        rules_dir = getattr(args, "rules_dir", None)
        if rules_dir is not None:
            config.rules_dir = rules_dir
        rule_set = build_rule_set(config)

        wanted = getattr(args, "rule_type", None)
        by_type: Dict[str, List[Rule]] = defaultdict(list)
        for rule in rule_set.by_tech.values():
            if wanted and rule.type != wanted:
                continue
            by_type[rule.type].append(rule)

        if not by_type:
            print(f"No rules of type '{wanted}'." if wanted else "No rules loaded.")
            return EXIT_SUCCESS

        for rule_type in sorted(by_type):
            print(f"{rule_type}:")
            for rule in sorted(by_type[rule_type], key=lambda r: r.tech):
                flags = []
                if rule_set.creates_component(rule.tech):
                    flags.append("component")
                if rule_set.is_primary_tech(rule.tech):
                    flags.append("primary")
                suffix = f" ({', '.join(flags)})" if flags else ""
                print(f"  {rule.tech:<20} {rule.name}{suffix}")
            print()
        return EXIT_SUCCESS
