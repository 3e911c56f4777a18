"""Summary reporter: a short human-readable overview of a scan."""

from __future__ import annotations

from typing import IO, Dict, List

from stackmap.core.component import Component
from stackmap.reporters.base import Reporter
from stackmap.scanner.metadata import ScanResult


class SummaryReporter(Reporter):
    """Outputs counts, the detected techs and an indented component outline."""

    @property
    def name(self) -> str:
        return "summary"

    def report(self, result: ScanResult, output: IO[str]) -> None:
        lines = self._format_summary(result)
        output.write("\n".join(lines))
        output.write("\n")

    def _format_summary(self, result: ScanResult) -> List[str]:
        metadata = result.metadata
        lines: List[str] = [
            f"Scan path: {metadata.scan_path}",
            f"Root ID: {result.tree.id}",
            f"Files: {metadata.file_count}",
            f"Components: {metadata.component_count}",
            f"Languages: {metadata.language_count}",
            f"Technologies: {metadata.techs_count}",
        ]
        if metadata.techs:
            lines.append(f"  {', '.join(metadata.techs)}")

        lines.append("\nComponents:")
        names = {node.id: node.name for node in result.tree.walk()}
        self._format_component(result.tree, 0, names, lines)
        lines.append(f"\nScan duration: {metadata.duration_ms}ms")
        return lines

    def _format_component(
        self, component: Component, depth: int, names: Dict[str, str], lines: List[str]
    ) -> None:
        indent = "  " * (depth + 1)
        label = component.name
        if component.tech:
            label += f" [{', '.join(component.tech)}]"
        if component.path:
            label += f" ({component.first_path})"
        lines.append(f"{indent}{label}")
        for ref in component.component_refs:
            target = names.get(ref.target_id, ref.target_id)
            lines.append(f"{indent}  -> {target} via {ref.package_name}")
        for child in component.children:
            self._format_component(child, depth + 1, names, lines)
