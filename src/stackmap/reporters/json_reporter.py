"""JSON reporter: the full tree plus scan metadata."""

from __future__ import annotations

import json
from typing import IO

from stackmap.reporters.base import Reporter
from stackmap.scanner.metadata import ScanResult


class JSONReporter(Reporter):
    """Writes the scan result as an indented JSON document."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    @property
    def name(self) -> str:
        return "json"

    def report(self, result: ScanResult, output: IO[str]) -> None:
        json.dump(result.to_dict(), output, indent=self._indent, default=str)
        output.write("\n")
