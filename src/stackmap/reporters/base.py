"""Base class for output reporters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO

from stackmap.scanner.metadata import ScanResult


class Reporter(ABC):
    """Base class for all reporters.

    A reporter renders a finished scan result into one output format.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Reporter identifier (e.g., 'json', 'summary')."""

    @abstractmethod
    def report(self, result: ScanResult, output: IO[str]) -> None:
        """Format and write the scan result.

        Args:
            result: The scan result to format.
            output: Output stream to write the formatted result.
        """
