"""Project walking and tree construction."""

from stackmap.scanner.metadata import ScanMetadata, ScanResult
from stackmap.scanner.scanner import Scanner, build_rule_set, scan_directory

__all__ = ["ScanMetadata", "ScanResult", "Scanner", "build_rule_set", "scan_directory"]
