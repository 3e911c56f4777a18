"""Extension-based technology matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from stackmap.core.models import Rule


def normalize_extension(ext: str) -> str:
    """Return ``ext`` with exactly one leading dot."""
    ext = ext.strip()
    if not ext:
        return ext
    return ext if ext.startswith(".") else f".{ext}"


@dataclass(frozen=True)
class _ExtensionEntry:
    tech: str
    extensions: Tuple[str, ...]


class ExtensionMatcher:
    """Reports techs whose declared extensions appear in a directory."""

    def __init__(self, rules: Iterable[Rule]):
        entries: List[_ExtensionEntry] = []
        for rule in rules:
            exts = tuple(normalize_extension(e) for e in rule.extensions if e.strip())
            if exts:
                entries.append(_ExtensionEntry(rule.tech, exts))
        self._entries: Tuple[_ExtensionEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, extensions: Iterable[str]) -> Dict[str, List[str]]:
        observed = {normalize_extension(e) for e in extensions if e}
        matched: Dict[str, List[str]] = {}
        for entry in self._entries:
            if entry.tech in matched:
                continue
            for ext in entry.extensions:
                if ext in observed:
                    matched[entry.tech] = [f"matched extension: {ext}"]
                    break
        return matched
