"""Gitignore-style exclusion while walking a project.

Uses pathspec for full gitignore compliance (``**``, ``!`` negation,
comments). ``.gitignore`` files apply to their own directory and below,
so the walker carries an immutable stack of scoped specs; each recursion
level gets its own stack and sibling directories never see each other's
patterns.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Sequence, Tuple

import pathspec

from stackmap.core.logging import get_logger
from stackmap.core.provider import FilesystemProvider

LOGGER = get_logger(__name__)

GITIGNORE_NAME = ".gitignore"

# Directories never worth descending into
SKIP_DIRS = frozenset({
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".next",
    ".nuxt",
    ".terraform",
    ".idea",
    ".vscode",
    "htmlcov",
})


def build_spec(patterns: Sequence[str]) -> pathspec.PathSpec:
    clean = [p for p in patterns if p.strip() and not p.strip().startswith("#")]
    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, clean)


@dataclass(frozen=True)
class ScopedSpec:
    """Patterns that apply below ``scope`` (a path relative to the scan root)."""

    scope: str
    spec: pathspec.PathSpec
    source: str = ""

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.scope:
            prefix = self.scope + "/"
            if not rel_path.startswith(prefix):
                return False
            rel_path = rel_path[len(prefix):]
        if is_dir:
            rel_path += "/"
        return self.spec.match_file(rel_path)


class IgnoreStack:
    """Immutable chain of scoped ignore specs."""

    def __init__(self, specs: Tuple[ScopedSpec, ...] = ()):
        self._specs = specs

    @classmethod
    def from_patterns(cls, patterns: Sequence[str], source: str = "config") -> "IgnoreStack":
        if not patterns:
            return cls()
        LOGGER.debug(f"Loaded {len(patterns)} exclude patterns from {source}")
        return cls((ScopedSpec("", build_spec(patterns), source),))

    def push(self, scoped: ScopedSpec) -> "IgnoreStack":
        return IgnoreStack(self._specs + (scoped,))

    def push_gitignore(
        self, provider: FilesystemProvider, dir_path: str, rel_dir: str
    ) -> "IgnoreStack":
        """Return a stack extended with ``dir_path/.gitignore`` when it exists."""
        gitignore = provider.join(dir_path, GITIGNORE_NAME)
        try:
            text = provider.read_text(gitignore)
        except OSError:
            return self
        scope = "" if rel_dir in ("", "/", ".") else rel_dir.strip("/")
        LOGGER.debug(f"Loaded ignore patterns from {gitignore}")
        return self.push(ScopedSpec(scope, build_spec(text.splitlines()), gitignore))

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        rel_path = rel_path.strip("/")
        if not rel_path:
            return False
        return any(scoped.matches(rel_path, is_dir) for scoped in self._specs)

    def __len__(self) -> int:
        return len(self._specs)


def should_skip_dir(name: str) -> bool:
    return name in SKIP_DIRS


def join_rel(rel_dir: str, name: str) -> str:
    rel_dir = rel_dir.strip("/")
    return posixpath.join(rel_dir, name) if rel_dir else name
