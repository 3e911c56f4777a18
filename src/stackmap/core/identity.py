"""Deterministic identifiers for components and scan roots."""

from __future__ import annotations

import hashlib
import os
import secrets
from pathlib import Path
from typing import Optional

from stackmap.config.loader import ConfigError
from stackmap.core.git import get_git_info_with_root, normalize_remote_url
from stackmap.core.logging import get_logger

LOGGER = get_logger(__name__)

ID_LENGTH = 20
RANDOM_ID_LENGTH = 12
RANDOM_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


class RootIDRequiredError(ConfigError):
    """Raised when policy demands an explicit root ID and none was supplied."""


def _digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:ID_LENGTH]


def generate_component_id(root_id: str, name: str, path: str) -> str:
    """Stable ID for a component from its root, name and first path."""
    return _digest(f"{root_id}:{name}:{path}")


def generate_random_id() -> str:
    return "".join(secrets.choice(RANDOM_ID_ALPHABET) for _ in range(RANDOM_ID_LENGTH))


def root_id_from_path(base_path: Path) -> str:
    """Root ID for directories outside version control."""
    return _digest(os.path.abspath(str(base_path)))


def root_id_from_git(base_path: Path) -> Optional[str]:
    """Root ID derived from the normalized origin remote.

    When ``base_path`` is a subdirectory of the repository, its path
    relative to the repository root is folded in so that sibling projects
    in a monorepo get distinct IDs.
    """
    info, repo_root = get_git_info_with_root(base_path)
    if info is None or not info.remote_url:
        return None

    content = normalize_remote_url(info.remote_url)
    resolved = Path(base_path).resolve()
    if repo_root is not None and repo_root != resolved:
        try:
            relative = resolved.relative_to(repo_root).as_posix()
        except ValueError:
            relative = ""
        if relative and relative != ".":
            content += f":{relative}"
    return _digest(content)


def resolve_root_id(
    base_path: Optional[Path],
    override: Optional[str] = None,
    *,
    require_override: bool = False,
    use_git: bool = True,
) -> str:
    """Pick the root ID for a scan.

    Priority: explicit override, git remote, absolute path, random.

    Raises:
        RootIDRequiredError: If ``require_override`` is set and no override
            was given.
    """
    if override:
        return override
    if require_override:
        raise RootIDRequiredError(
            "A root ID is required by configuration but none was provided"
        )
    if base_path is None:
        return generate_random_id()

    if use_git:
        git_id = root_id_from_git(base_path)
        if git_id:
            LOGGER.debug(f"Using git-derived root ID {git_id}")
            return git_id

    return root_id_from_path(base_path)
