"""Git metadata extraction.

Reads branch, commit and remote URL by shelling out to ``git``. Every
lookup is best-effort: a missing binary, a non-repository directory or a
timeout all yield ``None`` rather than an error.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from stackmap.core.logging import get_logger
from stackmap.core.models import GitInfo

LOGGER = get_logger(__name__)

GIT_TIMEOUT_SECONDS = 5


def _run_git(args: List[str], cwd: Path) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        LOGGER.debug(f"git {' '.join(args)} failed in {cwd}: {e}")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def find_repo_root(path: Path) -> Optional[Path]:
    """Return the top-level directory of the repository containing ``path``."""
    output = _run_git(["rev-parse", "--show-toplevel"], path)
    if not output:
        return None
    return Path(output).resolve()


def get_git_info_with_root(path: Path) -> Tuple[Optional[GitInfo], Optional[Path]]:
    """Collect git metadata for ``path`` along with the repository root."""
    repo_root = find_repo_root(path)
    if repo_root is None:
        return None, None

    branch = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], path) or ""
    commit = _run_git(["rev-parse", "HEAD"], path) or ""
    remote = _run_git(["config", "--get", "remote.origin.url"], path) or ""

    info = GitInfo(branch=branch, commit=commit, remote_url=sanitize_remote_url(remote))
    return info, repo_root


def get_git_info(path: Path) -> Optional[GitInfo]:
    info, _ = get_git_info_with_root(path)
    return info


def normalize_remote_url(url: str) -> str:
    """Reduce the many spellings of a remote to one canonical form.

    ``git@github.com:org/repo.git`` and ``https://github.com/org/repo``
    both become ``github.com/org/repo``.
    """
    for prefix in ("https://", "http://", "git@", "git://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
    if url.endswith(".git"):
        url = url[: -len(".git")]

    if ":" in url and "@" in url:
        url = url.replace(":", "/", 1)
    elif ":" in url and "/" in url and url.index(":") < url.index("/"):
        # scp-like host:path left over once "git@" was stripped
        host, _, rest = url.partition(":")
        if not rest.isdigit() and not rest.split("/", 1)[0].isdigit():
            url = f"{host}/{rest}"

    return url.rstrip("/")


def sanitize_remote_url(raw_url: str) -> str:
    """Strip credentials from an http(s) remote URL.

    SSH remotes (``git@host:path``) never carry tokens and are returned as-is.
    """
    if not raw_url or raw_url.startswith("git@"):
        return raw_url
    try:
        parts = urlsplit(raw_url)
    except ValueError:
        return raw_url
    if not parts.netloc or "@" not in parts.netloc:
        return raw_url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))
