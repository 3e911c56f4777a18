"""Filesystem access used by detectors and the scanner.

Detectors never touch the disk directly; they go through a
:class:`FilesystemProvider` so scans can run against an in-memory tree in
tests or against a different storage backend when embedded.
"""

from __future__ import annotations

import os
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Union

from stackmap.core.models import FileEntry

PathLike = Union[str, Path]


class FilesystemProvider(ABC):
    """Abstract read-only view of a project tree."""

    @property
    @abstractmethod
    def base_path(self) -> str:
        """Root of the tree being scanned."""

    @abstractmethod
    def read_file(self, path: PathLike) -> bytes:
        """Return the raw bytes of ``path``.

        Raises:
            OSError: If the file cannot be read.
        """

    @abstractmethod
    def list_dir(self, path: PathLike) -> List[FileEntry]:
        """List entries of a directory, sorted by name."""

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        ...

    @abstractmethod
    def is_dir(self, path: PathLike) -> bool:
        ...

    @abstractmethod
    def file_size(self, path: PathLike) -> int:
        ...

    def read_text(self, path: PathLike) -> str:
        return self.read_file(path).decode("utf-8", errors="replace")

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)

    def relative_path(self, path: PathLike) -> str:
        """Path of ``path`` relative to the base, in POSIX form, ``/`` for the root."""
        rel = os.path.relpath(str(path), self.base_path)
        if rel == ".":
            return "/"
        return rel.replace(os.sep, "/")


class LocalFSProvider(FilesystemProvider):
    """Provider backed by the local disk."""

    def __init__(self, base_path: PathLike):
        self._base_path = os.path.abspath(str(base_path))

    @property
    def base_path(self) -> str:
        return self._base_path

    def read_file(self, path: PathLike) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def list_dir(self, path: PathLike) -> List[FileEntry]:
        entries: List[FileEntry] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    size = 0 if is_dir else entry.stat(follow_symlinks=False).st_size
                except OSError:
                    continue
                entries.append(FileEntry(name=entry.name, path=entry.path, is_dir=is_dir, size=size))
        entries.sort(key=lambda e: e.name)
        return entries

    def exists(self, path: PathLike) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: PathLike) -> bool:
        return os.path.isdir(path)

    def file_size(self, path: PathLike) -> int:
        return os.path.getsize(path)


class InMemoryProvider(FilesystemProvider):
    """Provider over a ``{relative_path: content}`` mapping.

    Paths use ``/`` separators and are rooted at ``base_path``. Directories
    are implied by the files they contain.
    """

    def __init__(self, files: Dict[str, Union[str, bytes]], base_path: str = "/project"):
        self._base_path = base_path.rstrip("/") or "/"
        self._files: Dict[str, bytes] = {}
        for rel, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            self._files[self._abs(rel)] = data

    @property
    def base_path(self) -> str:
        return self._base_path

    def join(self, *parts: str) -> str:
        return posixpath.join(*parts)

    def relative_path(self, path: PathLike) -> str:
        rel = posixpath.relpath(str(path), self._base_path)
        return "/" if rel == "." else rel

    def _abs(self, path: PathLike) -> str:
        text = str(path)
        if not text.startswith("/"):
            text = posixpath.join(self._base_path, text)
        return posixpath.normpath(text)

    def read_file(self, path: PathLike) -> bytes:
        key = self._abs(path)
        if key not in self._files:
            raise FileNotFoundError(key)
        return self._files[key]

    def list_dir(self, path: PathLike) -> List[FileEntry]:
        prefix = self._abs(path).rstrip("/") + "/"
        seen: Dict[str, FileEntry] = {}
        for key, data in self._files.items():
            if not key.startswith(prefix):
                continue
            head, sep, _ = key[len(prefix):].partition("/")
            if head in seen:
                continue
            seen[head] = FileEntry(
                name=head,
                path=prefix + head,
                is_dir=bool(sep),
                size=0 if sep else len(data),
            )
        return [seen[name] for name in sorted(seen)]

    def exists(self, path: PathLike) -> bool:
        return self._abs(path) in self._files or self.is_dir(path)

    def is_dir(self, path: PathLike) -> bool:
        prefix = self._abs(path).rstrip("/") + "/"
        return any(key.startswith(prefix) for key in self._files)

    def file_size(self, path: PathLike) -> int:
        return len(self.read_file(path))
