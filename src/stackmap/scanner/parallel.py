"""Parallel directory walking using ThreadPoolExecutor.

Each top-level subdirectory is walked on its own thread into a private
shadow copy of the root context. Workers never touch the shared tree; the
coordinator attaches the shadows one by one in directory order, so the
result is identical to a sequential walk.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional

from stackmap.core.component import Component
from stackmap.core.logging import get_logger
from stackmap.scanner.ignore import IgnoreStack
from stackmap.scanner.scanner import Scanner, WalkStats

LOGGER = get_logger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class SubtreeResult:
    """Outcome of walking one top-level subdirectory."""

    path: str
    shadow: Optional[Component] = None
    file_count: int = 0
    error: Optional[str] = None


class ParallelWalker:
    """Walks the first level of subdirectories concurrently."""

    def __init__(self, scanner: Scanner, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self._scanner = scanner
        self._max_workers = max_workers
        self._results_lock = threading.Lock()

    def walk(self, root: Component, base_path: str, ignore: IgnoreStack) -> int:
        """Walk ``base_path`` into ``root`` and return the number of files seen."""
        stats = WalkStats()
        entered = self._scanner.enter(root, base_path, ignore, stats)
        if entered is None:
            return stats.file_count
        ctx, subdirs, ignore = entered
        if not subdirs:
            return stats.file_count

        results: Dict[int, SubtreeResult] = {}
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            future_to_index = {
                executor.submit(self._walk_subtree, ctx, subdir.path, ignore): i
                for i, subdir in enumerate(subdirs)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    result = future.result()
                except Exception as e:
                    LOGGER.error(f"Walking {subdirs[index].path} raised exception: {e}")
                    result = SubtreeResult(path=subdirs[index].path, error=str(e))
                with self._results_lock:
                    results[index] = result

        file_count = stats.file_count
        for index in range(len(subdirs)):
            result = results[index]
            if result.shadow is None:
                continue
            self._attach(ctx, result.shadow)
            file_count += result.file_count
        return file_count

    def _walk_subtree(self, ctx: Component, path: str, ignore: IgnoreStack) -> SubtreeResult:
        shadow = Component(ctx.name, list(ctx.path))
        shadow.git = ctx.git
        stats = WalkStats()
        self._scanner.walk(shadow, path, ignore, stats)
        return SubtreeResult(path=path, shadow=shadow, file_count=stats.file_count)

    @staticmethod
    def _attach(ctx: Component, shadow: Component) -> None:
        children: List[Component] = list(shadow.children)
        shadow.children = []
        for child in children:
            ctx.add_child(child)
        ctx.combine(shadow)
