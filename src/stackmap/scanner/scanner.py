"""Recursive project walker.

For every directory the scanner runs, in order: ecosystem detectors,
filename and extension rules, content rules, then exact rule files. A
component returned by a detector becomes the context for everything
below its directory; techs that warrant their own component get an
implicit child. Once the walk finishes the tree receives its IDs and the
resolver links dependents to providers.
"""

from __future__ import annotations

import posixpath
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from stackmap.config.models import StackmapConfig
from stackmap.core.component import Component
from stackmap.core.git import get_git_info
from stackmap.core.identity import resolve_root_id
from stackmap.core.logging import get_logger
from stackmap.core.models import FileEntry
from stackmap.core.provider import FilesystemProvider, LocalFSProvider
from stackmap.detectors import default_registry
from stackmap.detectors.base import DetectorRegistry
from stackmap.matching.compiler import CompiledRuleSet, PatternCompiler
from stackmap.matching.files import match_file_name
from stackmap.resolver.resolver import ComponentResolver
from stackmap.rules.loader import load_builtin_rules, load_categories, load_rules, merge_rules
from stackmap.scanner.ignore import IgnoreStack, join_rel, should_skip_dir
from stackmap.scanner.languages import detect_language
from stackmap.scanner.metadata import ScanMetadata, ScanResult

LOGGER = get_logger(__name__)

ROOT_COMPONENT_NAME = "main"
GIT_DIR_NAME = ".git"

MatchMap = Dict[str, List[str]]


@dataclass
class WalkStats:
    """Counters for one walker (one per thread in parallel mode)."""

    file_count: int = 0


class Scanner:
    """Builds the component tree for one project."""

    def __init__(
        self,
        provider: FilesystemProvider,
        rules: CompiledRuleSet,
        registry: Optional[DetectorRegistry] = None,
        config: Optional[StackmapConfig] = None,
    ):
        self.provider = provider
        self.rules = rules
        self.registry = registry or DetectorRegistry()
        self.config = config or StackmapConfig()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def scan(self) -> ScanResult:
        """Walk, identify and resolve.

        Raises:
            RootIDRequiredError: If the configuration requires a root ID
                and none is set.
        """
        start = time.monotonic()
        base_path = self.provider.base_path
        root_id = resolve_root_id(
            Path(base_path),
            self.config.root_id,
            require_override=self.config.require_root_id,
            use_git=self.config.use_git,
        )

        root, file_count = self.build_tree()
        root.assign_ids(root_id)
        ComponentResolver(self.registry.providers).resolve(root)

        metadata = ScanMetadata(scan_path=base_path, properties=dict(self.config.properties))
        metadata.file_count = file_count
        metadata.collect(root)
        metadata.duration_ms = int((time.monotonic() - start) * 1000)
        LOGGER.info(
            f"Scanned {file_count} files, found {metadata.component_count} components "
            f"in {metadata.duration_ms}ms"
        )
        return ScanResult(tree=root, metadata=metadata)

    def build_tree(self) -> Tuple[Component, int]:
        """Walk the project and return ``(root, file_count)`` without IDs."""
        base_path = self.provider.base_path
        root = Component(ROOT_COMPONENT_NAME, ["/"])
        if self.config.use_git:
            root.git = get_git_info(Path(base_path))
        for override in self.config.techs:
            root.add_tech(override.tech, override.reason or "configured tech")

        ignore = IgnoreStack.from_patterns(self.config.exclude)

        if self.config.workers > 1:
            from stackmap.scanner.parallel import ParallelWalker

            file_count = ParallelWalker(self, self.config.workers).walk(root, base_path, ignore)
        else:
            stats = WalkStats()
            self.walk(root, base_path, ignore, stats)
            file_count = stats.file_count
        return root, file_count

    # ------------------------------------------------------------------
    # Walking
    # ------------------------------------------------------------------

    def walk(self, parent: Component, dir_path: str, ignore: IgnoreStack, stats: WalkStats) -> None:
        entered = self.enter(parent, dir_path, ignore, stats)
        if entered is None:
            return
        ctx, subdirs, ignore = entered
        for subdir in subdirs:
            self.walk(ctx, subdir.path, ignore, stats)

    def enter(
        self, parent: Component, dir_path: str, ignore: IgnoreStack, stats: WalkStats
    ) -> Optional[Tuple[Component, List[FileEntry], IgnoreStack]]:
        """Process one directory; return its context, subdirectories and ignore stack."""
        rel_dir = self.provider.relative_path(dir_path)
        if self.config.use_gitignore:
            ignore = ignore.push_gitignore(self.provider, dir_path, rel_dir)

        try:
            entries = self.provider.list_dir(dir_path)
        except OSError as e:
            LOGGER.warning(f"Cannot list {dir_path}: {e}")
            return None

        files = [
            e for e in entries
            if e.is_dir or not ignore.is_ignored(join_rel(rel_dir, e.name))
        ]

        ctx = self.apply_rules(parent, files, dir_path)
        self._attach_git(parent, ctx, dir_path, files)

        for entry in files:
            if entry.is_dir:
                continue
            stats.file_count += 1
            language = detect_language(entry.name)
            if language:
                ctx.add_language(language)

        subdirs = [
            e for e in files
            if e.is_dir
            and not should_skip_dir(e.name)
            and not ignore.is_ignored(join_rel(rel_dir, e.name), is_dir=True)
        ]
        return ctx, subdirs, ignore

    def _attach_git(
        self, parent: Component, ctx: Component, dir_path: str, files: List[FileEntry]
    ) -> None:
        # Nested repositories only; the root was handled up front.
        if not self.config.use_git or ctx.git is not None:
            return
        if not any(f.name == GIT_DIR_NAME for f in files):
            return
        info = get_git_info(Path(dir_path))
        if info is None:
            return
        if parent.git is None or parent.git.remote_url != info.remote_url:
            ctx.git = info

    # ------------------------------------------------------------------
    # Rule application
    # ------------------------------------------------------------------

    def apply_rules(self, parent: Component, files: List[FileEntry], current_path: str) -> Component:
        """Run every detection stage for one directory and return the new context."""
        ctx = self._detect_components(parent, files, current_path)
        matched: Set[str] = set()
        self._detect_by_files_and_extensions(ctx, files, current_path, matched)
        self._detect_by_content(ctx, files, current_path, matched)
        self._detect_by_rule_files(ctx, files, matched)
        return ctx

    def _detect_components(
        self, parent: Component, files: List[FileEntry], current_path: str
    ) -> Component:
        named: List[Component] = []
        virtual: List[Component] = []
        for detector in self.registry.detectors:
            try:
                found = detector.detect(
                    files,
                    current_path,
                    self.provider.base_path,
                    self.provider,
                    self.rules.dependencies,
                )
            except Exception as e:
                LOGGER.warning(f"Detector {detector.name} failed in {current_path}: {e}")
                continue
            for component in found:
                (virtual if component.is_virtual else named).append(component)

        for component in virtual:
            self._merge_virtual(parent, component, current_path)

        ctx = parent
        for component in named:
            attached = parent.add_child(component)
            LOGGER.debug(f"Detected component {attached.name} in {current_path}")
            for tech in list(component.techs):
                self._implicit_component(attached, tech, current_path)
            ctx = attached
        return ctx

    def _merge_virtual(self, target: Component, virtual: Component, current_path: str) -> None:
        for child in virtual.children:
            target.add_child(child)
        target.combine(virtual)
        for tech in virtual.techs:
            self._implicit_component(target, tech, current_path)

    def _detect_by_files_and_extensions(
        self, ctx: Component, files: List[FileEntry], current_path: str, matched: Set[str]
    ) -> None:
        names = [f.name for f in files if not f.is_dir]
        rel_current = self.provider.relative_path(current_path)
        self._process_tech_matches(
            ctx, self.rules.files.match(names, rel_current), matched, current_path
        )

        extensions = {posixpath.splitext(name)[1] for name in names}
        extensions.discard("")
        self._process_tech_matches(
            ctx, self.rules.extensions.match(extensions), matched, current_path
        )

    def _detect_by_content(
        self, ctx: Component, files: List[FileEntry], current_path: str, matched: Set[str]
    ) -> None:
        content = self.rules.content
        for entry in files:
            if entry.is_dir:
                continue
            ext = posixpath.splitext(entry.name)[1]
            if not content.wants(entry.name, ext):
                continue
            if entry.size > self.config.max_file_size:
                LOGGER.debug(f"Skipping content checks for large file {entry.path}")
                continue
            try:
                text = self.provider.read_text(entry.path)
            except OSError as e:
                LOGGER.debug(f"Cannot read {entry.path}: {e}")
                continue

            for tech, reasons in content.match_file(entry.name, ext, text).items():
                for reason in reasons:
                    ctx.add_tech(tech, reason)
                if tech not in matched:
                    matched.add(tech)
                    self._implicit_component(ctx, tech, current_path)

    def _detect_by_rule_files(
        self, ctx: Component, files: List[FileEntry], matched: Set[str]
    ) -> None:
        names = [f.name for f in files if not f.is_dir]
        for rule in self.rules.rules:
            if not rule.files or rule.tech in matched:
                continue
            hit = _first_file_hit(rule.files, names)
            if hit is not None:
                self._add_tech_with_primary_check(ctx, rule.tech, f"matched file: {hit}")
                matched.add(rule.tech)

    def _process_tech_matches(
        self, ctx: Component, matches: MatchMap, matched: Set[str], current_path: str
    ) -> None:
        for tech, reasons in matches.items():
            if tech in matched:
                continue
            for reason in reasons:
                self._add_tech_with_primary_check(ctx, tech, reason)
            matched.add(tech)
            self._implicit_component(ctx, tech, current_path)

    def _add_tech_with_primary_check(self, ctx: Component, tech: str, reason: str) -> None:
        ctx.add_tech(tech, reason)
        if self.rules.promotes_without_component(tech):
            ctx.add_primary_tech(tech)

    def _implicit_component(self, parent: Component, tech: str, current_path: str) -> None:
        """Give ``tech`` its own child component when its rule asks for one."""
        rule = self.rules.rule_for(tech)
        if rule is None or not self.rules.creates_component(tech):
            return

        reason = f"matched file: {self.provider.relative_path(current_path)}"
        component = Component(rule.name, list(parent.path))
        if self.rules.is_primary_tech(tech):
            component.add_primary_tech(tech)
        else:
            component.add_tech(tech, reason)
        component.add_reason(reason)
        parent.add_child(component)


def _first_file_hit(patterns: List[str], names: List[str]) -> Optional[str]:
    for pattern in patterns:
        if "/" in pattern:
            continue
        for name in names:
            if match_file_name(pattern, name):
                return name
    return None


def build_rule_set(config: Optional[StackmapConfig] = None) -> CompiledRuleSet:
    """Compile the built-in rules, overlaid with ``config.rules_dir`` if set.

    Raises:
        RuleError: If a built-in rule or the user rules directory is invalid.
    """
    config = config or StackmapConfig()
    rules = load_builtin_rules()
    if config.rules_dir is not None:
        rules = merge_rules(rules, load_rules(config.rules_dir))
    return PatternCompiler(categories=load_categories()).compile(rules)


def scan_directory(
    path: Union[str, Path],
    config: Optional[StackmapConfig] = None,
    registry: Optional[DetectorRegistry] = None,
) -> ScanResult:
    """Scan a local directory with the built-in rules and detectors."""
    config = config or StackmapConfig()
    provider = LocalFSProvider(str(Path(path).resolve()))
    scanner = Scanner(
        provider,
        build_rule_set(config),
        registry=registry or default_registry(),
        config=config,
    )
    return scanner.scan()
