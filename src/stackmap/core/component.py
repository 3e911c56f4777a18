"""Component tree model.

A :class:`Component` is one detected unit (project, module, service or
infrastructure resource). Detectors build components one directory at a
time and attach them with :meth:`Component.add_child`, which merges a
candidate into an existing same-named sibling instead of duplicating it.
Once the tree is complete, :meth:`Component.assign_ids` stamps final IDs
and freezes the structure; after that only component references may be
added (by the resolver).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from stackmap.core.identity import generate_component_id, generate_random_id
from stackmap.core.models import (
    ARRAY_MERGE_PROPERTY_KEYS,
    REASON_KEY_DOCKER,
    REASON_KEY_GLOBAL,
    REASON_KEY_LICENSE,
    RESERVED_REASON_KEYS,
    Dependency,
    GitInfo,
    License,
)

VIRTUAL_COMPONENT_NAME = "virtual"


@dataclass(frozen=True)
class ComponentRef:
    """Non-owning link from a component to the one providing a package.

    Stores the target's final ID only; look the node up through an index
    built from the tree when it is needed.
    """

    target_id: str
    package_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"target_id": self.target_id, "package_name": self.package_name}


@dataclass(eq=False)
class Component:
    """A node in the detected component tree."""

    name: str
    path: List[str] = field(default_factory=list)
    id: str = ""
    component_type: str = ""
    tech: List[str] = field(default_factory=list)
    techs: List[str] = field(default_factory=list)
    languages: Dict[str, int] = field(default_factory=dict)
    licenses: List[License] = field(default_factory=list)
    reason: Dict[str, List[str]] = field(default_factory=dict)
    dependencies: List[Dependency] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List["Component"] = field(default_factory=list)
    component_refs: List[ComponentRef] = field(default_factory=list)
    git: Optional[GitInfo] = None
    frozen: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        paths = list(self.path)
        self.path = []
        for p in paths:
            self.add_path(p)
        if not self.id:
            self.id = generate_component_id("temp", self.name, self.first_path)

    @property
    def first_path(self) -> str:
        return self.path[0] if self.path else ""

    @property
    def is_virtual(self) -> bool:
        return self.name == VIRTUAL_COMPONENT_NAME

    # ------------------------------------------------------------------
    # Attribute bookkeeping
    # ------------------------------------------------------------------

    def add_path(self, path: str) -> None:
        if path not in self.path:
            self.path.append(path)

    def add_tech(self, tech: str, reason: str = "") -> None:
        """Record a technology tag and the evidence for it.

        Reserved keys (``_``, ``_license``, ``_docker``) only receive the
        reason and are never listed as technologies.
        """
        if not tech:
            return
        if tech not in RESERVED_REASON_KEYS and tech not in self.techs:
            self.techs.append(tech)
        self._append_reason(tech, reason)

    def add_reason(self, reason: str) -> None:
        self._append_reason(REASON_KEY_GLOBAL, reason)

    def add_license_reason(self, reason: str) -> None:
        self._append_reason(REASON_KEY_LICENSE, reason)

    def add_docker_reason(self, reason: str) -> None:
        self._append_reason(REASON_KEY_DOCKER, reason)

    def _append_reason(self, key: str, reason: str) -> None:
        if not reason:
            return
        reasons = self.reason.setdefault(key, [])
        if reason not in reasons:
            reasons.append(reason)

    def add_primary_tech(self, tech: str) -> None:
        if tech and tech not in self.tech:
            self.tech.append(tech)

    def has_primary_tech(self, tech: str) -> bool:
        return tech in self.tech

    def add_language(self, language: str, count: int = 1) -> None:
        self.languages[language] = self.languages.get(language, 0) + count

    def add_dependency(self, dependency: Dependency) -> None:
        if not any(d.key == dependency.key for d in self.dependencies):
            self.dependencies.append(dependency)

    def add_license(self, license: License) -> None:
        if not any(lic.license_name == license.license_name for lic in self.licenses):
            self.licenses.append(license)

    def set_component_property(self, tech_key: str, property_key: str, value: Any) -> None:
        """Set ``properties[tech_key][property_key]``, creating the bag if needed."""
        bag = self.properties.get(tech_key)
        if not isinstance(bag, dict):
            bag = {}
        bag[property_key] = value
        self.properties[tech_key] = bag

    def add_component_ref(self, target: "Component", package_name: str) -> None:
        """Link to the component providing ``package_name``. Self-links are ignored.

        Only the target's ID is kept, so both components must already
        carry their final IDs. A target that shares this component's ID
        (an unmerged twin with the same name and first path) is skipped
        too, since the stored edge would read as a self-link.
        """
        assert self.frozen and target.frozen, "component references need final IDs"
        if target is self or target.id == self.id:
            return
        ref = ComponentRef(target_id=target.id, package_name=package_name)
        if ref not in self.component_refs:
            self.component_refs.append(ref)

    # ------------------------------------------------------------------
    # Tree construction and merging
    # ------------------------------------------------------------------

    def add_child(self, candidate: "Component") -> "Component":
        """Attach ``candidate`` or merge it into a matching existing child.

        A child matches when it has the same name, shares at least one
        path, and either both or neither carry primary technologies.
        Returns the child that now represents the candidate.
        """
        assert not self.frozen, "cannot add children after IDs are assigned"

        for child in self.children:
            if child.name != candidate.name:
                continue
            if bool(child.tech) != bool(candidate.tech):
                continue
            if not _has_overlapping_path(child.path, candidate.path):
                continue

            for p in candidate.path:
                child.add_path(p)
            for tech in candidate.tech:
                child.add_primary_tech(tech)
            for dep in candidate.dependencies:
                child.add_dependency(dep)
            child._merge_properties(candidate.properties)
            return child

        self.children.append(candidate)
        return candidate

    def combine(self, other: "Component") -> None:
        """Merge every attribute of ``other`` into this component.

        Children are not moved; callers attach them separately.
        """
        for p in other.path:
            self.add_path(p)
        for language, count in other.languages.items():
            self.add_language(language, count)
        for tech in other.techs:
            if tech not in self.techs:
                self.techs.append(tech)
        for tech in other.tech:
            if tech:
                self.add_primary_tech(tech)
                if tech not in self.techs:
                    self.techs.append(tech)
        for dep in other.dependencies:
            self.add_dependency(dep)
        for lic in other.licenses:
            self.add_license(lic)
        self._merge_reasons(other.reason)
        self._merge_properties(other.properties)
        if self.git is None and other.git is not None:
            self.git = other.git

    def _merge_reasons(self, reasons: Dict[str, List[str]]) -> None:
        for key, values in reasons.items():
            for value in values:
                if key == REASON_KEY_GLOBAL:
                    self.add_reason(value)
                elif key == REASON_KEY_LICENSE:
                    self.add_license_reason(value)
                elif key == REASON_KEY_DOCKER:
                    self.add_docker_reason(value)
                else:
                    self.add_tech(key, value)

    def _merge_properties(self, properties: Dict[str, Any]) -> None:
        for key, value in properties.items():
            if key in ARRAY_MERGE_PROPERTY_KEYS and isinstance(value, list) and key in self.properties:
                existing = self.properties[key]
                if isinstance(existing, list):
                    self.properties[key] = existing + value
                else:
                    self.properties[key] = [existing] + value
            else:
                self.properties[key] = value

    # ------------------------------------------------------------------
    # Identity and traversal
    # ------------------------------------------------------------------

    def assign_ids(self, root_id: str = "") -> None:
        """Give this root and every descendant its final ID, then freeze.

        Running it again with the same ``root_id`` on an unchanged tree
        reproduces the same IDs.
        """
        self.id = root_id or generate_random_id()
        self.frozen = True
        stack = list(self.children)
        while stack:
            node = stack.pop()
            node.id = generate_component_id(self.id, node.name, node.first_path)
            node.frozen = True
            stack.extend(node.children)

    def walk(self) -> Iterator["Component"]:
        """Depth-first, pre-order iteration over this subtree."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the subtree. References are emitted as target IDs only."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": list(self.path),
            "tech": list(self.tech),
            "techs": list(self.techs),
            "languages": dict(self.languages),
            "licenses": [lic.to_dict() for lic in self.licenses],
            "reason": {key: list(values) for key, values in self.reason.items()},
            "dependencies": [dep.to_list() for dep in self.dependencies],
            "properties": self.properties,
            "children": [child.to_dict() for child in self.children],
            "edges": _unique([ref.target_id for ref in self.component_refs]),
            "component_refs": [ref.to_dict() for ref in self.component_refs],
        }
        if self.component_type:
            data["component_type"] = self.component_type
        if self.git is not None:
            data["git"] = self.git.to_dict()
        return data


def _has_overlapping_path(paths1: List[str], paths2: List[str]) -> bool:
    return bool(set(paths1) & set(paths2))


def _unique(values: List[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
