"""Tests for stackmap.core.component."""

from __future__ import annotations

import pytest

from stackmap.core.component import Component
from stackmap.core.identity import generate_component_id
from stackmap.core.models import Dependency, GitInfo, License


class TestAddTech:
    """Tests for technology and reason bookkeeping."""

    def test_adds_tech_and_reason(self) -> None:
        component = Component("api", ["/api"])
        component.add_tech("flask", "flask matched: ^flask$")

        assert component.techs == ["flask"]
        assert component.reason["flask"] == ["flask matched: ^flask$"]

    def test_deduplicates_tech_and_reason(self) -> None:
        component = Component("api", ["/api"])
        component.add_tech("flask", "r1")
        component.add_tech("flask", "r1")
        component.add_tech("flask", "r2")

        assert component.techs == ["flask"]
        assert component.reason["flask"] == ["r1", "r2"]

    def test_reserved_keys_only_record_reasons(self) -> None:
        component = Component("api", ["/api"])
        component.add_tech("_", "global evidence")
        component.add_tech("_license", "license evidence")
        component.add_tech("_docker", "docker evidence")

        assert component.techs == []
        assert component.reason == {
            "_": ["global evidence"],
            "_license": ["license evidence"],
            "_docker": ["docker evidence"],
        }

    def test_reason_helpers_use_reserved_keys(self) -> None:
        component = Component("api")
        component.add_reason("matched file: /")
        component.add_license_reason("license from package.json: MIT")
        component.add_docker_reason("image: python:3.12")

        assert set(component.reason) == {"_", "_license", "_docker"}
        assert component.techs == []

    def test_empty_tech_is_ignored(self) -> None:
        component = Component("api")
        component.add_tech("", "reason")
        assert component.techs == []
        assert component.reason == {}

    def test_primary_tech_deduplicated(self) -> None:
        component = Component("api")
        component.add_primary_tech("python")
        component.add_primary_tech("python")
        assert component.tech == ["python"]
        assert component.has_primary_tech("python")
        assert not component.has_primary_tech("nodejs")


class TestAttributes:
    """Tests for paths, dependencies, licenses and properties."""

    def test_paths_are_deduplicated_on_construction(self) -> None:
        component = Component("api", ["/a", "/a", "/b"])
        assert component.path == ["/a", "/b"]

    def test_dependency_dedup_on_type_name_version(self) -> None:
        component = Component("api")
        component.add_dependency(Dependency("python", "flask", "2.0", "pyproject.toml"))
        component.add_dependency(Dependency("python", "flask", "2.0", "requirements.txt"))
        component.add_dependency(Dependency("python", "flask", "3.0"))

        assert len(component.dependencies) == 2

    def test_license_dedup_on_name(self) -> None:
        component = Component("api")
        component.add_license(License("MIT"))
        component.add_license(License("MIT", source_file="LICENSE"))
        assert len(component.licenses) == 1

    def test_set_component_property_creates_bag(self) -> None:
        component = Component("api")
        component.set_component_property("python", "package_name", "api")
        component.set_component_property("python", "version", "1.0")
        assert component.properties == {"python": {"package_name": "api", "version": "1.0"}}

    def test_languages_accumulate(self) -> None:
        component = Component("api")
        component.add_language("python")
        component.add_language("python", 2)
        assert component.languages == {"python": 3}

    def test_component_ref_skips_self_and_duplicates(self) -> None:
        root = Component("main", ["/"])
        a = root.add_child(Component("a", ["/a"]))
        b = root.add_child(Component("b", ["/b"]))
        root.assign_ids("r")

        a.add_component_ref(a, "a")
        a.add_component_ref(b, "b")
        a.add_component_ref(b, "b")

        assert len(a.component_refs) == 1
        assert a.component_refs[0].target_id == b.id

    def test_component_ref_requires_final_ids(self) -> None:
        a = Component("a", ["/a"])
        b = Component("b", ["/b"])

        with pytest.raises(AssertionError):
            a.add_component_ref(b, "b")


class TestAddChild:
    """Tests for the add-or-merge behavior of add_child."""

    def test_appends_new_child(self) -> None:
        root = Component("main", ["/"])
        child = Component("api", ["/api/pyproject.toml"])

        result = root.add_child(child)

        assert result is child
        assert root.children == [child]

    def test_merges_same_name_with_overlapping_path(self) -> None:
        root = Component("main", ["/"])
        first = Component("api", ["/api/pyproject.toml"])
        first.add_primary_tech("python")
        root.add_child(first)

        second = Component("api", ["/api/pyproject.toml", "/api/setup.cfg"])
        second.add_primary_tech("flask")
        second.add_dependency(Dependency("python", "flask", "2.0"))
        second.properties["python"] = {"package_name": "api"}

        result = root.add_child(second)

        assert result is first
        assert len(root.children) == 1
        assert first.path == ["/api/pyproject.toml", "/api/setup.cfg"]
        assert first.tech == ["python", "flask"]
        assert first.dependencies == [Dependency("python", "flask", "2.0")]
        assert first.properties == {"python": {"package_name": "api"}}

    def test_disjoint_paths_are_not_merged(self) -> None:
        root = Component("main", ["/"])
        root.add_child(Component("PostgreSQL", ["/svc-a"]))
        root.add_child(Component("PostgreSQL", ["/svc-b"]))

        assert len(root.children) == 2

    def test_different_names_are_not_merged(self) -> None:
        root = Component("main", ["/"])
        root.add_child(Component("api", ["/x"]))
        root.add_child(Component("web", ["/x"]))

        assert len(root.children) == 2

    def test_tech_presence_must_agree(self) -> None:
        root = Component("main", ["/"])
        tagged = Component("api", ["/x"])
        tagged.add_primary_tech("python")
        root.add_child(tagged)
        root.add_child(Component("api", ["/x"]))

        assert len(root.children) == 2

    def test_merge_is_idempotent(self) -> None:
        def candidate() -> Component:
            c = Component("Redis", ["/"])
            c.add_primary_tech("redis")
            c.add_dependency(Dependency("python", "redis", "5.0"))
            return c

        once = Component("main", ["/"])
        once.add_child(candidate())

        twice = Component("main", ["/"])
        twice.add_child(candidate())
        twice.add_child(candidate())

        assert len(twice.children) == len(once.children) == 1
        merged, single = twice.children[0], once.children[0]
        assert merged.path == single.path
        assert merged.tech == single.tech
        assert merged.dependencies == single.dependencies

    def test_array_properties_are_concatenated(self) -> None:
        root = Component("main", ["/"])
        first = Component("infra", ["/infra"])
        first.properties = {"terraform": [{"resource": "a"}], "region": "eu"}
        root.add_child(first)

        second = Component("infra", ["/infra"])
        second.properties = {"terraform": [{"resource": "b"}], "region": "us"}
        root.add_child(second)

        assert first.properties["terraform"] == [{"resource": "a"}, {"resource": "b"}]
        assert first.properties["region"] == "us"

    def test_add_child_after_freeze_fails(self) -> None:
        root = Component("main", ["/"])
        root.assign_ids("root")

        with pytest.raises(AssertionError):
            root.add_child(Component("late", ["/late"]))


class TestCombine:
    """Tests for whole-payload merging."""

    def test_combines_all_attributes(self) -> None:
        target = Component("main", ["/"])
        target.add_language("python", 2)
        target.add_tech("docker", "matched file: Dockerfile")

        other = Component("virtual", ["/requirements.txt"])
        other.add_language("python", 3)
        other.add_language("shell")
        other.add_primary_tech("postgresql")
        other.add_tech("flask", "flask matched: ^flask$")
        other.add_reason("global")
        other.add_license_reason("license")
        other.add_dependency(Dependency("python", "flask", "2.0"))
        other.add_license(License("MIT"))

        target.combine(other)

        assert target.path == ["/", "/requirements.txt"]
        assert target.languages == {"python": 5, "shell": 1}
        assert target.tech == ["postgresql"]
        assert set(target.techs) == {"docker", "flask", "postgresql"}
        assert target.reason["_"] == ["global"]
        assert target.reason["_license"] == ["license"]
        assert target.reason["flask"] == ["flask matched: ^flask$"]
        assert "_" not in target.techs
        assert len(target.dependencies) == 1
        assert [lic.license_name for lic in target.licenses] == ["MIT"]

    def test_git_first_detected_wins(self) -> None:
        target = Component("main", ["/"])
        target.git = GitInfo(branch="main", remote_url="a")
        other = Component("main", ["/"])
        other.git = GitInfo(branch="dev", remote_url="b")

        target.combine(other)

        assert target.git.remote_url == "a"

    def test_git_taken_when_missing(self) -> None:
        target = Component("main", ["/"])
        other = Component("main", ["/"])
        other.git = GitInfo(remote_url="b")

        target.combine(other)

        assert target.git is other.git


class TestIdentity:
    """Tests for ID assignment and serialization."""

    def test_assign_ids_is_deterministic(self) -> None:
        def build() -> Component:
            root = Component("main", ["/"])
            api = root.add_child(Component("api", ["/api/pyproject.toml"]))
            api.add_child(Component("PostgreSQL", ["/api/pyproject.toml"]))
            return root

        first, second = build(), build()
        first.assign_ids("root-id")
        second.assign_ids("root-id")

        assert [c.id for c in first.walk()] == [c.id for c in second.walk()]
        assert first.id == "root-id"
        api = first.children[0]
        assert api.id == generate_component_id("root-id", "api", "/api/pyproject.toml")
        assert api.children[0].id == generate_component_id(
            "root-id", "PostgreSQL", "/api/pyproject.toml"
        )

    def test_empty_root_id_gets_random_id(self) -> None:
        root = Component("main", ["/"])
        root.assign_ids("")
        assert len(root.id) == 12
        assert root.frozen

    def test_walk_is_preorder(self) -> None:
        root = Component("main", ["/"])
        a = root.add_child(Component("a", ["/a"]))
        a.add_child(Component("a1", ["/a/1"]))
        root.add_child(Component("b", ["/b"]))

        assert [c.name for c in root.walk()] == ["main", "a", "a1", "b"]

    def test_to_dict_serializes_edges_as_ids(self) -> None:
        root = Component("main", ["/"])
        web = root.add_child(Component("web", ["/web/package.json"]))
        api = root.add_child(Component("api", ["/api/package.json"]))
        web.add_dependency(Dependency("npm", "api", "1.0.0", "package.json"))
        root.assign_ids("r")
        web.add_component_ref(api, "api")

        data = root.to_dict()
        web_data = data["children"][0]

        assert web_data["edges"] == [api.id]
        assert web_data["component_refs"] == [{"target_id": api.id, "package_name": "api"}]
        assert web_data["dependencies"] == [["npm", "api", "1.0.0", "package.json"]]
        assert "git" not in data
        assert "component_type" not in data
