import pytest

from configcrunch import REMOVE, InvalidRemoveError
from configcrunch.engine.merger import join_paths, merge_dicts, merge_values, strip_removes
from tests.sample_documents import Project, Service, write_doc


def test_merge_dicts_recursive_overlay_wins():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    overlay = {"b": {"c": 20}, "e": 5}

    merged = merge_dicts(base, overlay)

    assert merged == {"a": 1, "b": {"c": 20, "d": 3}, "e": 5}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}


def test_merge_values_type_mismatch_overlay_wins():
    assert merge_values({"a": 1}, [1, 2]) == [1, 2]
    assert merge_values("text", {"a": 1}) == {"a": 1}
    assert merge_values([1], None) is None


def test_merge_values_keeps_remove_marker():
    assert merge_dicts({"a": 1, "b": 2}, {"a": REMOVE}) == {"a": REMOVE, "b": 2}


def test_merge_documents_keeps_overlay_instance():
    base = Service({"image": "nginx", "port": 80})
    overlay = Service({"port": 81})

    merged = merge_values(base, overlay)

    assert merged is overlay
    assert merged.to_dict() == {"image": "nginx", "port": 81}


def test_strip_removes_drops_keys():
    assert strip_removes({"a": REMOVE, "b": {"c": REMOVE, "d": 1}}) == {"b": {"d": 1}}


def test_strip_removes_list_entries():
    value = ["a", "b", "c", "$remove::b", "d"]

    assert strip_removes(value) == ["a", "c", "d"]


def test_strip_removes_only_affects_earlier_entries():
    assert strip_removes(["a", "$remove::a", "a"]) == ["a"]


def test_strip_removes_compares_scalars_as_strings():
    assert strip_removes([80, 443, "$remove::80", True, "$remove::true"]) == [443]


def test_strip_removes_plain_remove_in_list_raises():
    with pytest.raises(InvalidRemoveError, match=r"can not be used as a list entry"):
        strip_removes({"roles": ["a", REMOVE]})


def test_strip_removes_empty_list_remove_raises():
    with pytest.raises(InvalidRemoveError):
        strip_removes(["a", "$remove::"])


def test_strip_removes_leaves_documents_alone():
    service = Service({"image": "x", "port": REMOVE})

    result = strip_removes({"web": service})

    assert result["web"] is service
    assert service["port"] == REMOVE


def test_join_paths_keeps_order_without_duplicates():
    assert join_paths(["a", "b"], ["b", "c"]) == ["a", "b", "c"]


def test_remove_through_reference(tmp_path):
    repo = tmp_path / "repo"
    write_doc(repo, "service/base.yml", "service", {
        "image": "nginx", "port": 80, "roles": ["web", "db"],
    })

    service = Service.from_dict({
        "$ref": "/service/base",
        "port": REMOVE,
        "roles": ["$remove::db", "cache"],
    })
    service.resolve_and_merge_references([str(repo)])

    assert service.to_dict() == {"image": "nginx", "roles": ["web", "cache"]}


def test_remove_without_reference_is_stripped():
    service = Service.from_dict({"image": "nginx", "port": REMOVE})
    service.resolve_and_merge_references([])

    assert service.to_dict() == {"image": "nginx"}


def test_remove_reaches_reference_of_subdocument(tmp_path):
    repo = tmp_path / "repo"
    write_doc(repo, "service/nginx.yml", "service", {"image": "nginx", "port": 80})

    project = Project.from_dict({
        "name": "demo",
        "services": {"web": {"$ref": "/service/nginx", "port": REMOVE}},
    })
    project.resolve_and_merge_references([str(repo)])

    assert project["services"]["web"].to_dict() == {"image": "nginx"}


def test_remove_inherited_subdocument(tmp_path):
    repo = tmp_path / "repo"
    write_doc(repo, "project/base.yml", "project", {
        "name": "base",
        "services": {"db": {"image": "postgres"}, "web": {"image": "nginx"}},
    })

    project = Project.from_dict({"$ref": "/project/base", "services": {"db": REMOVE}})
    project.resolve_and_merge_references([str(repo)])

    assert list(project["services"].keys()) == ["web"]


def test_remove_in_inherited_project_applies_to_its_base(tmp_path):
    repo = tmp_path / "repo"
    write_doc(repo, "project/base.yml", "project", {"name": "base", "description": "base project"})
    write_doc(repo, "project/mid.yml", "project", {"$ref": "/project/base", "description": REMOVE})

    project = Project.from_dict({"$ref": "/project/mid", "name": "child"})
    project.resolve_and_merge_references([str(repo)])

    assert project.to_dict() == {"name": "child"}
