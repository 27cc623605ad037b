import pytest

import configcrunch
from configcrunch import ConfigcrunchError, YamlConfigDocument
from configcrunch.engine import subdocs
from tests.sample_documents import Command, Project, Service


def test_parse_spec():
    assert subdocs.parse_spec("services[]") == [("services", True)]
    assert subdocs.parse_spec("app/commands[]") == [("app", False), ("commands", True)]
    assert subdocs.parse_spec("main") == [("main", False)]


@pytest.mark.parametrize("spec", ["", "/", "a//b", "[]", "a[]b", "a[0]"])
def test_parse_spec_rejects_invalid_paths(spec):
    with pytest.raises(ConfigcrunchError):
        subdocs.parse_spec(spec)


def test_list_positions_are_wrapped():
    class Pipeline(YamlConfigDocument):
        @classmethod
        def header(cls):
            return "pipeline"

        @classmethod
        def subdocuments(cls):
            return [("steps[]", Command), ("final", Command)]

    pipeline = Pipeline({"steps": [{"run": "a"}, "$remove", {"run": "b"}], "final": {"run": "c"}})

    assert [type(s) for s in pipeline["steps"]] == [Command, str, Command]
    assert isinstance(pipeline["final"], Command)
    assert [d["run"] for d in subdocs.iter_subdocuments(pipeline)] == ["a", "b", "c"]


def test_missing_or_scalar_positions_are_ignored():
    project = Project({"name": "demo", "services": "none", "app": None})

    assert list(subdocs.iter_subdocuments(project)) == []


def test_subdoc_specs_are_consistent():
    project = Project({"name": "demo", "services": {"web": {"image": "x", "commands": {"a": {"run": "a"}}}}})

    assert configcrunch.test_subdoc_specs(project) is True


def test_subdoc_specs_reject_non_document_types():
    class Broken(YamlConfigDocument):
        @classmethod
        def subdocuments(cls):
            return [("items[]", dict)]

    with pytest.raises(ConfigcrunchError, match=r"not a YamlConfigDocument"):
        configcrunch.test_subdoc_specs(Broken({}))


def test_subdoc_specs_reject_wrong_instances():
    service = Service({"image": "x", "commands": {"a": {"run": "a"}}})
    service.doc["commands"]["b"] = {"run": "b"}

    with pytest.raises(ConfigcrunchError, match=r"should be a Command"):
        configcrunch.test_subdoc_specs(service)
