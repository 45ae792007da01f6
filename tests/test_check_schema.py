import json
from pathlib import Path

import pytest

from symbolic_mpc.core.errors import SchemaConfigError
from symbolic_mpc.core.io.load_plan import load_plan
from symbolic_mpc.core.schema.check_schema import SchemaChecker, check_schema, load_schema

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


@pytest.fixture(scope="module")
def checker():
    return SchemaChecker(load_schema())


def test_examples_conform(checker):
    for name in ("minimal.yaml", "feature-flags-backend.yaml"):
        assert checker.check(load_plan(EXAMPLES / name)) == []


def test_bad_enum_is_reported_with_path(checker):
    issues = checker.check(load_plan(EXAMPLES / "invalid" / "schema-only.yaml"))
    assert len(issues) == 1
    assert issues[0].path == "nodes[1].status"
    assert "'Done'" in issues[0].message


def test_missing_fields_and_range(checker):
    doc = {
        "version": "0.4",
        "plan_id": "p",
        "project_name": "P",
        "agent_profile": "a",
        "architecture": {"overview": "o"},
        "tooling": {"primary_language": "Go", "frameworks": [], "package_manager": "go"},
        "nodes": [
            {
                "id": "a",
                "status": "Ready",
                "materialization": 1.5,
                "description": "d",
                "detailed_description": "dd",
                "outputs": [],
                "agent_action": "act",
            }
        ],
    }
    paths = [i.path for i in checker.check(doc)]
    assert paths == sorted(paths)
    assert "<root>" in paths  # entry_node is required
    assert "nodes[0].materialization" in paths
    assert "tooling.frameworks" in paths


def test_file_marker_is_not_checked(tmp_path):
    schema = {"type": "object", "additionalProperties": False, "properties": {"a": {}}}
    assert check_schema({"a": 1, "__file__": "x.yaml"}, schema) == []
    assert [i.path for i in check_schema({"b": 1}, schema)] == ["<root>"]


def test_non_mapping_document(checker):
    issues = checker.check(["not", "a", "plan"])
    assert [i.path for i in issues] == ["<root>"]


def test_load_schema_override(tmp_path):
    p = tmp_path / "schema.json"
    p.write_text(json.dumps({"type": "object", "required": ["nodes"]}), encoding="utf-8")
    assert load_schema(str(p)) == {"type": "object", "required": ["nodes"]}


def test_load_schema_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_schema(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{nope", encoding="utf-8")
    with pytest.raises(SchemaConfigError):
        load_schema(bad_json)

    bad_schema = tmp_path / "bad-schema.json"
    bad_schema.write_text(json.dumps({"type": 12}), encoding="utf-8")
    with pytest.raises(SchemaConfigError):
        load_schema(bad_schema)

    not_object = tmp_path / "list.json"
    not_object.write_text("[]", encoding="utf-8")
    with pytest.raises(SchemaConfigError):
        load_schema(not_object)


def test_issues_sort_array_indexes_numerically(checker):
    plan = load_plan(EXAMPLES / "minimal.yaml")
    template = plan["nodes"][1]
    plan["nodes"] = [plan["nodes"][0]] + [dict(template, id=f"n{i}") for i in range(1, 12)]
    plan["nodes"][2]["status"] = "Done"
    plan["nodes"][10]["status"] = "Done"

    paths = [i.path for i in checker.check(plan)]
    assert paths == ["nodes[2].status", "nodes[10].status"]
