import json
from pathlib import Path

from typer.testing import CliRunner

from symbolic_mpc.cli import app

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"
INVALID = EXAMPLES / "invalid"

runner = CliRunner()


def test_cli_test_json_success():
    r = runner.invoke(app, ["test", str(EXAMPLES / "minimal.yaml"), "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["tool"] == "mpc"
    assert payload["command"] == "test"
    assert payload["ok"] is True
    assert payload["error_count"] == 0
    assert len(payload["files"]) == 1
    entry = payload["files"][0]
    assert entry["errors"] == []
    assert entry["info"] == []
    assert entry["summary"] == {"node_count": 2, "roots": ["setup"]}


def test_cli_test_json_failure_contains_codes_and_subjects():
    r = runner.invoke(app, ["test", str(INVALID / "missing-reference.yaml"), "--format", "json"])
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    errors = payload["files"][0]["errors"]
    assert [e["code"] for e in errors] == ["E_MISSING_REFERENCE"]
    assert errors[0]["kind"] == "MissingReference"
    assert errors[0]["subjects"] == ["setup", "ghost"]
    assert errors[0]["source"] == "structure"


def test_cli_verify_json_batch():
    r = runner.invoke(
        app,
        [
            "verify",
            str(EXAMPLES / "feature-flags-backend.yaml"),
            str(INVALID / "not-yaml.yaml"),
            "--format",
            "json",
        ],
    )
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["command"] == "verify"
    first, second = payload["files"]
    assert first["ok"] is True
    assert first["info"][0]["node_id"] == "flag-api"
    assert first["info"][0]["parents"] == ["data-model", "auth-integration"]
    assert second["ok"] is False
    assert second["summary"] is None
    assert second["errors"][0]["code"] == "E_YAML_PARSE"
    assert second["errors"][0]["source"] == "load"
    assert payload["error_count"] == 1
