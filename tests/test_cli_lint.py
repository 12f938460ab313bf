import json

from typer.testing import CliRunner

from skilltree.cli import app

runner = CliRunner()


def test_cli_lint_success():
    r = runner.invoke(app, ["lint", "examples/basic-plan.json"])
    assert r.exit_code == 0
    assert "OK:" in r.stdout


def test_cli_lint_duplicate_id():
    r = runner.invoke(app, ["lint", "examples/invalid-duplicate-id.json"])
    assert r.exit_code != 0
    assert "L_DUPLICATE_ID" in (r.stdout + r.stderr)


def test_cli_lint_json_failure_contains_codes():
    r = runner.invoke(app, ["lint", "examples/dangling-and-cycle.yaml", "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["command"] == "lint"
    assert payload["ok"] is False
    codes = {e["code"] for e in payload["errors"]}
    assert {"L_DANGLING_PREREQ", "L_CYCLE_DETECTED", "L_UNKNOWN_DIFFICULTY"} <= codes
    assert {e["source"] for e in payload["errors"]} == {"lint"}


def test_cli_lint_includes_shape_errors():
    r = runner.invoke(app, ["lint", "examples/invalid-missing-problems.json", "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert [e["code"] for e in payload["errors"]] == ["E_INVALID_PLAN"]
    assert payload["errors"][0]["source"] == "validate"
