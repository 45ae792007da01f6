from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import typer

from symbolic_mpc.core.errors import PlanError, PlanLoadError, PlanValidationError, SchemaConfigError
from symbolic_mpc.core.io.load_plan import collect_plan_files, load_plan
from symbolic_mpc.core.model import ValidationResult
from symbolic_mpc.core.schema.check_schema import SchemaChecker, SchemaIssue, load_schema
from symbolic_mpc.core.validate.validate_plan import validate_plan

app = typer.Typer(add_completion=False, no_args_is_help=True)

USAGE = """Usage: mpc test <file.yaml> [file2.yaml ...]
       mpc test <directory>

Validates YAML files against the Symbolic MPC schema and graph rules."""


@dataclass
class FileOutcome:
    file: str
    load_error: Optional[PlanError] = None
    schema_issues: list[SchemaIssue] = field(default_factory=list)
    result: Optional[ValidationResult] = None

    @property
    def ok(self) -> bool:
        return (
            self.load_error is None
            and not self.schema_issues
            and self.result is not None
            and self.result.valid
        )


@app.callback()
def _callback() -> None:
    """Symbolic MPC plan validator."""
    return


@app.command("test")
def schema_test(
    paths: Optional[list[str]] = typer.Argument(
        None, help="Plan files (.yaml/.yml/.json) or directories of .yaml/.yml files"
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    schema: Optional[str] = typer.Option(
        None, "--schema", help="Optional JSON Schema file to use instead of the bundled schema"
    ),
) -> None:
    """Validate plans against the schema and the graph structure rules."""
    _check_format(format, "E_TEST_UNKNOWN_FORMAT")
    files = _resolve_files(paths)

    try:
        checker = SchemaChecker(load_schema(schema))
    except FileNotFoundError:
        _print_errors(
            [
                PlanLoadError(
                    code="E_SCHEMA_FILE_NOT_FOUND",
                    message=f"schema file not found: {schema}",
                    file=None,
                    path="schema",
                )
            ]
        )
        raise typer.Exit(code=1)
    except SchemaConfigError as e:
        _print_errors(
            [
                PlanValidationError(
                    code="E_SCHEMA_FILE_INVALID",
                    message=str(e),
                    file=None,
                    path="schema",
                )
            ]
        )
        raise typer.Exit(code=1)

    outcomes = [_check_file(f, checker) for f in files]

    if format == "json":
        _emit_json("test", outcomes)

    for o in outcomes:
        if o.ok:
            typer.echo(f"OK: {o.file} validates against the schema")
            continue
        typer.echo(f"FAIL: {o.file}")
        _echo_problems(o)

    _finish(outcomes)


@app.command("verify")
def verify_structure(
    paths: Optional[list[str]] = typer.Argument(
        None, help="Plan files (.yaml/.yml/.json) or directories of .yaml/.yml files"
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Report the graph structure of plans (roots, reachability, fan-in, references)."""
    _check_format(format, "E_VERIFY_UNKNOWN_FORMAT")
    files = _resolve_files(paths)

    outcomes = [_check_file(f, None) for f in files]

    if format == "json":
        _emit_json("verify", outcomes)

    for o in outcomes:
        typer.echo(_structure_report(o))

    _finish(outcomes)


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = PlanValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=1)


def _resolve_files(paths: Optional[list[str]]) -> list[Path]:
    if not paths:
        typer.echo(USAGE, err=True)
        raise typer.Exit(code=1)
    try:
        files, warnings = collect_plan_files(paths)
    except PlanLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)
    for w in warnings:
        typer.echo(f"WARN: {w}", err=True)
    return files


def _check_file(path: Path, checker: Optional[SchemaChecker]) -> FileOutcome:
    outcome = FileOutcome(file=str(path))
    try:
        plan = load_plan(path)
    except PlanLoadError as e:
        outcome.load_error = e
        return outcome

    if checker is not None:
        outcome.schema_issues = checker.check(plan)

    # Structure is checked regardless of the schema outcome.
    try:
        outcome.result = validate_plan(plan)
    except PlanValidationError as e:
        outcome.load_error = e
    return outcome


def _echo_problems(o: FileOutcome) -> None:
    if o.load_error is not None:
        typer.echo(f"  {o.load_error}")
    for issue in o.schema_issues:
        typer.echo(f"  E_SCHEMA: {issue}")
    if o.result is not None:
        for d in o.result.diagnostics:
            typer.echo(f"  {d}")


def _structure_report(o: FileOutcome) -> str:
    lines = [f"Verifying MPC structure for: {o.file}", "=" * 51]
    if o.load_error is not None:
        lines.append(f"ERROR: {o.load_error}")
        lines.append("")
        return "\n".join(lines)

    r = o.result
    assert r is not None

    lines.append(f"Total nodes: {r.node_count}")
    lines.append(f"Root nodes found: {len(r.roots)}")
    if len(r.roots) == 1:
        lines.append(f'Root node ID: "{r.roots[0]}"')

    lines.append("")
    lines.append("--- Diagnostics ---")
    if r.diagnostics:
        for d in r.diagnostics:
            lines.append(f"- {d.code}: {d.message}")
    else:
        lines.append("none")

    if r.info:
        lines.append("")
        lines.append(f"Note: {len(r.info)} nodes have multiple parents:")
        for note in r.info:
            lines.append(f"- {note.message}")

    lines.append("=" * 51)
    lines.append("OK: MPC structure is valid" if r.valid else "FAIL: MPC structure has issues that need to be fixed")
    lines.append("")
    return "\n".join(lines)


def _to_items(o: FileOutcome) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    if o.load_error is not None:
        e = o.load_error
        items.append(
            {
                "code": e.code,
                "message": e.message,
                "file": e.file,
                "path": e.path,
                "subjects": [],
                "severity": "error",
                "source": "load" if isinstance(e, PlanLoadError) else "structure",
            }
        )
    for issue in o.schema_issues:
        items.append(
            {
                "code": "E_SCHEMA",
                "message": issue.message,
                "file": o.file,
                "path": issue.path,
                "subjects": [],
                "severity": "error",
                "source": "schema",
            }
        )
    if o.result is not None:
        for d in o.result.diagnostics:
            items.append(
                {
                    "code": d.code,
                    "kind": d.kind.value,
                    "message": d.message,
                    "file": d.file,
                    "path": None,
                    "subjects": list(d.subjects),
                    "severity": "error",
                    "source": "structure",
                }
            )
    return items


def _emit_json(command: str, outcomes: list[FileOutcome]) -> None:
    files_payload: list[dict[str, Any]] = []
    error_count = 0
    for o in outcomes:
        errors = _to_items(o)
        error_count += len(errors)
        r = o.result
        files_payload.append(
            {
                "file": o.file,
                "ok": o.ok,
                "errors": errors,
                "info": [
                    {"node_id": n.node_id, "parents": list(n.parents), "message": n.message}
                    for n in (r.info if r is not None else ())
                ],
                "summary": (
                    {"node_count": r.node_count, "roots": list(r.roots)} if r is not None else None
                ),
            }
        )

    ok = all(o.ok for o in outcomes)
    payload = {
        "tool": "mpc",
        "command": command,
        "ok": ok,
        "error_count": error_count,
        "files": files_payload,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=0 if ok else 1)


def _finish(outcomes: list[FileOutcome]) -> None:
    if not all(o.ok for o in outcomes):
        raise typer.Exit(code=1)


def _print_errors(errors: list[PlanError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="mpc")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
