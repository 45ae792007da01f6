from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import jsonschema
from jsonschema.exceptions import SchemaError

from symbolic_mpc.core.errors import SchemaConfigError


DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parents[2] / "schema" / "symbolic-mpc.schema.json"


@dataclass(frozen=True)
class SchemaIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def load_schema(path: str | Path | None = None) -> dict[str, Any]:
    """Load a JSON Schema file; the bundled Symbolic MPC schema when path is None."""
    p = Path(path) if path else DEFAULT_SCHEMA_PATH
    if not p.exists():
        raise FileNotFoundError(str(p))

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaConfigError(f"cannot read schema file: {p} ({e})") from e
    try:
        raw = json.loads(text)
    except ValueError as e:
        raise SchemaConfigError(f"schema file is not valid JSON: {p} ({e})") from e

    if not isinstance(raw, dict):
        raise SchemaConfigError(f"schema file must contain a JSON object: {p}")
    try:
        jsonschema.Draft7Validator.check_schema(raw)
    except SchemaError as e:
        raise SchemaConfigError(f"schema file is not a valid JSON Schema: {p} ({e.message})") from e
    return raw


def _path_key(parts: Iterable[Any]) -> tuple[tuple[int, int, str], ...]:
    # Array indexes sort numerically, so nodes[2] comes before nodes[10].
    return tuple((0, p, "") if isinstance(p, int) else (1, 0, str(p)) for p in parts)


def _format_path(parts: Iterable[Any]) -> str:
    out = ""
    for part in parts:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "<root>"


class SchemaChecker:
    """Compiled validator for one schema; build once, check many documents."""

    def __init__(self, schema: dict[str, Any]) -> None:
        self.schema = schema
        self._validator = jsonschema.Draft7Validator(
            schema, format_checker=jsonschema.FormatChecker()
        )

    def check(self, document: Any) -> list[SchemaIssue]:
        if isinstance(document, dict):
            document = {k: v for k, v in document.items() if k != "__file__"}
        errors = sorted(
            self._validator.iter_errors(document),
            key=lambda e: (_path_key(e.absolute_path), e.message),
        )
        return [SchemaIssue(path=_format_path(e.absolute_path), message=e.message) for e in errors]


def check_schema(document: Any, schema: dict[str, Any]) -> list[SchemaIssue]:
    return SchemaChecker(schema).check(document)
