from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import yaml

from symbolic_mpc.core.errors import PlanLoadError


PLAN_SUFFIXES: set[str] = {".yaml", ".yml"}


def load_plan(path: str | Path) -> dict[str, Any]:
    """Load a YAML/JSON plan file.

    Returns the document mapping as parsed, plus ``__file__`` naming the source.
    Does not coerce types; the schema checker and graph builder own shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise PlanLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise PlanLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in PLAN_SUFFIXES:
            data = yaml.safe_load(raw_text)
        elif suffix == ".json":
            data = json.loads(raw_text)
        else:
            raise PlanLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except PlanLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in PLAN_SUFFIXES else "E_JSON_PARSE"
        raise PlanLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise PlanLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    plan: dict[str, Any] = dict(data)
    plan["__file__"] = str(p)
    return plan


def collect_plan_files(paths: Iterable[str]) -> tuple[list[Path], list[str]]:
    """Expand CLI path arguments into plan files.

    Directories contribute their direct .yaml/.yml children, sorted by name.
    Returns (files, warnings); empty directories only produce a warning.
    """

    files: list[Path] = []
    warnings: list[str] = []

    for arg in paths:
        p = Path(arg)
        if not p.exists():
            raise PlanLoadError(
                code="E_PATH_NOT_FOUND",
                message=f"path not found: {arg}",
                file=arg,
            )
        if p.is_dir():
            found = sorted(
                (c for c in p.iterdir() if c.is_file() and c.suffix.lower() in PLAN_SUFFIXES),
                key=lambda c: c.name,
            )
            if not found:
                warnings.append(f"no YAML files found in directory: {arg}")
            files.extend(found)
        elif p.is_file():
            files.append(p)
        else:
            raise PlanLoadError(
                code="E_INVALID_PATH_TYPE",
                message=f"invalid path type: {arg}",
                file=arg,
            )

    if not files:
        raise PlanLoadError(code="E_NO_FILES", message="no files to validate")
    return files, warnings
