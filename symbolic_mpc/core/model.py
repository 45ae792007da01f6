from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class DiagnosticKind(str, Enum):
    NO_ROOT = "NoRoot"
    MULTIPLE_ROOTS = "MultipleRoots"
    ENTRY_MISMATCH = "EntryMismatch"
    MISSING_REFERENCE = "MissingReference"
    ORPHANED_NODE = "OrphanedNode"
    DUPLICATE_ID = "DuplicateId"

    @property
    def code(self) -> str:
        return _CODES[self]


_CODES: dict[DiagnosticKind, str] = {
    DiagnosticKind.NO_ROOT: "E_NO_ROOT",
    DiagnosticKind.MULTIPLE_ROOTS: "E_MULTIPLE_ROOTS",
    DiagnosticKind.ENTRY_MISMATCH: "E_ENTRY_MISMATCH",
    DiagnosticKind.MISSING_REFERENCE: "E_MISSING_REFERENCE",
    DiagnosticKind.ORPHANED_NODE: "E_ORPHANED_NODE",
    DiagnosticKind.DUPLICATE_ID: "E_DUPLICATE_ID",
}


@dataclass(frozen=True)
class PlanNode:
    id: str
    downstream: tuple[str, ...] = ()

    # Everything else on the node (description, status, ...), untouched.
    payload: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class GraphIndex:
    nodes: tuple[PlanNode, ...]  # document order, duplicates included
    id_to_node: dict[str, PlanNode]
    id_to_parents: dict[str, list[str]]
    duplicate_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    subjects: tuple[str, ...]
    file: Optional[str] = None

    @property
    def code(self) -> str:
        return self.kind.code

    def __str__(self) -> str:
        loc = self.file or "<plan>"
        return f"{loc}: {self.code}: {self.message}"


@dataclass(frozen=True)
class FanInNote:
    node_id: str
    parents: tuple[str, ...]

    @property
    def message(self) -> str:
        refs = ", ".join(f'"{p}"' for p in self.parents)
        return f'"{self.node_id}" is referenced by: {refs}'


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    diagnostics: tuple[Diagnostic, ...]
    info: tuple[FanInNote, ...]
    roots: tuple[str, ...]
    node_count: int
    file: Optional[str] = None
