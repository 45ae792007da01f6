from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

from symbolic_mpc.core.model import (
    Diagnostic,
    DiagnosticKind,
    FanInNote,
    GraphIndex,
    PlanNode,
)


def resolve_roots(index: GraphIndex) -> list[PlanNode]:
    """Nodes nothing points at, in document order."""

    roots: list[PlanNode] = []
    seen: set[str] = set()
    for node in index.nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        if node.id not in index.id_to_parents:
            roots.append(node)
    return roots


def root_diagnostics(roots: list[PlanNode], file: Optional[str] = None) -> list[Diagnostic]:
    if not roots:
        return [
            Diagnostic(
                kind=DiagnosticKind.NO_ROOT,
                message="no root node found (all nodes have incoming edges)",
                subjects=(),
                file=file,
            )
        ]
    if len(roots) > 1:
        ids = tuple(r.id for r in roots)
        return [
            Diagnostic(
                kind=DiagnosticKind.MULTIPLE_ROOTS,
                message=f"multiple root nodes found: {', '.join(ids)}. There must be exactly one root node.",
                subjects=ids,
                file=file,
            )
        ]
    return []


def check_entry(entry_node: object, root: PlanNode, file: Optional[str] = None) -> Optional[Diagnostic]:
    # Exact comparison; no case folding or trimming.
    if isinstance(entry_node, str) and entry_node == root.id:
        return None
    declared = entry_node if isinstance(entry_node, str) else "None"
    return Diagnostic(
        kind=DiagnosticKind.ENTRY_MISMATCH,
        message=f'entry_node "{declared}" is not the root node. The root node is "{root.id}".',
        subjects=(declared, root.id),
        file=file,
    )


def reachable_from(index: GraphIndex, root_ids: Iterable[str]) -> set[str]:
    """Breadth-first walk over downstream edges.

    Ids without a node are visited but never expanded. Each id is queued at
    most once, so shared children and cycles terminate.
    """

    q: deque[str] = deque()
    seen: set[str] = set()
    for rid in root_ids:
        if rid not in seen:
            seen.add(rid)
            q.append(rid)

    while q:
        cur = q.popleft()
        node = index.id_to_node.get(cur)
        if node is None:
            continue
        for nxt in node.downstream:
            if nxt not in seen:
                seen.add(nxt)
                q.append(nxt)
    return seen


def find_orphans(index: GraphIndex, reachable: set[str]) -> list[str]:
    orphans: list[str] = []
    for node in index.nodes:
        if node.id not in reachable and node.id not in orphans:
            orphans.append(node.id)
    return orphans


def orphan_diagnostics(orphans: list[str], file: Optional[str] = None) -> list[Diagnostic]:
    return [
        Diagnostic(
            kind=DiagnosticKind.ORPHANED_NODE,
            message=f'node "{nid}" is not reachable from the root',
            subjects=(nid,),
            file=file,
        )
        for nid in orphans
    ]


def check_references(index: GraphIndex, file: Optional[str] = None) -> list[Diagnostic]:
    """Every downstream id must name an existing node, reachable or not."""

    out: list[Diagnostic] = []
    for node in index.nodes:
        for child in node.downstream:
            if child not in index.id_to_node:
                out.append(
                    Diagnostic(
                        kind=DiagnosticKind.MISSING_REFERENCE,
                        message=f'node "{node.id}" references non-existent node "{child}"',
                        subjects=(node.id, child),
                        file=file,
                    )
                )
    return out


def duplicate_diagnostics(index: GraphIndex, file: Optional[str] = None) -> list[Diagnostic]:
    return [
        Diagnostic(
            kind=DiagnosticKind.DUPLICATE_ID,
            message=f'duplicate node id: "{nid}" (first definition is used)',
            subjects=(nid,),
            file=file,
        )
        for nid in index.duplicate_ids
    ]


def report_fan_in(index: GraphIndex) -> list[FanInNote]:
    """Nodes with more than one distinct parent. A repeated edge counts once."""

    notes: list[FanInNote] = []
    for child, parents in index.id_to_parents.items():
        if child not in index.id_to_node:
            continue
        distinct = tuple(dict.fromkeys(parents))
        if len(distinct) > 1:
            notes.append(FanInNote(node_id=child, parents=distinct))
    return notes
