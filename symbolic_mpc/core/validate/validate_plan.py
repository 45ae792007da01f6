from __future__ import annotations

from typing import Any, Optional, cast

from symbolic_mpc.core.graph.analyze_graph import (
    check_entry,
    check_references,
    duplicate_diagnostics,
    find_orphans,
    orphan_diagnostics,
    reachable_from,
    report_fan_in,
    resolve_roots,
    root_diagnostics,
)
from symbolic_mpc.core.graph.build_graph import build_graph_index
from symbolic_mpc.core.model import Diagnostic, ValidationResult


def validate_plan(plan: dict[str, Any]) -> ValidationResult:
    """Check the structural graph invariants of a plan document.

    Every check runs even when an earlier one fails, so one call reports all
    defect categories. Raises MalformedDocumentError when the node list is
    unusable; everything else is returned as diagnostics.
    """

    file = cast(Optional[str], plan.get("__file__"))
    index = build_graph_index(plan)

    diagnostics: list[Diagnostic] = []
    diagnostics.extend(duplicate_diagnostics(index, file))

    roots = resolve_roots(index)
    diagnostics.extend(root_diagnostics(roots, file))

    if len(roots) == 1:
        mismatch = check_entry(plan.get("entry_node"), roots[0], file)
        if mismatch is not None:
            diagnostics.append(mismatch)

    # With no root at all every node would be an orphan; NoRoot already says it.
    if roots:
        reachable = reachable_from(index, [r.id for r in roots])
        diagnostics.extend(orphan_diagnostics(find_orphans(index, reachable), file))

    diagnostics.extend(check_references(index, file))

    return ValidationResult(
        valid=not diagnostics,
        diagnostics=tuple(diagnostics),
        info=tuple(report_fan_in(index)),
        roots=tuple(r.id for r in roots),
        node_count=len(index.id_to_node),
        file=file,
    )
