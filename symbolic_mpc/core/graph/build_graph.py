from __future__ import annotations

from typing import Any, Optional, cast

from symbolic_mpc.core.errors import MalformedDocumentError
from symbolic_mpc.core.model import GraphIndex, PlanNode


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def build_graph_index(plan: dict[str, Any]) -> GraphIndex:
    """Index the plan's nodes by id and invert downstream edges into parent lists.

    The first definition of an id wins; later ones are recorded in
    ``duplicate_ids`` so the caller can report them. Raises
    MalformedDocumentError when the node list cannot form a graph at all.
    """

    file = cast(Optional[str], plan.get("__file__"))

    nodes = plan.get("nodes")
    if not isinstance(nodes, list):
        raise MalformedDocumentError(
            code="E_MALFORMED_DOCUMENT",
            message="nodes is required and must be an array",
            file=file,
            path="nodes",
        )
    if not nodes:
        raise MalformedDocumentError(
            code="E_MALFORMED_DOCUMENT",
            message="nodes must contain at least one node",
            file=file,
            path="nodes",
        )

    ordered: list[PlanNode] = []
    for i, raw in enumerate(nodes):
        node_path = f"nodes[{i}]"
        if not isinstance(raw, dict):
            raise MalformedDocumentError(
                code="E_MALFORMED_DOCUMENT",
                message="node must be an object",
                file=file,
                path=node_path,
            )

        nid = raw.get("id")
        if not isinstance(nid, str) or not nid.strip():
            raise MalformedDocumentError(
                code="E_MALFORMED_DOCUMENT",
                message="id is required and must be a non-empty string",
                file=file,
                path=f"{node_path}.id",
            )

        downstream = raw.get("downstream")
        if downstream is None:
            downstream = []
        if not _is_list_of_str(downstream):
            raise MalformedDocumentError(
                code="E_MALFORMED_DOCUMENT",
                message="downstream must be an array of strings",
                file=file,
                path=f"{node_path}.downstream",
            )

        payload = {k: v for k, v in raw.items() if k not in ("id", "downstream")}
        ordered.append(PlanNode(id=nid, downstream=tuple(downstream), payload=payload))

    id_to_node: dict[str, PlanNode] = {}
    duplicates: list[str] = []
    for node in ordered:
        if node.id in id_to_node:
            if node.id not in duplicates:
                duplicates.append(node.id)
            continue
        id_to_node[node.id] = node

    id_to_parents: dict[str, list[str]] = {}
    for node in ordered:
        for child in node.downstream:
            id_to_parents.setdefault(child, []).append(node.id)

    return GraphIndex(
        nodes=tuple(ordered),
        id_to_node=id_to_node,
        id_to_parents=id_to_parents,
        duplicate_ids=tuple(duplicates),
    )
