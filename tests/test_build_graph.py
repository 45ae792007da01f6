import pytest

from symbolic_mpc.core.errors import MalformedDocumentError
from symbolic_mpc.core.graph.build_graph import build_graph_index


def test_build_index_and_parents():
    plan = {
        "entry_node": "a",
        "nodes": [
            {"id": "a", "downstream": ["b", "c"], "description": "root"},
            {"id": "b", "downstream": ["c"]},
            {"id": "c"},
        ],
    }
    index = build_graph_index(plan)
    assert list(index.id_to_node) == ["a", "b", "c"]
    assert index.id_to_parents == {"b": ["a"], "c": ["a", "b"]}
    assert index.id_to_node["a"].payload == {"description": "root"}
    assert index.id_to_node["c"].downstream == ()
    assert index.duplicate_ids == ()


def test_build_keeps_first_definition_and_records_duplicates():
    plan = {
        "nodes": [
            {"id": "a", "downstream": ["b"]},
            {"id": "b", "description": "first"},
            {"id": "b", "description": "second"},
        ]
    }
    index = build_graph_index(plan)
    assert index.duplicate_ids == ("b",)
    assert index.id_to_node["b"].payload["description"] == "first"
    assert len(index.nodes) == 3


def test_build_null_downstream_is_empty():
    index = build_graph_index({"nodes": [{"id": "a", "downstream": None}]})
    assert index.id_to_node["a"].downstream == ()


@pytest.mark.parametrize(
    "plan, path",
    [
        ({}, "nodes"),
        ({"nodes": "a"}, "nodes"),
        ({"nodes": []}, "nodes"),
        ({"nodes": ["a"]}, "nodes[0]"),
        ({"nodes": [{"downstream": []}]}, "nodes[0].id"),
        ({"nodes": [{"id": "  "}]}, "nodes[0].id"),
        ({"nodes": [{"id": "a"}, {"id": "b", "downstream": "a"}]}, "nodes[1].downstream"),
        ({"nodes": [{"id": "a", "downstream": [1]}]}, "nodes[0].downstream"),
    ],
)
def test_build_malformed(plan, path):
    with pytest.raises(MalformedDocumentError) as exc:
        build_graph_index(plan)
    assert exc.value.code == "E_MALFORMED_DOCUMENT"
    assert exc.value.path == path
