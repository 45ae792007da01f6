"""Symbolic MPC plan validation.

A plan is a task graph: nodes connected by ``downstream`` edges, with a
declared ``entry_node``. Validation checks the document against the bundled
JSON Schema and checks the graph has one root, matching the entry node,
from which every node is reachable.
"""
