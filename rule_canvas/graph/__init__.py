"""
Rule graph package for the rule canvas.

Key Components:
- model: Nodes, edges and the in-memory RuleGraph
- connections: Star-topology connection validator
- serializer: Canvas graph -> RuleV2WithUI documents
- materializer: Persisted records -> canvas graph

Design Principles:
- Purity: validation, export and materialization never mutate their input
- Round trip: materialize(export_rule(G, r)) reproduces the rule's subgraph
"""

from rule_canvas.graph.connections import is_valid_connection
from rule_canvas.graph.materializer import materialize, materialize_from_store
from rule_canvas.graph.model import Edge, Node, RuleGraph, new_node
from rule_canvas.graph.serializer import (
    export_rule,
    export_rule_records,
    kv_list_from_object,
    object_from_kv_list,
    to_canonical_json_string,
)

__all__ = [
    "Edge",
    "Node",
    "RuleGraph",
    "new_node",
    "is_valid_connection",
    "export_rule",
    "export_rule_records",
    "object_from_kv_list",
    "kv_list_from_object",
    "to_canonical_json_string",
    "materialize",
    "materialize_from_store",
]
