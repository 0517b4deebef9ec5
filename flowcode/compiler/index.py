"""
flowcode Compiler — Graph Index
===============================
Lookup tables built once per compilation call:

    nodes     id → Node          (last write wins on duplicate ids)
    outgoing  id → [Edge, ...]   (edge-list order preserved)

plus the edge selector used by every traversal step.

Edge selection
--------------
select_next(id)
    1. first untagged edge
    2. else first edge tagged "next"
    3. else first edge in list order
    None when the node has no outgoing edges.

by_port(id, tag)
    Target of the first edge whose port tag equals `tag` exactly, else None.

Editors usually leave sequential edges untagged, so select_next() defaults
forgivingly instead of demanding exact port names.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from flowcode.core.GraphPrimitives import Edge, Graph, Node
from flowcode.core.Types import PORT_NEXT


class GraphIndex:
    def __init__(self, graph: Graph):
        self.nodes: Dict[str, Node] = {}
        for node in graph.nodes:
            self.nodes[node.id] = node

        self.outgoing: Dict[str, List[Edge]] = {}
        for edge in graph.edges:
            if not edge.source or not edge.target:
                continue
            self.outgoing.setdefault(edge.source, []).append(edge)

    # ── Queries ───────────────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def get_outgoing(self, node_id: str) -> List[Edge]:
        return self.outgoing.get(node_id, [])

    # ── Edge selection ────────────────────────────────────────────────────

    def select_next(self, node_id: str) -> Optional[str]:
        edges = self.get_outgoing(node_id)
        if not edges:
            return None
        preferred = (
            next((e for e in edges if not e.port), None)
            or next((e for e in edges if e.port == PORT_NEXT), None)
            or edges[0]
        )
        return preferred.target

    def by_port(self, node_id: str, tag: str) -> Optional[str]:
        for edge in self.get_outgoing(node_id):
            if edge.port == tag:
                return edge.target
        return None


__all__ = ["GraphIndex"]
