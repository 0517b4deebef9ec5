"""
flowcode Compiler — JSON Deserialiser
=====================================
Converts editor graph JSON (file or dict) into an immutable Graph.

Pipeline
--------
    flow.json  →  [deserialiser.json_to_graph]  →  Graph
    Graph      →  [emitter.emit]                →  Python source str

Editor aliases
--------------
The editor palette has a few composite boxes that map onto compiler kinds:

    terminator   data.title "end"/"stop"  → end, anything else → start
    io           data.kind "Output"       → output (data.expr → value)
                 otherwise                → input
    comment                               → note

The original type string is kept on Node.type_name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from flowcode.core.GraphPrimitives import Edge, Graph, Node
from flowcode.core.Types import NodeKind

from .schema import load_file

_END_TITLES = frozenset({"end", "stop", "exit", "finish", "done"})


def _resolve_kind(type_name: str, data: Dict[str, Any]) -> NodeKind:
    key = str(type_name or "").strip().lower()

    if key == "terminator":
        title = str(data.get("title") or "").strip().lower()
        return NodeKind.END if title in _END_TITLES else NodeKind.START

    if key == "io":
        io_kind = str(data.get("kind") or "").strip().lower()
        return NodeKind.OUTPUT if io_kind == "output" else NodeKind.INPUT

    if key == "comment":
        return NodeKind.NOTE

    return NodeKind.from_type_name(key)


def _parse_node(node_spec: Dict[str, Any]) -> Node:
    """Convert a JSON node dict → Node."""
    type_name = str(node_spec.get("type") or "")
    data = dict(node_spec.get("data") or {})
    kind = _resolve_kind(type_name, data)

    # The editor I/O box stores an output expression under "expr".
    if kind == NodeKind.OUTPUT and not data.get("value") and data.get("expr"):
        data["value"] = data["expr"]

    return Node(
        id=str(node_spec["id"]),
        kind=kind,
        data=data,
        type_name=type_name or kind.value,
    )


def _parse_edge(edge_spec: Dict[str, Any]) -> Optional[Edge]:
    """Convert a JSON edge dict → Edge.  Returns None when an endpoint is blank."""
    source = edge_spec.get("source")
    target = edge_spec.get("target")
    if not source or not target:
        return None
    return Edge(
        source=str(source),
        target=str(target),
        port=edge_spec.get("sourceHandle") or None,
        label=edge_spec.get("label"),
    )


# ── Public entry point ────────────────────────────────────────────────────────

def json_to_graph(source: Union[str, Path, Dict[str, Any]]) -> Graph:
    """
    Parse a graph JSON description and return a Graph.

    Args:
        source: One of:
            - A file path (str or Path) to a JSON file.
            - A pre-parsed dict matching the graph JSON schema.

    Raises:
        FileNotFoundError: If a path is given and the file does not exist.
        KeyError: If a node has no id.
    """
    data = load_file(source) if isinstance(source, (str, Path)) else source

    nodes = [_parse_node(spec) for spec in data.get("nodes", [])]
    edges = [e for e in (_parse_edge(spec) for spec in data.get("edges", [])) if e is not None]
    return Graph.build(nodes, edges)


def graph_to_json(graph: Graph) -> Dict[str, Any]:
    """Inverse of json_to_graph, in the editor wire shape."""
    return {
        "nodes": [
            {"id": n.id, "type": n.type_name, "data": dict(n.data)}
            for n in graph.nodes
        ],
        "edges": [
            {
                "source": e.source,
                "target": e.target,
                "sourceHandle": e.port,
                **({"label": e.label} if e.label is not None else {}),
            }
            for e in graph.edges
        ],
    }


__all__ = ["graph_to_json", "json_to_graph"]
