"""
flowcode Compiler
=================
Compiles a flowchart Graph into a standalone Python program.

Pipeline:
    flow.json  →  [deserialiser]  →  Graph
    Graph      →  [index]         →  GraphIndex  (id → node, id → out-edges)
    GraphIndex →  [emitter]       →  Python source str

Public API
----------
    from flowcode.compiler import compile_graph, compile_json

    source = compile_json("flow.json")
    # or, from an already built Graph
    source = compile_graph(graph)

compile_graph never raises on structural problems: cycles, missing nodes,
unknown node types and runaway traversals become comments in the output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union

from flowcode.core.GraphPrimitives import Graph

from .deserialiser import json_to_graph
from .emitter import ENTRY_NAME, MAX_STEPS, emit
from .schema import load_file, validate


def compile_graph(
    graph: Graph,
    max_steps: int = MAX_STEPS,
    entry_name: str = ENTRY_NAME,
) -> str:
    """
    Compile a Graph into Python source.

    Args:
        graph:       Immutable graph snapshot.
        max_steps:   Per-block traversal cap.
        entry_name:  Name of the generated entry-point function.

    Returns:
        Complete Python source, or a single diagnostic line when the graph
        has no Start node.
    """
    return emit(graph, max_steps=max_steps, entry_name=entry_name)


def compile_json(
    source: Union[str, Path, Dict[str, Any]],
    strict: bool = False,
    max_steps: int = MAX_STEPS,
    entry_name: str = ENTRY_NAME,
) -> str:
    """
    Validate editor JSON (path or dict) and compile it.

    Raises:
        SchemaError: If the JSON structure is invalid.
    """
    if isinstance(source, (str, Path)):
        source = load_file(source)
    validate(source, strict=strict)
    return compile_graph(json_to_graph(source), max_steps=max_steps, entry_name=entry_name)


__all__ = ["compile_graph", "compile_json"]
