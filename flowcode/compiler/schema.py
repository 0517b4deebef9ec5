"""
flowcode Compiler — Graph JSON Schema + Validator
=================================================
The wire format the flowchart editor produces (React Flow shape):

    {
      "nodes": [
        {
          "id":   "process-1a2b3c4d",             // str, required
          "type": "process",                      // str, required
          "data": { "stmt": "total = total + i" } // dict, optional
        }
      ],
      "edges": [
        {
          "id":           "e1",                   // str, optional
          "source":       "decision-9f",          // str, required
          "target":       "process-1a2b3c4d",     // str, required
          "sourceHandle": "t",                    // port tag, optional
          "label":        "yes"                   // ignored by the compiler
        }
      ]
    }

Node types and their payload fields
-----------------------------------
  start / end        ─ markers, no payload
  terminator         ─ editor marker; data.title "start" | "end"
  return             ─ data.value
  note / comment     ─ data.text
  process            ─ data.stmt
  input              ─ data.vars (comma-separated), data.cast float|int|str|raw
  output             ─ data.value
  io                 ─ editor I/O box; data.kind "Input" | "Output", data.vars / data.expr
  call               ─ data.name, data.args (comma-separated), data.assignTo
  decision           ─ data.cond; edges on ports "t" / "f"
  loop               ─ data.kind for|while; for: data.var/start/end/step;
                       while: data.cond; edges on ports "body" / "exit" (or "next")

Duplicate node ids and edges that reference missing nodes are tolerated:
the compiler reports them inline instead of rejecting the graph.
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Union


# ── Known types ───────────────────────────────────────────────────────────────

KNOWN_NODE_TYPES: frozenset[str] = frozenset({
    "start",
    "end",
    "return",
    "note",
    "process",
    "input",
    "output",
    "call",
    "decision",
    "loop",
    # editor aliases
    "terminator",
    "io",
    "comment",
})


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when graph JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a parsed graph JSON dict.

    Args:
        data:   A pre-parsed dict (result of json.load / json.loads).
        strict: When True, raise SchemaError for unknown node types.
                When False (default), unknown types produce a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "graph JSON must be a JSON object at the top level")
    _require_keys(data, ["nodes", "edges"], "graph root")
    _require(isinstance(data["nodes"], list), "nodes must be a list")
    _require(isinstance(data["edges"], list), "edges must be a list")

    for i, node in enumerate(data["nodes"]):
        ctx = f"nodes[{i}]"
        _require(isinstance(node, dict), f"{ctx}: each node must be a JSON object")
        _require_keys(node, ["id", "type"], ctx)
        _require(isinstance(node["id"], str), f"{ctx}.id must be a string")
        _require(isinstance(node["type"], str), f"{ctx}.type must be a string")

        if node.get("data") is not None:
            _require(isinstance(node["data"], dict), f"{ctx}.data must be an object")

        type_name = node["type"]
        if type_name not in KNOWN_NODE_TYPES:
            msg = f"{ctx}: unknown node type '{type_name}'"
            if strict:
                raise SchemaError(msg)
            warnings.warn(msg + " (compiles to a placeholder comment)", stacklevel=3)

    for i, edge in enumerate(data["edges"]):
        ctx = f"edges[{i}]"
        _require(isinstance(edge, dict), f"{ctx}: each edge must be a JSON object")
        _require_keys(edge, ["source", "target"], ctx)
        for key in ("source", "target"):
            _require(isinstance(edge[key], str), f"{ctx}.{key} must be a string")
        handle = edge.get("sourceHandle")
        _require(handle is None or isinstance(handle, str), f"{ctx}.sourceHandle must be a string or null")


def load_file(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and validate a graph JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the graph structure is invalid.
    """
    data = load_file(path)
    validate(data, strict=strict)
    return data


__all__ = ["KNOWN_NODE_TYPES", "SchemaError", "load_file", "validate", "validate_file"]
