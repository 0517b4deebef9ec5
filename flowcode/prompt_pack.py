"""
Prompt pack — the textual description of a flowchart that the remote code
generation service receives.

The generated program from that service is a sibling of compile_graph()'s
output: it is built from the same Graph but never feeds back into the
compiler.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from flowcode.core.GraphPrimitives import Graph

_NODE_GUIDE: List[str] = [
    "- start / end / terminator: flow markers (data.title)",
    "- process: a statement (data.stmt)",
    '- decision: condition only (data.cond), branches via handles true (id="t") / false (id="f")',
    '- loop: data.kind "for" (data.var, data.start, data.end inclusive, data.step) or '
    '"while" (data.cond); outputs: body (id="body"), exit (id="exit")',
    "- input / output / io: data.vars with data.cast, or data.value / data.expr",
    "- call: data.name, data.args (comma-separated), data.assignTo",
    "- return: data.value",
    "- note / comment: annotation (data.text) — for context only",
    "- definition: data.defKind function|class|struct|enum|interface with its fields",
    "- domain: preset-catalog node; data.templateKey, data.instanceName, data.paramValues",
]


def flow_payload(graph: Graph, language: str) -> Dict[str, Any]:
    return {
        "language": language,
        "flow": {
            "nodes": [
                {"id": n.id, "type": n.type_name, "data": dict(n.data)}
                for n in graph.nodes
            ],
            "edges": [
                {"source": e.source, "sourceHandle": e.port, "target": e.target}
                for e in graph.edges
            ],
        },
    }


def make_prompt_pack(graph: Graph, language: str = "python") -> str:
    lines = [
        "You are a code generator.",
        "You will receive a flowchart JSON (nodes + edges).",
        "Each node.type has meaning:",
        *_NODE_GUIDE,
        "",
        'Visibility codes: "+" = public, "-" = private, "#" = protected',
        "When data.parent references another node's name, implement inheritance.",
        "",
        "Return STRICT JSON with this schema:",
        '{"language": "...", "files":[{"path":"...", "content":"..."}], "notes":"..."}',
        "",
        "FLOWCHART_JSON:",
        json.dumps(flow_payload(graph, language), indent=2, ensure_ascii=False),
    ]
    return "\n".join(lines)


__all__ = ["flow_payload", "make_prompt_pack"]
