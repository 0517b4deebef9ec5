"""
flowcode Compiler — Python Source Emitter
=========================================
Walks a Graph and reconstructs structured control flow from it.

Output structure
----------------
    import math                       # only when a node uses the math helper

    def program():
        <emitted body>


    if __name__ == "__main__":
        program()

Block emission
--------------
BlockEmitter.emit_block(start_id, indent, stop_set) follows the "next" chain
from `start_id` until the chain ends, reaches an id in `stop_set`, or the
step cap is hit.  Each step emits one node through its template:

    Decision  — branch starts on ports "t" / "f"; both branches are emitted
                at indent + 1 with the merge point added to their stop set,
                then traversal resumes at the merge point.
    Loop      — body start on port "body", emitted at indent + 1 with the
                loop's own id in the stop set (the back-edge is structural);
                traversal resumes at port "exit" (or "next").
    others    — see templates.py.

A visit guard keyed by (node id, indent) stops accidental cycles.  The same
node reached at a different indent (e.g. from both branches of a decision
that never merge) is a legitimate repeat, not a cycle.

Decisions and Loops that are still open (their branches or body are being
emitted) are tracked as well.  Reaching an open one again, as in
A → D, D.t → A, is a cycle even though the indent has grown, so it is
reported rather than recursed into.  Nesting deeper than MAX_DEPTH indent
levels is cut off with a diagnostic too.

No exceptions are raised: every structural problem becomes a comment in the
output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Set, Tuple

from flowcode.core.GraphPrimitives import Graph, Node
from flowcode.core.Types import (
    NodeKind,
    PORT_BODY,
    PORT_EXIT,
    PORT_FALSE,
    PORT_NEXT,
    PORT_TRUE,
)

from .index import GraphIndex
from .normalize import uses_math
from .reachability import resolve_merge
from .templates import CodeWriter, DecisionTemplate, LoopTemplate, get_template

logger = logging.getLogger(__name__)

MAX_STEPS = 2000
MAX_DEPTH = 64      # CPython refuses more than 100 indentation levels
ENTRY_NAME = "program"
NO_START_DIAGNOSTIC = "# No Start node found"

# Free-text payload fields scanned for math usage by the assembler.
_MATH_SCAN_FIELDS = ("stmt", "cond", "value", "args", "start", "end", "step")


# ── Emission result ───────────────────────────────────────────────────────────

@dataclass
class CompilationResult:
    lines: List[str] = field(default_factory=list)   # already indented
    next_id: Optional[str] = None
    needs_math: bool = False

    @property
    def code(self) -> str:
        return "\n".join(self.lines)

    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)


def _diagnostic(text: str, indent: int) -> List[str]:
    return CodeWriter(indent).comment(text).lines()


# ── Block emitter ─────────────────────────────────────────────────────────────

class BlockEmitter:
    def __init__(self, index: GraphIndex, max_steps: int = MAX_STEPS, max_depth: int = MAX_DEPTH):
        self.index = index
        self.max_steps = max_steps
        self.max_depth = max_depth
        self._visited: Set[Tuple[str, int]] = set()
        self._open: Set[str] = set()   # Decision / Loop ids whose blocks are being emitted

    def emit_block(
        self,
        start_id: Optional[str],
        indent: int,
        stop_set: AbstractSet[str],
    ) -> CompilationResult:
        block = CompilationResult()
        current = start_id
        steps = 0

        while current is not None and current not in stop_set and steps < self.max_steps:
            step = self.emit_one(current, indent, stop_set)
            if not step.is_empty():
                block.lines.extend(step.lines)
            block.needs_math = block.needs_math or step.needs_math
            current = step.next_id
            steps += 1

        if current is not None and current not in stop_set and steps >= self.max_steps:
            logger.warning(f"Step cap ({self.max_steps}) reached at '{current}'")
            block.lines.extend(_diagnostic("[stopped: too many steps]", indent))

        block.next_id = current
        return block

    def emit_one(self, node_id: str, indent: int, stop_set: AbstractSet[str]) -> CompilationResult:
        key = (node_id, indent)
        if key in self._visited:
            logger.warning(f"Cycle detected at '{node_id}' (indent {indent})")
            return CompilationResult(_diagnostic(f"[cycle detected at {node_id}]", indent))
        self._visited.add(key)

        node = self.index.get_node(node_id)
        if node is None:
            logger.warning(f"Edge points at missing node '{node_id}'")
            return CompilationResult(
                _diagnostic(f"[missing node {node_id}]", indent),
                next_id=self.index.select_next(node_id),
            )

        if indent > self.max_depth:
            logger.warning(f"Nesting cap ({self.max_depth}) reached at '{node_id}'")
            return CompilationResult(_diagnostic("[stopped: nesting too deep]", indent))

        logger.debug(f"Emitting '{node.id}' ({node.type_name}) at indent {indent}")

        if node.kind in (NodeKind.DECISION, NodeKind.LOOP):
            if node.id in self._open:
                logger.warning(f"Cycle detected at '{node.id}': re-entered while its block is open")
                return CompilationResult(_diagnostic(f"[cycle detected at {node.id}]", indent))
            self._open.add(node.id)
            try:
                if node.kind == NodeKind.DECISION:
                    return self._emit_decision(node, indent, stop_set)
                return self._emit_loop(node, indent, stop_set)
            finally:
                self._open.discard(node.id)

        if node.kind == NodeKind.UNRECOGNIZED:
            logger.warning(f"Unrecognised node type '{node.type_name}' on '{node.id}'")

        template = get_template(node.kind)
        writer = CodeWriter(indent)
        needs_math = template.emit_inline(node, writer)
        return CompilationResult(
            writer.lines(),
            next_id=template.continuation(node, self.index),
            needs_math=needs_math,
        )

    # ── Structured kinds ──────────────────────────────────────────────────

    def _emit_nested(self, start_id: Optional[str], indent: int, stop_set: AbstractSet[str]) -> CompilationResult:
        nested = self.emit_block(start_id, indent, stop_set)
        if nested.is_empty():
            nested.lines = CodeWriter(indent).writeln("pass").lines()
        return nested

    def _emit_decision(self, node: Node, indent: int, stop_set: AbstractSet[str]) -> CompilationResult:
        template: DecisionTemplate = get_template(NodeKind.DECISION)
        cond, needs_math = template.condition(node)

        then_start = self.index.by_port(node.id, PORT_TRUE)
        else_start = self.index.by_port(node.id, PORT_FALSE)
        merge = resolve_merge(self.index, then_start, else_start, stop_set)

        branch_stop = frozenset(stop_set) | {merge} if merge else frozenset(stop_set)
        then_block = self._emit_nested(then_start, indent + 1, branch_stop)
        else_block = self._emit_nested(else_start, indent + 1, branch_stop)

        writer = CodeWriter(indent)
        writer.writeln(f"if {cond}:")
        writer.append_raw(then_block.lines)
        writer.writeln("else:")
        writer.append_raw(else_block.lines)

        return CompilationResult(
            writer.lines(),
            next_id=merge,
            needs_math=needs_math or then_block.needs_math or else_block.needs_math,
        )

    def _emit_loop(self, node: Node, indent: int, stop_set: AbstractSet[str]) -> CompilationResult:
        template: LoopTemplate = get_template(NodeKind.LOOP)
        head, needs_math = template.header(node)

        body_start = self.index.by_port(node.id, PORT_BODY)
        after_loop = self.index.by_port(node.id, PORT_EXIT) or self.index.by_port(node.id, PORT_NEXT)

        body = self._emit_nested(body_start, indent + 1, frozenset(stop_set) | {node.id})

        writer = CodeWriter(indent)
        writer.writeln(head)
        writer.append_raw(body.lines)

        return CompilationResult(
            writer.lines(),
            next_id=after_loop,
            needs_math=needs_math or body.needs_math,
        )


# ── Program assembly ──────────────────────────────────────────────────────────

def _scan_for_math(graph: Graph) -> bool:
    for node in graph.nodes:
        text = " ".join(node.text(name) for name in _MATH_SCAN_FIELDS)
        if uses_math(text):
            return True
    return False


def _header(needs_math: bool) -> List[str]:
    return ["import math", "", ""] if needs_math else []


def _program_function(body: CompilationResult, entry_name: str) -> List[str]:
    w = CodeWriter(indent=0)
    w.writeln(f"def {entry_name}():")
    if body.is_empty():
        w.push().writeln("pass").pop()
    else:
        w.append_raw(body.lines)
    return w.lines()


def _entrypoint(entry_name: str) -> List[str]:
    return [
        "",
        "",
        'if __name__ == "__main__":',
        f"    {entry_name}()",
    ]


def emit(graph: Graph, max_steps: int = MAX_STEPS, entry_name: str = ENTRY_NAME) -> str:
    starts = graph.starts()
    if not starts:
        logger.warning("Graph has no Start node")
        return NO_START_DIAGNOSTIC
    if len(starts) > 1:
        logger.warning(f"Graph has {len(starts)} Start nodes; using '{starts[0].id}'")

    index = GraphIndex(graph)
    body = BlockEmitter(index, max_steps=max_steps).emit_block(starts[0].id, 1, frozenset())

    needs_math = body.needs_math or _scan_for_math(graph)

    sections = [
        _header(needs_math),
        _program_function(body, entry_name),
        _entrypoint(entry_name),
    ]
    lines: List[str] = []
    for section in sections:
        lines.extend(section)
    return "\n".join(lines) + "\n"


__all__ = [
    "BlockEmitter",
    "CompilationResult",
    "ENTRY_NAME",
    "MAX_DEPTH",
    "MAX_STEPS",
    "NO_START_DIAGNOSTIC",
    "emit",
]
