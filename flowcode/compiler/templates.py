"""
flowcode Compiler — Node Code Templates
=======================================
One NodeTemplate per NodeKind.  A template is a pure function of a node and
the writer's indentation; it never looks at other nodes except to pick its
own continuation.

  emit_inline(node, writer) -> bool
      Writes this node's statements at the writer's current indent.
      Returns True when the emitted text uses the math module.

  continuation(node, index) -> Optional[str]
      The id traversal moves to next.  Defaults to the edge selector's
      "next" choice; terminal kinds return None.

Structured kinds (Decision, Loop) only supply their header text here:

  DecisionTemplate.condition(node)     → the normalised if-condition
  LoopTemplate.header(node)            → "for ... in range(...):" / "while ...:"

Branch and body recursion lives in emitter.BlockEmitter.

Adding a new node kind
----------------------
1. Add the kind to core.Types.NodeKind.
2. Subclass NodeTemplate and override the hooks you need.
3. Register: TEMPLATE_REGISTRY[NodeKind.MY_KIND] = MyTemplate()

Kinds without a registered template use DefaultTemplate, which writes a
placeholder comment and carries on.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple, TYPE_CHECKING

from flowcode.core.GraphPrimitives import Node
from flowcode.core.Types import CastMode, LoopKind, NodeKind

from .normalize import normalize_condition, normalize_expr, split_csv, uses_math

if TYPE_CHECKING:
    from .index import GraphIndex


# ── Code writer ───────────────────────────────────────────────────────────────

class CodeWriter:
    """Simple indented string accumulator."""

    def __init__(self, indent: int = 0):
        self._lines: List[str] = []
        self._indent = indent

    @property
    def indent(self) -> int:
        return self._indent

    def writeln(self, line: str = "") -> "CodeWriter":
        if line:
            self._lines.append("    " * self._indent + line)
        else:
            self._lines.append("")
        return self

    def comment(self, text: str) -> "CodeWriter":
        return self.writeln(f"# {text}" if text else "#")

    def push(self) -> "CodeWriter":
        self._indent += 1
        return self

    def pop(self) -> "CodeWriter":
        self._indent = max(0, self._indent - 1)
        return self

    def extend(self, lines: List[str]) -> "CodeWriter":
        for line in lines:
            self.writeln(line)
        return self

    def append_raw(self, lines: List[str]) -> "CodeWriter":
        """Append lines that are already indented (nested block output)."""
        self._lines.extend(lines)
        return self

    def lines(self) -> List[str]:
        return self._lines


# ── Base template ─────────────────────────────────────────────────────────────

class NodeTemplate:
    """
    Base class — subclass and override the hooks you need.
    All hooks have safe default implementations.
    """

    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        return False

    def continuation(self, node: Node, index: "GraphIndex") -> Optional[str]:
        return index.select_next(node.id)


# ── Start / End / Return ──────────────────────────────────────────────────────

class StartTemplate(NodeTemplate):
    """Entry marker: no code, flow continues."""


class EndTemplate(NodeTemplate):
    """Terminal marker: no code, no continuation."""

    def continuation(self, node: Node, index: "GraphIndex") -> Optional[str]:
        return None


class ReturnTemplate(NodeTemplate):
    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        value = node.text("value").strip()
        if not value:
            writer.writeln("return")
            return False
        expr = normalize_expr(value)
        writer.writeln(f"return {expr}")
        return uses_math(expr)

    def continuation(self, node: Node, index: "GraphIndex") -> Optional[str]:
        return None


# ── Note ──────────────────────────────────────────────────────────────────────

class NoteTemplate(NodeTemplate):
    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        text = node.text("text").strip()
        if not text:
            writer.comment("")
            return False
        for line in text.splitlines():
            writer.comment(line.strip())
        return False


# ── Process ───────────────────────────────────────────────────────────────────

class ProcessTemplate(NodeTemplate):
    """A free-form statement; blank boxes become `pass`."""

    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        stmt = normalize_expr(node.text("stmt")) or "pass"
        writer.extend(stmt.splitlines())
        return uses_math(stmt)


# ── Input / Output ────────────────────────────────────────────────────────────

class InputTemplate(NodeTemplate):
    """One prompt-and-read statement per comma-separated variable name."""

    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        names = split_csv(node.text("vars"))
        if not names:
            writer.writeln("pass")
            return False

        cast = CastMode.parse(node.data.get("cast"))
        for name in names:
            read = f'input("{name}: ")'
            if cast == CastMode.RAW:
                writer.writeln(f"{name} = {read}")
            else:
                writer.writeln(f"{name} = {cast.value}({read})")
        return False


class OutputTemplate(NodeTemplate):
    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        expr = normalize_expr(node.text("value"))
        writer.writeln(f"print({expr})")
        return uses_math(expr)


# ── Call ──────────────────────────────────────────────────────────────────────

class CallTemplate(NodeTemplate):
    """`callee(args)` or `target = callee(args)`."""

    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        name = node.text("name").strip()
        if not name:
            writer.comment(f"[call node {node.id} has no callee]")
            return False

        args = [normalize_expr(arg) for arg in split_csv(node.text("args"))]
        expr = f"{name}({', '.join(args)})"

        target = node.text("assignTo").strip()
        writer.writeln(f"{target} = {expr}" if target else expr)
        return any(uses_math(arg) for arg in args)


# ── Decision ──────────────────────────────────────────────────────────────────

class DecisionTemplate(NodeTemplate):
    def condition(self, node: Node) -> Tuple[str, bool]:
        cond = normalize_condition(node.text("cond")) or "False"
        return cond, uses_math(cond)


# ── Loop ──────────────────────────────────────────────────────────────────────

_NEGATIVE_NUMBER = re.compile(r"^\(?\s*-\s*\d+(\.\d+)?\s*\)?$")


class LoopTemplate(NodeTemplate):
    """
    for:    for <var> in range(<start>, (<end>) + 1[, <step>]):
            The end bound is inclusive ("i = 1..n").  A literal negative step
            counts down, so the bound moves one unit the other way.
    while:  while <cond>:   (defaults to `while True:`)
    """

    def header(self, node: Node) -> Tuple[str, bool]:
        if LoopKind.parse(node.data.get("kind")) == LoopKind.WHILE:
            cond = normalize_condition(node.text("cond")) or "True"
            return f"while {cond}:", uses_math(cond)

        var = node.text("var").strip() or "i"
        start = normalize_expr(node.text("start")) or "0"
        end = normalize_expr(node.text("end")) or "n"
        step = normalize_expr(node.text("step")) or "1"

        if _NEGATIVE_NUMBER.match(step):
            bound = f"({end}) - 1"
        else:
            bound = f"({end}) + 1"

        if step == "1":
            head = f"for {var} in range({start}, {bound}):"
        else:
            head = f"for {var} in range({start}, {bound}, {step}):"
        return head, any(uses_math(part) for part in (start, end, step))


# ── Default (unrecognised kind) ───────────────────────────────────────────────

class DefaultTemplate(NodeTemplate):
    """Fallback for unregistered kinds — a placeholder comment, then best-effort next."""

    def emit_inline(self, node: Node, writer: CodeWriter) -> bool:
        writer.comment(f"[unhandled node type: {node.type_name}]")
        return False


# ── Registry ──────────────────────────────────────────────────────────────────

TEMPLATE_REGISTRY: dict[NodeKind, NodeTemplate] = {
    NodeKind.START:    StartTemplate(),
    NodeKind.END:      EndTemplate(),
    NodeKind.RETURN:   ReturnTemplate(),
    NodeKind.NOTE:     NoteTemplate(),
    NodeKind.PROCESS:  ProcessTemplate(),
    NodeKind.INPUT:    InputTemplate(),
    NodeKind.OUTPUT:   OutputTemplate(),
    NodeKind.CALL:     CallTemplate(),
    NodeKind.DECISION: DecisionTemplate(),
    NodeKind.LOOP:     LoopTemplate(),
}

_DEFAULT_TEMPLATE = DefaultTemplate()


def get_template(kind: NodeKind) -> NodeTemplate:
    return TEMPLATE_REGISTRY.get(kind, _DEFAULT_TEMPLATE)
