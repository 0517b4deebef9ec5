"""
compile_from_json.py — CLI for the flowcode compiler
====================================================
Compiles a flowchart JSON file (editor export) into a standalone Python script.

Usage
-----
    flowcode-compile <flow.json> [options]
    python -m flowcode.compile_from_json <flow.json> [options]

Options
-------
    --out        <dir>   Output directory (default: compiled/)
    --print              Print the generated source to stdout instead of writing a file
    --strict             Treat unknown node types as errors (default: warnings only)
    --max-steps  <n>     Per-block traversal cap (default: 2000)
    --entry      <name>  Name of the generated entry-point function (default: program)
    --verbose            Log compiler decisions (merge points, cycles) to stderr

Examples
--------
    # Compile into compiled/sum_of_squares.py:
    flowcode-compile flows/sum_of_squares.json

    # Print the generated source without writing a file:
    flowcode-compile flows/sum_of_squares.json --print
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from flowcode.compiler import compile_graph
from flowcode.compiler.deserialiser import json_to_graph
from flowcode.compiler.emitter import ENTRY_NAME, MAX_STEPS
from flowcode.compiler.schema import SchemaError, validate_file


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="flowcode-compile",
        description="Compile a flowchart JSON graph to standalone Python.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="flow.json",
        help="Path to the flowchart JSON file to compile.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default="compiled",
        help="Output directory for the compiled .py file (default: compiled/).",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown node types as errors rather than warnings.",
    )
    p.add_argument(
        "--max-steps",
        type=int,
        default=MAX_STEPS,
        help=f"Per-block traversal cap (default: {MAX_STEPS}).",
    )
    p.add_argument(
        "--entry",
        default=ENTRY_NAME,
        help=f"Entry-point function name (default: {ENTRY_NAME}).",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Log compiler decisions to stderr.",
    )
    return p


def _graph_name_to_filename(graph_name: str) -> str:
    """Turn 'bubble-sort v2' → 'bubble_sort_v2.py'."""
    safe = graph_name.lower().replace("-", "_").replace(" ", "_")
    return f"{safe}.py"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate JSON ────────────────────────────────────────────────────────
    try:
        data = validate_file(json_path, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    # ── Compile ──────────────────────────────────────────────────────────────
    graph = json_to_graph(data)
    source = compile_graph(graph, max_steps=args.max_steps, entry_name=args.entry)

    if args.print_only:
        sys.stdout.write(source if source.endswith("\n") else source + "\n")
        return 0

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _graph_name_to_filename(data.get("name") or json_path.stem)
    out_path.write_text(source, encoding="utf-8")
    print(f"[ok] {json_path} → {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
