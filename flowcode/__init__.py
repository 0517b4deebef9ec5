"""
flowcode
========
Compiles flowchart graphs (start/end markers, statements, decisions, loops,
I/O and calls) into structured Python source.

    from flowcode.compiler import compile_graph, compile_json

    source = compile_json("flow.json")
"""

__version__ = "0.3.0"
