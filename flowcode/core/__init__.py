from .Types import CastMode, LoopKind, NodeKind
from .GraphPrimitives import Edge, Graph, Node

__all__ = ["CastMode", "Edge", "Graph", "LoopKind", "Node", "NodeKind"]
