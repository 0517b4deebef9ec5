from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from .Types import NodeKind


class Edge(NamedTuple):
    source: str
    target: str

    # Named output socket ("t", "f", "body", "exit", ...).  None means plain flow.
    port: Optional[str] = None

    # Display only; the compiler never reads it.
    label: Optional[str] = None

    def __repr__(self):
        tag = f":{self.port}" if self.port else ""
        return f"Edge({self.source}{tag} -> {self.target})"


@dataclass(frozen=True)
class Node:
    id: str
    kind: NodeKind
    data: Dict[str, Any] = field(default_factory=dict, hash=False, compare=True)

    # Raw type string from the editor.  Kept so diagnostics can name types
    # the compiler does not recognise.
    type_name: str = ""

    def __post_init__(self):
        if not self.type_name:
            object.__setattr__(self, "type_name", self.kind.value)

    def text(self, key: str, default: str = "") -> str:
        """Payload field as a string; missing or None values give `default`."""
        value = self.data.get(key)
        if value is None:
            return default
        return str(value)

    def __repr__(self):
        return f"Node({self.id}, {self.type_name})"


@dataclass(frozen=True)
class Graph:
    """
    Immutable snapshot of a flowchart: a node collection plus an ordered edge
    sequence.  Edge order matters for tie-breaks between several untagged
    edges leaving the same node (first in list wins).
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    @classmethod
    def build(cls, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> "Graph":
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def starts(self) -> List[Node]:
        return [n for n in self.nodes if n.kind == NodeKind.START]

    def find_start(self) -> Optional[Node]:
        starts = self.starts()
        return starts[0] if starts else None
