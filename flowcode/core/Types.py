from enum import Enum


class NodeKind(Enum):
    START = "start"
    END = "end"
    RETURN = "return"
    NOTE = "note"
    PROCESS = "process"
    INPUT = "input"
    OUTPUT = "output"
    CALL = "call"
    DECISION = "decision"
    LOOP = "loop"
    UNRECOGNIZED = "unrecognized"

    @staticmethod
    def from_type_name(type_name: str) -> "NodeKind":
        key = str(type_name or "").strip().lower()
        for kind in NodeKind:
            if kind.value == key:
                return kind
        return NodeKind.UNRECOGNIZED

    def is_terminal(self) -> bool:
        return self in (NodeKind.END, NodeKind.RETURN)


class CastMode(Enum):
    FLOAT = "float"
    INT = "int"
    STR = "str"
    RAW = "raw"

    @staticmethod
    def parse(value, default: "CastMode" = None) -> "CastMode":
        # Unknown cast names fall back to float, the editor default.
        key = str(value or "").strip().lower()
        for mode in CastMode:
            if mode.value == key:
                return mode
        return default or CastMode.FLOAT


class LoopKind(Enum):
    FOR = "for"
    WHILE = "while"

    @staticmethod
    def parse(value) -> "LoopKind":
        key = str(value or "").strip().lower()
        return LoopKind.WHILE if key == LoopKind.WHILE.value else LoopKind.FOR


# Port tags on outgoing edges.  An edge with no tag is plain sequential flow.
PORT_TRUE = "t"
PORT_FALSE = "f"
PORT_BODY = "body"
PORT_EXIT = "exit"
PORT_NEXT = "next"
