"""
flowcode Compiler — Expression Normaliser
=========================================
Pure text rewrites that turn what people type into flowchart boxes into
valid Python.  These are the only target-syntax lexical decisions in the
compiler; traversal never inspects expression text.

normalize_expr
    trim, sqrt(...) → math.sqrt(...), caret ^ → **

normalize_condition
    trim, ≤ ≥ ≠ → <= >= !=, lone = → ==, then normalize_expr
"""

from __future__ import annotations

import re
from typing import List

# `sqrt(` not already qualified (math.sqrt, np.sqrt) and not part of a longer name.
_SQRT_CALL = re.compile(r"(?<![\w.])sqrt\s*\(")
_MATH_QUALIFIED = re.compile(r"\bmath\.")

# A single "=" that is not part of <=, >=, !=, ==.
_LONE_EQUALS = re.compile(r"(?<![<>=!])=(?!=)")

_UNICODE_COMPARISONS = (
    ("≤", "<="),
    ("≥", ">="),
    ("≠", "!="),
)


def normalize_expr(expr: str) -> str:
    text = (expr or "").strip()
    text = _SQRT_CALL.sub("math.sqrt(", text)
    text = text.replace("^", "**")
    return text


def normalize_condition(cond: str) -> str:
    text = (cond or "").strip()
    for symbol, ascii_op in _UNICODE_COMPARISONS:
        text = text.replace(symbol, ascii_op)
    text = _LONE_EQUALS.sub("==", text)
    return normalize_expr(text)


def uses_math(text: str) -> bool:
    """True when `text` calls the sqrt helper or any math.* name."""
    if not text:
        return False
    return bool(_SQRT_CALL.search(text) or _MATH_QUALIFIED.search(text))


def split_csv(text: str) -> List[str]:
    return [part.strip() for part in (text or "").split(",") if part.strip()]


__all__ = ["normalize_condition", "normalize_expr", "split_csv", "uses_math"]
