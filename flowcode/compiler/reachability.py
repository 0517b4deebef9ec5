"""
flowcode Compiler — Reachability and Merge Points
=================================================
distances(index, start, stop_set)
    Breadth-first shortest edge-count distance from `start` to every node it
    reaches.  Ids in `stop_set` are recorded but never expanded.

resolve_merge(index, then_start, else_start, stop_set)
    The node where two decision branches reconverge: among ids reachable from
    both branch starts, the one minimising d_then + d_else.  Equal scores are
    broken by the lowest node id so the result never depends on traversal
    order.  None when either branch is absent or the branches never meet.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import AbstractSet, Dict, Optional

from .index import GraphIndex

logger = logging.getLogger(__name__)


def distances(index: GraphIndex, start: str, stop_set: AbstractSet[str]) -> Dict[str, int]:
    dist: Dict[str, int] = {start: 0}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current in stop_set:
            continue
        for edge in index.get_outgoing(current):
            if edge.target not in dist:
                dist[edge.target] = dist[current] + 1
                queue.append(edge.target)

    return dist


def resolve_merge(
    index: GraphIndex,
    then_start: Optional[str],
    else_start: Optional[str],
    stop_set: AbstractSet[str],
) -> Optional[str]:
    if not then_start or not else_start:
        return None

    from_then = distances(index, then_start, stop_set)
    from_else = distances(index, else_start, stop_set)

    best = None
    for node_id, d_then in from_then.items():
        d_else = from_else.get(node_id)
        if d_else is None:
            continue
        candidate = (d_then + d_else, node_id)
        if best is None or candidate < best:
            best = candidate

    if best is None:
        logger.debug(f"No merge point for branches '{then_start}' / '{else_start}'")
        return None

    logger.debug(f"Merge point for '{then_start}' / '{else_start}': '{best[1]}' (score {best[0]})")
    return best[1]


__all__ = ["distances", "resolve_merge"]
