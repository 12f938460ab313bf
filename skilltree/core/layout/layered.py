"""
Layered layout (simplified Sugiyama) for prerequisite graphs.

1. Layer assignment (longest path over in-plan prerequisites)
2. Grouping by layer, keeping input order inside a layer
3. Row wrapping to the number of columns the container fits
4. Horizontal centering of every row
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence

from loguru import logger

from skilltree.core.layout.types import (
    LayoutResult,
    require_positive_width,
    require_settings,
)
from skilltree.core.model import Item, PositionedItem


@dataclass(frozen=True)
class LayeredLayout:
    node_width: float = 240
    node_height: float = 100
    gap_x: float = 30
    gap_y: float = 80
    margin: float = 40

    def __post_init__(self) -> None:
        require_settings(
            self,
            positive=("node_width", "node_height"),
            non_negative=("gap_x", "gap_y", "margin"),
        )


def layered_layout(config: LayeredLayout, items: Sequence[Item], width: float) -> LayoutResult:
    """Place items in horizontal bands by dependency depth.

    Every level starts on a new row; levels wider than the container wrap onto
    extra rows. Height is the running y after the last row (0 for no items).
    """
    require_positive_width(width)
    cols = max(1, math.floor((width - config.margin) / (config.node_width + config.gap_x)))

    depths = compute_depths(items)
    levels: Dict[int, List[Item]] = defaultdict(list)
    for item in items:
        levels[depths.get(item.id, 0)].append(item)

    positions: List[PositionedItem] = []
    current_y: float = 0
    for depth in sorted(levels):
        for row in _wrap(levels[depth], cols):
            row_width = len(row) * config.node_width + (len(row) - 1) * config.gap_x
            start_x = (width - row_width) / 2
            for idx, item in enumerate(row):
                positions.append(
                    PositionedItem(
                        item=item,
                        x=start_x + idx * (config.node_width + config.gap_x),
                        y=current_y,
                        width=config.node_width,
                        height=config.node_height,
                    )
                )
            current_y += config.node_height + config.gap_y

    return LayoutResult(positions=tuple(positions), height=current_y)


# ---------------------------------------------------------------------------
# Layer assignment
# ---------------------------------------------------------------------------

def compute_depths(items: Sequence[Item]) -> Dict[str, int]:
    """Longest prerequisite chain per item id.

    depth = 0 without in-plan prerequisites, else 1 + max(depth of prerequisites).
    A prerequisite that is already on the current traversal path (a cycle)
    contributes 0 instead of being followed, so cyclic plans still terminate.
    """
    prereqs_by_id: Dict[str, tuple[str, ...]] = {}
    for item in items:
        prereqs_by_id.setdefault(item.id, item.prereqs)

    depths: Dict[str, int] = {}
    for item in items:
        if item.id not in depths:
            _resolve_depth(item.id, prereqs_by_id, depths)
    return depths


def _resolve_depth(
    root: str, prereqs_by_id: Dict[str, tuple[str, ...]], depths: Dict[str, int]
) -> None:
    # Iterative DFS; each frame is [id, pending prerequisites, best depth seen].
    def in_plan(nid: str) -> List[str]:
        return [p for p in prereqs_by_id.get(nid, ()) if p in prereqs_by_id]

    on_path = {root}
    stack: List[list] = [[root, iter(in_plan(root)), -1]]
    while stack:
        frame = stack[-1]
        for pid in frame[1]:
            if pid in depths:
                frame[2] = max(frame[2], depths[pid])
            elif pid in on_path:
                logger.debug("cycle through {} while resolving {}", pid, frame[0])
                frame[2] = max(frame[2], 0)
            else:
                on_path.add(pid)
                stack.append([pid, iter(in_plan(pid)), -1])
                break
        else:
            stack.pop()
            on_path.discard(frame[0])
            depth = frame[2] + 1
            depths[frame[0]] = depth
            if stack:
                stack[-1][2] = max(stack[-1][2], depth)


def _wrap(level: List[Item], cols: int) -> List[List[Item]]:
    return [level[i : i + cols] for i in range(0, len(level), cols)]
