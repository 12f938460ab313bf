from __future__ import annotations

from typing import Sequence

from skilltree.core.model import ComputedEdge, ComputedNode, Status


def build_edges(nodes: Sequence[ComputedNode]) -> list[ComputedEdge]:
    """One edge per (in-plan prerequisite -> item) pair, in node order.

    Edge status follows the parent only: a completed parent means the path was
    travelled, an available parent means it is open.
    """
    by_id = {n.id: n for n in nodes}
    edges: list[ComputedEdge] = []
    for child in nodes:
        for pid in child.item.prereqs:
            parent = by_id.get(pid)
            if parent is None:
                continue
            edges.append(
                ComputedEdge(
                    id=f"{pid}-{child.id}",
                    from_id=pid,
                    to_id=child.id,
                    path=curve_path(parent, child),
                    status=edge_status(parent.status),
                )
            )
    return edges


def edge_status(parent_status: Status) -> Status:
    if parent_status == "completed":
        return "completed"
    if parent_status == "available":
        return "available"
    return "locked"


def curve_path(parent: ComputedNode, child: ComputedNode) -> str:
    """SVG cubic from the parent's bottom-center to the child's top-center."""
    start_x = parent.x + parent.width / 2
    start_y = parent.y + parent.height
    end_x = child.x + child.width / 2
    end_y = child.y
    mid_y = (start_y + end_y) / 2
    sx, sy, ex, ey, my = (_fmt(v) for v in (start_x, start_y, end_x, end_y, mid_y))
    return f"M {sx} {sy} C {sx} {my}, {ex} {my}, {ex} {ey}"


def _fmt(v: float) -> str:
    # Integral floats print without a trailing ".0" so paths stay compact.
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)
