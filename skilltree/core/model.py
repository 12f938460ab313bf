from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional


Status = Literal["locked", "available", "completed"]
Difficulty = Literal["Easy", "Medium", "Hard"]

DIFFICULTIES: tuple[str, ...] = ("Easy", "Medium", "Hard")

# Keys with a dedicated field on Item; everything else is carried in Item.extra.
_ITEM_KEYS = frozenset({"id", "title", "diff", "prereqs"})


@dataclass(frozen=True)
class Item:
    id: str
    title: Optional[str] = None
    diff: Optional[str] = None
    prereqs: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)
    # The problem object as loaded; output nodes are built from it unchanged.
    raw: Optional[Mapping[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Item":
        """Build an item from a raw problem object.

        Only the shape needed for layout and status is coerced. The original
        object is kept in ``raw`` so every field reaches the output as given.
        """
        nid = raw.get("id")
        title = raw.get("title")
        diff = raw.get("diff")
        prereqs_raw = raw.get("prereqs")
        prereqs: tuple[str, ...] = ()
        if isinstance(prereqs_raw, (list, tuple)):
            prereqs = tuple(p for p in prereqs_raw if isinstance(p, str))
        return cls(
            id=nid if isinstance(nid, str) else ("" if nid is None else str(nid)),
            title=title if isinstance(title, str) else None,
            diff=diff if isinstance(diff, str) else None,
            prereqs=prereqs,
            extra={k: v for k, v in raw.items() if k not in _ITEM_KEYS},
            raw=raw,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.raw is not None:
            return dict(self.raw)
        out: dict[str, Any] = dict(self.extra)
        out["id"] = self.id
        if self.title is not None:
            out["title"] = self.title
        if self.diff is not None:
            out["diff"] = self.diff
        if self.prereqs:
            out["prereqs"] = list(self.prereqs)
        return out


@dataclass(frozen=True)
class Plan:
    title: str
    problems: tuple[Item, ...]

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(p.id for p in self.problems)


@dataclass(frozen=True)
class PositionedItem:
    item: Item
    x: float
    y: float
    width: float
    height: float

    @property
    def id(self) -> str:
        return self.item.id


@dataclass(frozen=True)
class ComputedNode:
    item: Item
    x: float
    y: float
    width: float
    height: float
    status: Status

    @property
    def id(self) -> str:
        return self.item.id

    def to_dict(self) -> dict[str, Any]:
        out = self.item.to_dict()
        out.update(
            {
                "x": self.x,
                "y": self.y,
                "width": self.width,
                "height": self.height,
                "status": self.status,
            }
        )
        return out


@dataclass(frozen=True)
class ComputedEdge:
    id: str
    from_id: str
    to_id: str
    path: str
    status: Status

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
            "path": self.path,
            "status": self.status,
        }


@dataclass(frozen=True)
class Stats:
    total: int
    completed: int
    percent: int


@dataclass(frozen=True)
class GraphState:
    nodes: list[ComputedNode]
    edges: list[ComputedEdge]
    width: float
    height: float
    stats: Stats

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "width": self.width,
            "height": self.height,
            "stats": {
                "total": self.stats.total,
                "completed": self.stats.completed,
                "percent": self.stats.percent,
            },
        }
