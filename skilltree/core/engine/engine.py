"""Graph engine: plan + progress in, render-ready GraphState out.

Geometry is the expensive part and is cached per (width, plan, strategy).
Status and edges are cheap and recomputed on every ``compute`` call, so
toggling progress never triggers a re-layout.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from loguru import logger

from skilltree.core.engine.edges import build_edges
from skilltree.core.layout import LayoutStrategy, run_layout
from skilltree.core.model import ComputedNode, GraphState, Plan, PositionedItem, Stats, Status
from skilltree.core.validate.validate_plan import validate_plan


@dataclass(frozen=True)
class GeometryCache:
    width: float
    plan_version: int
    strategy_version: int
    positions: tuple[PositionedItem, ...]
    height: float

    def key(self) -> tuple[float, int, int]:
        return (self.width, self.plan_version, self.strategy_version)


class GraphEngine:
    def __init__(self, strategy: LayoutStrategy) -> None:
        self._strategy = strategy
        self._plan: Optional[Plan] = None
        self._progress: set[str] = set()
        self._plan_version = 0
        self._strategy_version = 0
        self._cache: Optional[GeometryCache] = None

    @property
    def plan(self) -> Optional[Plan]:
        return self._plan

    @property
    def strategy(self) -> LayoutStrategy:
        return self._strategy

    def set_strategy(self, strategy: LayoutStrategy) -> None:
        """Swap the layout algorithm; the next ``compute`` re-lays out."""
        self._strategy = strategy
        self._strategy_version += 1
        self._cache = None
        logger.debug("layout strategy set to {}", type(strategy).__name__)

    # --- IO API ---

    def load_plan(self, plan: Union[Plan, Mapping[str, Any]]) -> None:
        """Replace the current plan.

        Raises PlanValidationError when ``problems`` is missing or not a list;
        the previous plan is kept in that case. Progress is never cleared.
        """
        loaded, errors = validate_plan(plan)
        if errors or loaded is None:
            raise errors[0]
        self._plan = loaded
        self._plan_version += 1
        self._cache = None
        logger.debug("loaded plan {!r} with {} problems", loaded.title, len(loaded.problems))

    def load_progress(self, ids: Iterable[str]) -> None:
        self._progress = set(ids)

    def toggle(self, problem_id: str) -> None:
        if problem_id in self._progress:
            self._progress.discard(problem_id)
        else:
            self._progress.add(problem_id)

    def reset_progress(self) -> None:
        self._progress.clear()

    def get_progress(self) -> list[str]:
        return list(self._progress)

    def is_completed(self, problem_id: str) -> bool:
        return problem_id in self._progress

    # --- CORE LOGIC ---

    def compute(self, container_width: float) -> Optional[GraphState]:
        if self._plan is None:
            return None

        # 1. Geometry, only when the cache does not match the current inputs.
        key = (container_width, self._plan_version, self._strategy_version)
        if self._cache is None or self._cache.key() != key:
            result = run_layout(self._strategy, self._plan.problems, container_width)
            self._cache = GeometryCache(
                width=container_width,
                plan_version=self._plan_version,
                strategy_version=self._strategy_version,
                positions=result.positions,
                height=result.height,
            )
            logger.debug(
                "layout computed for width={} ({} nodes)", container_width, len(result.positions)
            )
        else:
            logger.debug("layout cache hit for width={}", container_width)

        # 2. Status over the cached positions.
        plan_ids = self._plan.ids
        nodes = [
            ComputedNode(
                item=pos.item,
                x=pos.x,
                y=pos.y,
                width=pos.width,
                height=pos.height,
                status=self._resolve_status(pos.item.id, pos.item.prereqs, plan_ids),
            )
            for pos in self._cache.positions
        ]

        # 3. Edges depend on positions and statuses of this call.
        edges = build_edges(nodes)

        total = len(nodes)
        completed = len(self._progress)
        return GraphState(
            nodes=nodes,
            edges=edges,
            width=container_width,
            height=self._cache.height,
            stats=Stats(
                total=total,
                completed=completed,
                percent=math.floor(completed * 100 / total + 0.5) if total else 0,
            ),
        )

    def _resolve_status(
        self, problem_id: str, prereqs: Iterable[str], plan_ids: frozenset[str]
    ) -> Status:
        if problem_id in self._progress:
            return "completed"

        # Only prerequisites that exist in this plan can block an item.
        valid_parents = [pid for pid in prereqs if pid in plan_ids]
        if all(pid in self._progress for pid in valid_parents):
            return "available"
        return "locked"
