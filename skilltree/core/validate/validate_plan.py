from __future__ import annotations

from collections import Counter
from typing import Any, Mapping, Optional, cast

from loguru import logger

from skilltree.core.errors import PlanValidationError
from skilltree.core.model import DIFFICULTIES, Item, Plan


def validate_plan(raw: Any) -> tuple[Optional[Plan], list[PlanValidationError]]:
    """Shape-check a raw plan object and build a Plan from it.

    Only ``problems`` is checked (it must be present and list-shaped). Stricter
    rules live in the linter so that the engine accepts everything the tracker
    has historically accepted.

    Returns (plan, errors). Plan is None when errors exist.
    """

    if isinstance(raw, Plan):
        return raw, []

    file = None
    if isinstance(raw, Mapping):
        file = cast(Optional[str], raw.get("__file__"))

    problems = raw.get("problems") if isinstance(raw, Mapping) else None
    if not isinstance(problems, (list, tuple)):
        return None, [
            PlanValidationError(
                code="E_INVALID_PLAN",
                message="invalid plan: missing 'problems' array",
                file=file,
                path="problems",
            )
        ]

    items: list[Item] = []
    for i, entry in enumerate(problems):
        if not isinstance(entry, Mapping):
            logger.debug("skipping non-object problem at problems[{}]", i)
            continue
        items.append(Item.from_dict(entry))

    title = raw.get("title")
    plan = Plan(title=title if isinstance(title, str) else "", problems=tuple(items))
    return plan, []


def diff_counts(plan: Plan) -> Counter[str]:
    """Count problems per difficulty; missing or unknown tags count as 'unrated'."""
    return Counter(p.diff if p.diff in DIFFICULTIES else "unrated" for p in plan.problems)


def summarize_plan(plan: Plan) -> str:
    counts = diff_counts(plan)
    ordered: list[str] = [*DIFFICULTIES, "unrated"]
    parts = [f"{d}={counts.get(d, 0)}" for d in ordered]
    title = plan.title or "<untitled>"
    return f"OK: {len(plan.problems)} problems (" + ", ".join(parts) + f")\nTitle: {title}"

