from __future__ import annotations

import math
from dataclasses import dataclass

from skilltree.core.errors import LayoutError
from skilltree.core.model import PositionedItem


@dataclass(frozen=True)
class LayoutResult:
    positions: tuple[PositionedItem, ...]
    height: float


def require_positive_width(width: float) -> None:
    ok = isinstance(width, (int, float)) and not isinstance(width, bool)
    if not ok or not math.isfinite(width) or width <= 0:
        raise LayoutError(
            code="E_LAYOUT_WIDTH",
            message=f"container width must be a positive number, got {width!r}",
            path="width",
        )


def require_settings(
    config: object, *, positive: tuple[str, ...], non_negative: tuple[str, ...]
) -> None:
    """Reject strategy settings that would collapse the grid step to zero or below."""
    for name in positive + non_negative:
        value = getattr(config, name)
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok and math.isfinite(value) and (value > 0 if name in positive else value >= 0):
            continue
        kind = "positive" if name in positive else "non-negative"
        raise LayoutError(
            code="E_LAYOUT_CONFIG",
            message=f"{type(config).__name__}.{name} must be a {kind} number, got {value!r}",
            path=name,
        )
