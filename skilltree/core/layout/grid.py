"""Fixed-cell grid packing.

Items are placed row-major in input order; dependencies are ignored.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from skilltree.core.layout.types import (
    LayoutResult,
    require_positive_width,
    require_settings,
)
from skilltree.core.model import Item, PositionedItem


@dataclass(frozen=True)
class GridLayout:
    cell_size: float = 200
    gap: float = 20

    def __post_init__(self) -> None:
        require_settings(self, positive=("cell_size",), non_negative=("gap",))


def grid_layout(config: GridLayout, items: Sequence[Item], width: float) -> LayoutResult:
    require_positive_width(width)
    step = config.cell_size + config.gap
    cols = max(1, math.floor(width / step))

    positions: list[PositionedItem] = []
    for i, item in enumerate(items):
        row, col = divmod(i, cols)
        positions.append(
            PositionedItem(
                item=item,
                x=col * step + config.gap,
                y=row * step + config.gap,
                width=config.cell_size,
                height=config.cell_size,
            )
        )

    rows = math.ceil(len(items) / cols)
    return LayoutResult(positions=tuple(positions), height=rows * step + config.gap)
