"""Layout strategies - place plan items on a canvas of a given width."""

from typing import Any, Callable, Dict, Optional, Sequence, Union

from skilltree.core.errors import LayoutError
from skilltree.core.layout.grid import GridLayout, grid_layout
from skilltree.core.layout.layered import LayeredLayout, compute_depths, layered_layout
from skilltree.core.layout.layout_config import LAYOUT_KINDS, merged_layouts
from skilltree.core.layout.types import LayoutResult
from skilltree.core.model import Item


LayoutStrategy = Union[GridLayout, LayeredLayout]

_LAYOUT_FUNCS: Dict[type, Callable[[Any, Sequence[Item], float], LayoutResult]] = {
    GridLayout: grid_layout,
    LayeredLayout: layered_layout,
}


def run_layout(strategy: LayoutStrategy, items: Sequence[Item], width: float) -> LayoutResult:
    """Dispatch to the transform function of the given strategy variant."""
    func = _LAYOUT_FUNCS.get(type(strategy))
    if func is None:
        raise LayoutError(
            code="E_LAYOUT_UNKNOWN",
            message=f"unsupported layout strategy: {type(strategy).__name__}",
            path="strategy",
        )
    return func(strategy, items, width)


def strategy_from_name(
    name: str, presets: Optional[Dict[str, Dict[str, Any]]] = None
) -> LayoutStrategy:
    """Build a strategy from a named preset (defaults merged with ``presets``)."""
    available = presets if presets is not None else merged_layouts()
    preset = available.get(name)
    if preset is None:
        raise LayoutError(
            code="E_LAYOUT_UNKNOWN",
            message=f"unknown layout: {name} (choose one of: {', '.join(sorted(available))})",
            path="layout",
        )
    settings = {k: v for k, v in preset.items() if k != "kind"}
    return LAYOUT_KINDS[preset["kind"]](**settings)


__all__ = [
    "GridLayout",
    "LayeredLayout",
    "LayoutResult",
    "LayoutStrategy",
    "compute_depths",
    "grid_layout",
    "layered_layout",
    "run_layout",
    "strategy_from_name",
]
