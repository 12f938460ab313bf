"""Engine module - resolves status and edges over cached layout geometry."""

from .edges import build_edges, curve_path, edge_status
from .engine import GeometryCache, GraphEngine

__all__ = ["GeometryCache", "GraphEngine", "build_edges", "curve_path", "edge_status"]
