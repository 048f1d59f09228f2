"""Layout module - computes the builder diagram for a test plan."""

from .engine import (
    CLEANUP_DIVIDER_ID,
    END_NODE_ID,
    START_NODE_ID,
    compute_builder_layout,
    task_node_id,
    zone_id,
)
from .models import DropTarget, LayoutEdge, LayoutNode, LayoutResult, LayoutSettings

__all__ = [
    "compute_builder_layout",
    "task_node_id",
    "zone_id",
    "START_NODE_ID",
    "END_NODE_ID",
    "CLEANUP_DIVIDER_ID",
    "DropTarget",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "LayoutSettings",
]
