"""Layout models.

The output of the layout engine: positioned nodes, edges between them, and
the drop targets a drag gesture can resolve to.
"""

from typing import Literal

from pydantic import BaseModel, Field

from plansmith.domain.task import ForestKind

from . import constants

NodeKind = Literal["task", "glue", "start", "end", "cleanup", "drop_zone", "lane_label", "divider"]


class LayoutSettings(BaseModel):
    """Sizes and spacing used by the layout engine."""

    node_width: float = constants.NODE_WIDTH
    node_height: float = constants.NODE_HEIGHT
    drop_zone_height: float = constants.DROP_ZONE_HEIGHT
    vertical_gap: float = constants.VERTICAL_GAP
    lane_gap: float = constants.LANE_GAP
    container_padding_x: float = constants.CONTAINER_PADDING_X
    container_padding_top: float = constants.CONTAINER_PADDING_TOP
    container_padding_bottom: float = constants.CONTAINER_PADDING_BOTTOM
    start_end_width: float = constants.START_END_WIDTH
    start_end_height: float = constants.START_END_HEIGHT
    empty_lane_width: float = constants.EMPTY_LANE_WIDTH
    phase_divider_width: float = constants.PHASE_DIVIDER_WIDTH
    phase_divider_height: float = constants.PHASE_DIVIDER_HEIGHT
    slot_divider_width: float = constants.SLOT_DIVIDER_WIDTH
    slot_label_height: float = constants.SLOT_LABEL_HEIGHT


class DropTarget(BaseModel):
    """Where a drop lands: a forest, a container (None for root) and a position.

    ``index`` addresses ordered children; ``slot_name`` addresses a named
    slot (its ``index`` is then the slot position).
    """

    forest: ForestKind
    parent_id: str | None = None
    index: int = 0
    slot_name: str | None = None

    model_config = {"frozen": True}


class LayoutNode(BaseModel):
    """A positioned diagram element.

    Coordinates are absolute, with the diagram centred on x = 0. Fields
    that do not apply to a node's kind keep their defaults.
    """

    id: str
    kind: NodeKind
    x: float
    y: float
    width: float
    height: float
    parent_id: str | None = None

    # task / glue
    task_id: str | None = None
    task_type: str | None = None
    title: str | None = None
    is_selected: bool = False
    is_cleanup: bool = False
    known_type: bool | None = None
    role_label: str | None = None
    child_count: int = 0
    is_concurrent: bool = False

    # drop_zone
    target: DropTarget | None = None
    disabled: bool = False

    # lane_label
    label: str | None = None

    model_config = {"frozen": True}

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


class LayoutEdge(BaseModel):
    """A connector between two layout nodes."""

    id: str
    source: str
    target: str
    variant: Literal["default", "sequential", "concurrent", "cleanup"] = "default"
    dashed: bool = False

    model_config = {"frozen": True}


class LayoutResult(BaseModel):
    """A complete diagram: nodes in emission order, edges, and overall size."""

    nodes: list[LayoutNode] = Field(default_factory=list)
    edges: list[LayoutEdge] = Field(default_factory=list)
    width: float = 0
    height: float = 0

    def node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def task_node(self, task_id: str) -> LayoutNode | None:
        """Return the card of a task (plain or glue)."""
        for node in self.nodes:
            if node.task_id == task_id and node.kind in ("task", "glue"):
                return node
        return None

    def drop_zones(self, include_disabled: bool = False) -> list[LayoutNode]:
        return [
            node
            for node in self.nodes
            if node.kind == "drop_zone" and (include_disabled or not node.disabled)
        ]

    def zone_for(self, target: DropTarget) -> LayoutNode | None:
        """Return the enabled drop zone carrying a target, if the diagram has one."""
        for zone in self.drop_zones():
            if zone.target == target:
                return zone
        return None
