"""
Builder diagram layout.

Turns the main and cleanup forests into positioned nodes, edges and drop
zones. Two passes:
  1) sizes bottom-up (memoised per task id)
  2) absolute positions top-down, emitting nodes in a fixed order

Every id in the output is derived from tree structure (task ids, forest,
container and position), so the same input always yields the same diagram.
"""

from dataclasses import dataclass
from typing import assert_never

from plansmith.domain.descriptors import DescriptorRegistry
from plansmith.domain.task import (
    TEST_HEADER_ID,
    ContainerKind,
    Forest,
    ForestKind,
    TaskNode,
    container_kind,
    get_slot_label,
    get_slot_names,
    is_concurrent,
    is_glue_task,
)

from .models import DropTarget, LayoutEdge, LayoutNode, LayoutResult, LayoutSettings, NodeKind

START_NODE_ID = "start"
END_NODE_ID = "end"
CLEANUP_DIVIDER_ID = "cleanup-divider"


@dataclass(frozen=True)
class _Size:
    width: float
    height: float


def task_node_id(task_id: str) -> str:
    return f"task:{task_id}"


def zone_id(target: DropTarget) -> str:
    """Structural id of the drop zone carrying a target."""
    parent = target.parent_id or "root"
    position = target.slot_name if target.slot_name is not None else str(target.index)
    return f"zone:{target.forest.value}:{parent}:{position}"


class _DiagramBuilder:
    def __init__(
        self,
        settings: LayoutSettings,
        descriptors: DescriptorRegistry | None,
        selected_task_id: str | None,
    ) -> None:
        self.s = settings
        self.descriptors = descriptors
        self.selected_task_id = selected_task_id
        self.nodes: list[LayoutNode] = []
        self.edges: list[LayoutEdge] = []
        self._sizes: dict[str, _Size] = {}

    # -------------------------------------------------------------------------
    # Pass 1: sizes
    # -------------------------------------------------------------------------

    def measure(self, task: TaskNode) -> _Size:
        cached = self._sizes.get(task.id)
        if cached is not None:
            return cached
        size = self._measure(task)
        self._sizes[task.id] = size
        return size

    def _measure(self, task: TaskNode) -> _Size:
        s = self.s
        kind = container_kind(task.task_type)
        if kind is ContainerKind.NONE:
            return _Size(s.node_width, s.node_height)

        empty_height = s.drop_zone_height + s.vertical_gap
        if kind is ContainerKind.ORDERED:
            sizes = [self.measure(child) for child in task.children]
            if not sizes:
                content = _Size(s.node_width, empty_height)
            elif is_concurrent(task.task_type):
                lanes_width = (
                    sum(size.width for size in sizes)
                    + len(sizes) * s.lane_gap
                    + s.empty_lane_width
                )
                tallest = max(size.height for size in sizes)
                content = _Size(
                    max(s.node_width, lanes_width),
                    2 * s.drop_zone_height + 2 * s.vertical_gap + tallest,
                )
            else:
                height = empty_height + sum(
                    size.height + 2 * s.vertical_gap + s.drop_zone_height for size in sizes
                )
                content = _Size(max(s.node_width, max(size.width for size in sizes)), height)
        elif kind is ContainerKind.SINGLE:
            if task.children:
                child = self.measure(task.children[0])
                content = _Size(max(s.node_width, child.width), child.height)
            else:
                content = _Size(s.node_width, empty_height)
        elif kind is ContainerKind.NAMED:
            lanes = self._slot_lane_sizes(task)
            separators = (len(lanes) - 1) * (2 * s.lane_gap + s.slot_divider_width)
            content = _Size(
                sum(lane.width for lane in lanes) + separators,
                s.slot_label_height + s.vertical_gap + max(lane.height for lane in lanes),
            )
        else:
            assert_never(kind)

        return _Size(
            2 * s.container_padding_x + content.width,
            s.container_padding_top + content.height + s.container_padding_bottom,
        )

    def _slot_lane_sizes(self, task: TaskNode) -> list[_Size]:
        sizes = []
        for slot_name in get_slot_names(task.task_type):
            child = task.named_children.get(slot_name)
            if child is None:
                sizes.append(_Size(self.s.node_width, self.s.node_height))
            else:
                sizes.append(self.measure(child))
        return sizes

    # -------------------------------------------------------------------------
    # Pass 2: positions
    # -------------------------------------------------------------------------

    def add_edge(self, source: str, target: str, variant: str = "default", dashed: bool = False) -> None:
        self.edges.append(
            LayoutEdge(
                id=f"edge:{source}->{target}",
                source=source,
                target=target,
                variant=variant,
                dashed=dashed,
            )
        )

    def add_zone(
        self,
        target: DropTarget,
        x: float,
        y: float,
        width: float,
        height: float | None = None,
        parent_node_id: str | None = None,
        disabled: bool = False,
        suffix: str = "",
    ) -> str:
        node_id = zone_id(target) + suffix
        self.nodes.append(
            LayoutNode(
                id=node_id,
                kind="drop_zone",
                x=x,
                y=y,
                width=width,
                height=self.s.drop_zone_height if height is None else height,
                parent_id=parent_node_id,
                is_cleanup=target.forest == ForestKind.CLEANUP,
                target=target,
                disabled=disabled,
            )
        )
        return node_id

    def place(
        self,
        task: TaskNode,
        x: float,
        y: float,
        forest: ForestKind,
        parent_node_id: str | None = None,
        role_label: str | None = None,
    ) -> str:
        """Emit a task card (and, for containers, everything inside it)."""
        size = self.measure(task)
        node_id = task_node_id(task.id)
        self.nodes.append(
            LayoutNode(
                id=node_id,
                kind="glue" if is_glue_task(task.task_type) else "task",
                x=x,
                y=y,
                width=size.width,
                height=size.height,
                parent_id=parent_node_id,
                task_id=task.id,
                task_type=task.task_type,
                title=task.title,
                is_selected=task.id == self.selected_task_id,
                is_cleanup=forest == ForestKind.CLEANUP,
                known_type=None if self.descriptors is None else task.task_type in self.descriptors,
                role_label=role_label,
                child_count=len(task.child_nodes()),
                is_concurrent=is_concurrent(task.task_type),
            )
        )

        kind = container_kind(task.task_type)
        if kind is ContainerKind.NONE:
            pass
        elif kind is ContainerKind.ORDERED:
            if not task.children:
                self._place_empty(task, x, y, forest, node_id)
            elif is_concurrent(task.task_type):
                self._place_lanes(task, x, y, forest, node_id)
            else:
                self._place_sequence(task, x, y, forest, node_id)
        elif kind is ContainerKind.SINGLE:
            if task.children:
                child = task.children[0]
                inner_width = size.width - 2 * self.s.container_padding_x
                child_x = x + self.s.container_padding_x + (inner_width - self.measure(child).width) / 2
                self.place(child, child_x, y + self.s.container_padding_top, forest, node_id)
            else:
                self._place_empty(task, x, y, forest, node_id)
        elif kind is ContainerKind.NAMED:
            self._place_slots(task, x, y, forest, node_id)
        else:
            assert_never(kind)
        return node_id

    def _place_empty(self, task: TaskNode, x: float, y: float, forest: ForestKind, node_id: str) -> None:
        s = self.s
        self.add_zone(
            DropTarget(forest=forest, parent_id=task.id, index=0),
            x + s.container_padding_x,
            y + s.container_padding_top,
            self.measure(task).width - 2 * s.container_padding_x,
            parent_node_id=node_id,
        )

    def _place_sequence(self, task: TaskNode, x: float, y: float, forest: ForestKind, node_id: str) -> None:
        s = self.s
        sizes = [self.measure(child) for child in task.children]
        column_width = max(size.width for size in sizes)
        inner_width = self.measure(task).width - 2 * s.container_padding_x
        column_x = x + s.container_padding_x + (inner_width - column_width) / 2

        current_y = y + s.container_padding_top
        prev = self.add_zone(
            DropTarget(forest=forest, parent_id=task.id, index=0),
            column_x, current_y, column_width, parent_node_id=node_id,
        )
        current_y += s.drop_zone_height + s.vertical_gap

        for i, (child, size) in enumerate(zip(task.children, sizes)):
            child_x = column_x + (column_width - size.width) / 2
            card = self.place(child, child_x, current_y, forest, node_id)
            self.add_edge(prev, card, "sequential")
            current_y += size.height + s.vertical_gap

            prev = self.add_zone(
                DropTarget(forest=forest, parent_id=task.id, index=i + 1),
                column_x, current_y, column_width, parent_node_id=node_id,
            )
            self.add_edge(card, prev, "sequential")
            current_y += s.drop_zone_height + s.vertical_gap

    def _place_lanes(self, task: TaskNode, x: float, y: float, forest: ForestKind, node_id: str) -> None:
        s = self.s
        sizes = [self.measure(child) for child in task.children]
        tallest = max(size.height for size in sizes)
        top = y + s.container_padding_top
        lane_x = x + s.container_padding_x

        for i, (child, size) in enumerate(zip(task.children, sizes)):
            head = self.add_zone(
                DropTarget(forest=forest, parent_id=task.id, index=i),
                lane_x, top, size.width, parent_node_id=node_id,
            )
            child_y = top + s.drop_zone_height + s.vertical_gap
            card = self.place(child, lane_x, child_y, forest, node_id)
            foot = self.add_zone(
                DropTarget(forest=forest, parent_id=task.id, index=i + 1),
                lane_x, child_y + size.height + s.vertical_gap, size.width,
                parent_node_id=node_id, disabled=True, suffix=f":lane-{i}-end",
            )
            self.add_edge(head, card, "concurrent")
            self.add_edge(card, foot, "concurrent")
            lane_x += size.width + s.lane_gap

        self.add_zone(
            DropTarget(forest=forest, parent_id=task.id, index=len(task.children)),
            lane_x, top, s.empty_lane_width,
            height=2 * s.drop_zone_height + 2 * s.vertical_gap + tallest,
            parent_node_id=node_id,
        )

    def _place_slots(self, task: TaskNode, x: float, y: float, forest: ForestKind, node_id: str) -> None:
        s = self.s
        lanes = self._slot_lane_sizes(task)
        tallest = max(lane.height for lane in lanes)
        top = y + s.container_padding_top
        body_y = top + s.slot_label_height + s.vertical_gap
        lane_x = x + s.container_padding_x
        slot_names = get_slot_names(task.task_type)

        for i, (slot_name, lane) in enumerate(zip(slot_names, lanes)):
            label = get_slot_label(task.task_type, slot_name)
            label_id = f"label:{task.id}:{slot_name}"
            self.nodes.append(
                LayoutNode(
                    id=label_id,
                    kind="lane_label",
                    x=lane_x,
                    y=top,
                    width=lane.width,
                    height=s.slot_label_height,
                    parent_id=node_id,
                    is_cleanup=forest == ForestKind.CLEANUP,
                    label=label,
                )
            )

            child = task.named_children.get(slot_name)
            if child is not None:
                card = self.place(child, lane_x, body_y, forest, node_id, role_label=label)
                self.add_edge(label_id, card, "concurrent")
            else:
                self.add_zone(
                    DropTarget(forest=forest, parent_id=task.id, index=i, slot_name=slot_name),
                    lane_x, body_y, lane.width, height=tallest, parent_node_id=node_id,
                )

            if i < len(slot_names) - 1:
                divider_x = lane_x + lane.width + s.lane_gap
                self.nodes.append(
                    LayoutNode(
                        id=f"divider:{task.id}:{i}",
                        kind="divider",
                        x=divider_x,
                        y=top,
                        width=s.slot_divider_width,
                        height=s.slot_label_height + s.vertical_gap + tallest,
                        parent_id=node_id,
                        is_cleanup=forest == ForestKind.CLEANUP,
                    )
                )
                lane_x = divider_x + s.slot_divider_width + s.lane_gap

    # -------------------------------------------------------------------------
    # Root level
    # -------------------------------------------------------------------------

    def place_forest(
        self,
        forest: Forest,
        kind: ForestKind,
        left: float,
        width: float,
        y: float,
        prev: str,
    ) -> tuple[float, str]:
        """Lay out one forest as a column of root tasks separated by zones.

        Returns:
            (y below the column, id of the last emitted zone)
        """
        s = self.s
        variant = "cleanup" if kind == ForestKind.CLEANUP else "default"

        zone = self.add_zone(DropTarget(forest=kind, index=0), left, y, width)
        self.add_edge(prev, zone, variant)
        y += s.drop_zone_height + s.vertical_gap

        for i, task in enumerate(forest):
            size = self.measure(task)
            card = self.place(task, left + (width - size.width) / 2, y, kind)
            self.add_edge(zone, card, variant)
            y += size.height + s.vertical_gap

            zone = self.add_zone(DropTarget(forest=kind, index=i + 1), left, y, width)
            self.add_edge(card, zone, variant)
            y += s.drop_zone_height + s.vertical_gap

        return y, zone

    def add_marker(
        self,
        node_id: str,
        kind: NodeKind,
        left: float,
        width: float,
        y: float,
        marker_width: float,
        marker_height: float,
    ) -> None:
        self.nodes.append(
            LayoutNode(
                id=node_id,
                kind=kind,
                x=left + (width - marker_width) / 2,
                y=y,
                width=marker_width,
                height=marker_height,
                is_selected=kind == "start" and self.selected_task_id == TEST_HEADER_ID,
                is_cleanup=kind == "cleanup",
            )
        )


def compute_builder_layout(
    tasks: Forest,
    cleanup_tasks: Forest,
    descriptors: DescriptorRegistry | None = None,
    selected_task_id: str | None = None,
    settings: LayoutSettings | None = None,
) -> LayoutResult:
    """Lay out a test plan as a top-to-bottom diagram.

    Main tasks run from the start marker to the end marker; the cleanup phase
    follows below a divider. Every position where a task could be inserted
    gets a drop zone whose ``target`` says where the task would go.

    Args:
        tasks: Main forest
        cleanup_tasks: Cleanup forest
        descriptors: Known task types; marks cards with ``known_type``
        selected_task_id: Task (or the test header id) to mark as selected
        settings: Sizes and spacing

    Returns:
        LayoutResult with absolute coordinates centred on x = 0
    """
    s = settings or LayoutSettings()
    builder = _DiagramBuilder(s, descriptors, selected_task_id)

    widths = [builder.measure(task).width for task in [*tasks, *cleanup_tasks]]
    width = max([s.node_width, *widths])
    left = -width / 2

    builder.add_marker(START_NODE_ID, "start", left, width, 0, s.start_end_width, s.start_end_height)
    y = s.start_end_height + s.vertical_gap
    y, last = builder.place_forest(tasks, ForestKind.MAIN, left, width, y, START_NODE_ID)

    builder.add_marker(END_NODE_ID, "end", left, width, y, s.start_end_width, s.start_end_height)
    builder.add_edge(last, END_NODE_ID)
    y += s.start_end_height + s.vertical_gap

    builder.add_marker(
        CLEANUP_DIVIDER_ID, "cleanup", left, width, y, s.phase_divider_width, s.phase_divider_height
    )
    builder.add_edge(END_NODE_ID, CLEANUP_DIVIDER_ID, "cleanup", dashed=True)
    y += s.phase_divider_height + s.vertical_gap
    y, _ = builder.place_forest(cleanup_tasks, ForestKind.CLEANUP, left, width, y, CLEANUP_DIVIDER_ID)

    return LayoutResult(nodes=builder.nodes, edges=builder.edges, width=width, height=y)
