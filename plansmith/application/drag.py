"""Drag-and-drop gesture handling.

A gesture is a small state machine::

    IDLE --start(source)--> DRAGGING --drop()/cancel()--> IDLE

While dragging, ``over(zone)`` only records the zone under the pointer.
Nothing in the test changes until ``drop()``, which resolves the recorded
zone's ``DropTarget`` into one or more store mutations.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from plansmith.domain.task import (
    ContainerKind,
    ForestKind,
    container_kind,
    create_task,
    find_by_id,
    find_path,
    get_all_task_ids,
    locate,
    would_create_cycle,
)
from plansmith.layout import DropTarget, LayoutNode

from .editing_service import find_forest_of
from .store import BuilderStore

logger = logging.getLogger(__name__)


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragSource:
    """What is being dragged: a palette entry (a task type) or an existing task."""

    task_type: str | None = None
    task_id: str | None = None

    @classmethod
    def palette(cls, task_type: str) -> "DragSource":
        return cls(task_type=task_type)

    @classmethod
    def existing(cls, task_id: str) -> "DragSource":
        return cls(task_id=task_id)

    @property
    def is_palette(self) -> bool:
        return self.task_type is not None


class DragController:
    """Drives one drag gesture at a time against a builder store.

    Example:
        drag = DragController(store)
        drag.start(DragSource.palette("http_request"))
        drag.over(store.layout.drop_zones()[0])
        drag.drop()   # adds the task and selects it
    """

    def __init__(self, store: BuilderStore) -> None:
        self.store = store
        self.phase = DragPhase.IDLE
        self.source: DragSource | None = None
        self.over_target: DropTarget | None = None

    def start(self, source: DragSource) -> bool:
        """Begin a gesture.

        Dragging an unselected task selects just that task first. Returns
        False (and changes nothing) if a gesture is already running or the
        task does not exist.
        """
        if self.phase is DragPhase.DRAGGING:
            return False
        if source.task_id is not None:
            if find_forest_of(self.store.test_config, source.task_id) is None:
                return False
            if source.task_id not in self.store.state.selection:
                self.store.set_selection([source.task_id], source.task_id)

        self.phase = DragPhase.DRAGGING
        self.source = source
        self.over_target = None
        return True

    def over(self, zone: LayoutNode | DropTarget | None) -> None:
        """Record the zone under the pointer (None when over nothing).

        Disabled zones and non-zone nodes count as nothing.
        """
        if self.phase is not DragPhase.DRAGGING:
            return
        if isinstance(zone, LayoutNode):
            if zone.kind != "drop_zone" or zone.disabled:
                zone = None
            else:
                zone = zone.target
        self.over_target = zone

    def cancel(self) -> None:
        self.phase = DragPhase.IDLE
        self.source = None
        self.over_target = None

    def drop(self) -> bool:
        """Finish the gesture on the recorded zone.

        Returns:
            True if the test changed.
        """
        source, target = self.source, self.over_target
        was_dragging = self.phase is DragPhase.DRAGGING
        self.cancel()
        if not was_dragging or source is None or target is None:
            return False

        if source.task_type is not None:
            return self._drop_new(source.task_type, target)

        assert source.task_id is not None
        source_forest = find_forest_of(self.store.test_config, source.task_id)
        if source_forest is None:
            return False
        if source_forest != target.forest:
            return self.store.move_task_across(
                source.task_id, source_forest, target.forest, target.parent_id, target.index
            )
        return self._drop_existing(source.task_id, target)

    # -------------------------------------------------------------------------

    def _drop_new(self, task_type: str, target: DropTarget) -> bool:
        node = create_task(task_type)
        if not self.store.add_task(node, target.parent_id, target.index, target.forest):
            return False
        self.store.set_selection([node.id], node.id)
        return True

    def _takes_one(self, target: DropTarget) -> bool:
        if target.slot_name is not None:
            return True
        if target.parent_id is None:
            return False
        parent = find_by_id(self.store.test_config.forest(target.forest), target.parent_id)
        return parent is not None and container_kind(parent.task_type) is ContainerKind.SINGLE

    def _tasks_to_move(self, task_id: str, forest: ForestKind) -> list[str]:
        """The dragged task, or the whole selection in document order when it is selected.

        Tasks whose ancestor is also selected travel with that ancestor.
        """
        tasks = self.store.test_config.forest(forest)
        selected = self.store.state.selection
        if task_id not in selected:
            return [task_id]
        chosen = [node_id for node_id in get_all_task_ids(tasks) if node_id in selected]
        return [
            node_id
            for node_id in chosen
            if not any(ancestor in selected for ancestor in find_path(tasks, node_id) or [])
        ]

    def _drop_existing(self, task_id: str, target: DropTarget) -> bool:
        if self._takes_one(target):
            return self.store.move_task(task_id, target.parent_id, target.index, target.forest)

        task_ids = self._tasks_to_move(task_id, target.forest)
        tasks = self.store.test_config.forest(target.forest)
        for moving_id in task_ids:
            if would_create_cycle(tasks, moving_id, target.parent_id):
                logger.info(f"Rejected drop: {moving_id} would be moved into its own subtree")
                return False

        moved = False
        insert_index = target.index
        for moving_id in task_ids:
            location = locate(self.store.test_config.forest(target.forest), moving_id)
            if location is None:
                continue
            index = insert_index
            # Removing the task first shifts later siblings up by one.
            if (
                location.slot_name is None
                and location.parent_id == target.parent_id
                and location.index is not None
                and location.index < index
            ):
                index -= 1
            if self.store.move_task(moving_id, target.parent_id, index, target.forest):
                moved = True
                insert_index = index + 1
        return moved
