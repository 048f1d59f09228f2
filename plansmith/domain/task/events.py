"""Task editing events.

Immutable records of committed edits. The builder store emits exactly one
per successful mutation; refused mutations emit nothing.

All events are pure data structures - no I/O, no side effects.
"""

from plansmith.domain.shared.events import DomainEvent

from .models import ForestKind


class TaskAdded(DomainEvent):
    """A new task (possibly with a subtree) entered a forest."""

    forest: ForestKind
    task_id: str
    task_type: str
    parent_id: str | None = None
    index: int | None = None
    slot_name: str | None = None


class TaskUpdated(DomainEvent):
    """Opaque fields of a task changed in place."""

    forest: ForestKind
    task_id: str
    fields: list[str]


class TaskRemoved(DomainEvent):
    """A task and its subtree left a forest.

    ``removed_ids`` lists every id that disappeared, the task's own first.
    """

    forest: ForestKind
    task_id: str
    removed_ids: list[str]


class TaskMoved(DomainEvent):
    """A task kept its identity but changed position (maybe its forest too)."""

    source_forest: ForestKind
    dest_forest: ForestKind
    task_id: str
    parent_id: str | None = None
    index: int | None = None
    slot_name: str | None = None


class TaskDuplicated(DomainEvent):
    """A subtree was cloned next to its original."""

    forest: ForestKind
    source_id: str
    task_id: str
    new_ids: list[str]


class TestConfigChanged(DomainEvent):
    """Test metadata changed, or the whole definition was replaced."""

    __test__ = False  # not a pytest test class

    fields: list[str]
