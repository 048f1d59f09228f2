"""Application service layer for plansmith.

This package contains application services that orchestrate domain
operations. ``editing_service``, ``selection`` and ``validation`` are pure
functions; ``BuilderStore`` and ``DragController`` hold session state on
top of them.

Services:
    editing_service - Checked structural edits (add, move, remove, ...)
    selection - Selection updates
    validation - Findings for a test definition
    store - The stateful editing session
    drag - Drag-and-drop gesture state machine

Example usage:
    >>> from plansmith.application import BuilderStore
    >>> from plansmith.domain.task import create_task
    >>>
    >>> store = BuilderStore()
    >>> group = create_task("run_tasks")
    >>> store.add_task(group)
    True
    >>> store.add_task(create_task("sleep"), parent_id=group.id, index=0)
    True
"""

from plansmith.application.drag import DragController, DragPhase, DragSource
from plansmith.application.editing_service import (
    add_task,
    duplicate_task,
    find_forest_of,
    move_task,
    move_task_across,
    remove_task,
    update_task,
    update_test_metadata,
)
from plansmith.application.store import BuilderState, BuilderStore
from plansmith.application.validation import ValidationFinding, has_errors, validate_test

__all__ = [
    # Editing service
    "add_task",
    "update_task",
    "remove_task",
    "move_task",
    "move_task_across",
    "duplicate_task",
    "update_test_metadata",
    "find_forest_of",
    # Validation
    "ValidationFinding",
    "validate_test",
    "has_errors",
    # Session
    "BuilderState",
    "BuilderStore",
    "DragController",
    "DragPhase",
    "DragSource",
]
