"""Task domain - the test plan tree and its structural rules.

This module provides the domain layer for editing test plans. All exports
are pure (no I/O, no side effects).

Key Types:
    TaskNode - A plain task or a glue container
    TestConfig - Test metadata plus main and cleanup forests
    ForestKind - Main or cleanup phase
    Selection - Selected task ids and the primary one
    TaskLocation - Where a task sits in its container
    ContainerKind / Composition / GlueSpec - Slot registry entries

Traversal Functions:
    fold_forest, find_first, flatten - Fundamental walks
    find_by_id, find_parent, find_path, locate - Lookups
    is_descendant, would_create_cycle - Cycle checks
    find_preceding_tasks - Tasks visible to a task's variable references

Editing Functions:
    create_task, duplicate_task - New nodes with fresh ids
    insert_at, set_named_slot, remove_by_id, move_to, update_by_id

Domain Events:
    TaskAdded, TaskUpdated, TaskRemoved, TaskMoved, TaskDuplicated,
    TestConfigChanged
"""

from .editing import (
    UPDATABLE_FIELDS,
    create_task,
    duplicate_task,
    generate_task_id,
    insert_at,
    insert_at_root,
    move_to,
    remove_by_id,
    reset_id_counter,
    set_named_slot,
    update_by_id,
)
from .events import (
    TaskAdded,
    TaskDuplicated,
    TaskMoved,
    TaskRemoved,
    TaskUpdated,
    TestConfigChanged,
)
from .models import (
    TEST_HEADER_ID,
    Forest,
    ForestKind,
    Selection,
    TaskLocation,
    TaskNode,
    TestConfig,
)
from .slots import (
    GLUE_SPECS,
    Composition,
    ContainerKind,
    GlueSpec,
    SlotSpec,
    container_kind,
    get_glue_spec,
    get_slot_index,
    get_slot_label,
    get_slot_names,
    is_concurrent,
    is_glue_task,
    slot_name_at,
)
from .traversal import (
    count_tasks,
    find_by_id,
    find_first,
    find_parent,
    find_path,
    find_preceding_tasks,
    flatten,
    fold_forest,
    get_all_task_ids,
    get_max_depth,
    is_descendant,
    locate,
    would_create_cycle,
)

__all__ = [
    # Models
    "TaskNode",
    "TestConfig",
    "Forest",
    "ForestKind",
    "Selection",
    "TaskLocation",
    "TEST_HEADER_ID",
    # Slot registry
    "ContainerKind",
    "Composition",
    "GlueSpec",
    "SlotSpec",
    "GLUE_SPECS",
    "get_glue_spec",
    "container_kind",
    "is_glue_task",
    "is_concurrent",
    "get_slot_names",
    "get_slot_index",
    "get_slot_label",
    "slot_name_at",
    # Traversal
    "fold_forest",
    "find_first",
    "flatten",
    "find_by_id",
    "find_parent",
    "find_path",
    "locate",
    "get_all_task_ids",
    "is_descendant",
    "would_create_cycle",
    "count_tasks",
    "get_max_depth",
    "find_preceding_tasks",
    # Editing
    "UPDATABLE_FIELDS",
    "generate_task_id",
    "reset_id_counter",
    "create_task",
    "insert_at",
    "insert_at_root",
    "set_named_slot",
    "remove_by_id",
    "move_to",
    "duplicate_task",
    "update_by_id",
    # Events
    "TaskAdded",
    "TaskUpdated",
    "TaskRemoved",
    "TaskMoved",
    "TaskDuplicated",
    "TestConfigChanged",
]
