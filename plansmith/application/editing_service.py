"""Editing application service.

Validates and applies structural edits to a test definition by combining
domain functions. Every operation takes a ``TestConfig`` and returns either
the edited copy plus the event describing the edit, or an error message
explaining why the edit was refused. A refused edit never changes anything.

All functions are pure - no I/O, no side effects.
"""

from collections.abc import Mapping
from typing import Any, assert_never

from pydantic import ValidationError

from plansmith.domain.shared import Err, Ok, Result
from plansmith.domain.task import (
    UPDATABLE_FIELDS,
    ContainerKind,
    Forest,
    ForestKind,
    TaskAdded,
    TaskDuplicated,
    TaskMoved,
    TaskNode,
    TaskRemoved,
    TaskUpdated,
    TestConfig,
    TestConfigChanged,
    container_kind,
    find_by_id,
    flatten,
    get_all_task_ids,
    get_glue_spec,
    get_slot_label,
    insert_at,
    locate,
    move_to,
    remove_by_id,
    slot_name_at,
    update_by_id,
    would_create_cycle,
)
from plansmith.domain.task import duplicate_task as clone_subtree

# Suffix given to user task ids in a duplicated subtree.
DUPLICATE_TASK_ID_SUFFIX = "_copy"

TEST_METADATA_FIELDS = ("id", "name", "timeout", "test_vars")


# =============================================================================
# Lookups
# =============================================================================


def find_forest_of(config: TestConfig, task_id: str) -> ForestKind | None:
    """Return which forest holds a task, or None if neither does."""
    for kind in ForestKind:
        if find_by_id(config.forest(kind), task_id) is not None:
            return kind
    return None


def _describe(node: TaskNode) -> str:
    return f"'{node.title}'" if node.title else f"{node.task_type} ({node.id})"


def _check_target(
    forest: Forest,
    parent_id: str | None,
    index: int | None,
    moving_id: str | None = None,
) -> Result[str | None, str]:
    """Check that a container can take one more child at a position.

    ``moving_id`` names a task being moved; its own current position does not
    count as occupied.

    Returns:
        Ok(slot_name) (None unless the target is a named slot), or
        Err(str) naming the reason the position cannot be used.
    """
    if parent_id is None:
        return Ok(None)

    parent = find_by_id(forest, parent_id)
    if parent is None:
        return Err(f"Parent task not found: {parent_id}")

    kind = container_kind(parent.task_type)
    if kind is ContainerKind.NONE:
        return Err(f"Task {_describe(parent)} cannot hold children")
    if kind is ContainerKind.ORDERED:
        return Ok(None)
    if kind is ContainerKind.SINGLE:
        if not parent.children:
            return Ok(None)
        if parent.children[0].id == moving_id:
            return Err(f"Task is already the child of {_describe(parent)}")
        return Err(f"Task {_describe(parent)} already holds a child")
    if kind is ContainerKind.NAMED:
        slot_name = slot_name_at(parent.task_type, index or 0)
        if slot_name is None:
            return Err(f"Task {_describe(parent)} has no slot at position {index}")
        occupant = parent.named_children.get(slot_name)
        if occupant is None:
            return Ok(slot_name)
        label = get_slot_label(parent.task_type, slot_name)
        if occupant.id == moving_id:
            return Err(f"Task is already in the {label} slot")
        return Err(f"{label} slot of {_describe(parent)} is already occupied")
    assert_never(kind)


# =============================================================================
# Task Edits
# =============================================================================


def add_task(
    config: TestConfig,
    forest: ForestKind,
    node: TaskNode,
    parent_id: str | None = None,
    index: int | None = None,
) -> Result[tuple[TestConfig, TaskAdded], str]:
    """Add a task (and its subtree) to a forest.

    Args:
        config: The test definition to edit
        forest: Which forest receives the task
        node: The task to add; its ids must be new to the test
        parent_id: Container to insert into, None for the forest root
        index: Position among ordered children, or slot position for
            named-slot containers; None appends

    Returns:
        Ok((updated_config, TaskAdded)) on success, or
        Err(str) if the target cannot take the task or ids clash.
    """
    new_ids = [task.id for task in flatten([node])]
    if len(set(new_ids)) != len(new_ids):
        return Err(f"Task {_describe(node)} repeats ids within its own subtree")
    existing = set(get_all_task_ids(config.tasks)) | set(get_all_task_ids(config.cleanup_tasks))
    clashes = [task_id for task_id in new_ids if task_id in existing]
    if clashes:
        return Err(f"Task id already in use: {', '.join(clashes)}")
    for task in flatten([node]):
        spec = get_glue_spec(task.task_type)
        leaked = sorted(key for key in spec.config_keys if key in task.config) if spec else []
        if leaked:
            return Err(f"Task {_describe(task)} carries children in config: {', '.join(leaked)}")

    tasks = config.forest(forest)
    target = _check_target(tasks, parent_id, index)
    if isinstance(target, Err):
        return target

    updated = config.with_forest(forest, insert_at(tasks, node, parent_id, index))
    location = locate(updated.forest(forest), node.id)
    assert location is not None

    event = TaskAdded(
        forest=forest,
        task_id=node.id,
        task_type=node.task_type,
        parent_id=location.parent_id,
        index=location.index,
        slot_name=location.slot_name,
    )
    return Ok((updated, event))


def update_task(
    config: TestConfig,
    task_id: str,
    updates: Mapping[str, Any],
) -> Result[tuple[TestConfig, TaskUpdated], str]:
    """Merge field updates into a task in whichever forest holds it.

    Only opaque fields can change; see ``UPDATABLE_FIELDS``. Changing a
    task's type is refused, since its children would no longer fit.

    Returns:
        Ok((updated_config, TaskUpdated)) on success, or
        Err(str) if the task is missing, a field cannot be updated, or a
        value has the wrong type.
    """
    forest = find_forest_of(config, task_id)
    if forest is None:
        return Err(f"Task not found: {task_id}")

    node = find_by_id(config.forest(forest), task_id)
    assert node is not None

    fields = dict(updates)
    new_type = fields.pop("task_type", node.task_type)
    if new_type != node.task_type:
        return Err(
            f"Cannot change the type of {_describe(node)} to {new_type}; "
            "remove it and add a new task instead"
        )
    rejected = sorted(key for key in fields if key not in UPDATABLE_FIELDS)
    if rejected:
        return Err(f"Cannot update field(s): {', '.join(rejected)}")

    try:
        edited = update_by_id(config.forest(forest), task_id, fields)
    except ValidationError as e:
        return Err(f"Invalid update for {_describe(node)}: {e}")

    updated = config.with_forest(forest, edited)
    event = TaskUpdated(forest=forest, task_id=task_id, fields=sorted(fields))
    return Ok((updated, event))


def remove_task(
    config: TestConfig,
    task_id: str,
) -> Result[tuple[TestConfig, TaskRemoved], str]:
    """Remove a task and its whole subtree from whichever forest holds it."""
    forest = find_forest_of(config, task_id)
    if forest is None:
        return Err(f"Task not found: {task_id}")

    node = find_by_id(config.forest(forest), task_id)
    assert node is not None

    updated = config.with_forest(forest, remove_by_id(config.forest(forest), task_id))
    event = TaskRemoved(
        forest=forest,
        task_id=task_id,
        removed_ids=[task.id for task in flatten([node])],
    )
    return Ok((updated, event))


def move_task(
    config: TestConfig,
    forest: ForestKind,
    task_id: str,
    target_parent_id: str | None,
    target_index: int | None,
) -> Result[tuple[TestConfig, TaskMoved], str]:
    """Move a task within one forest, keeping its id.

    ``target_index`` is read against the target container after the task
    has left its old position. The move is refused as a whole when the
    target is the task itself or one of its descendants, or when the target
    slot or single-slot container is already occupied.

    Returns:
        Ok((updated_config, TaskMoved)) on success, or
        Err(str) describing why the task stays where it is.
    """
    tasks = config.forest(forest)
    node = find_by_id(tasks, task_id)
    if node is None:
        return Err(f"Task not found in {forest.value} tasks: {task_id}")

    if would_create_cycle(tasks, task_id, target_parent_id):
        return Err(f"Cannot move {_describe(node)} into itself or one of its descendants")

    target = _check_target(tasks, target_parent_id, target_index, moving_id=task_id)
    if isinstance(target, Err):
        return target

    updated = config.with_forest(forest, move_to(tasks, node, target_parent_id, target_index))
    location = locate(updated.forest(forest), task_id)
    assert location is not None

    event = TaskMoved(
        source_forest=forest,
        dest_forest=forest,
        task_id=task_id,
        parent_id=location.parent_id,
        index=location.index,
        slot_name=location.slot_name,
    )
    return Ok((updated, event))


def move_task_across(
    config: TestConfig,
    task_id: str,
    source: ForestKind,
    dest: ForestKind,
    target_parent_id: str | None,
    target_index: int | None,
) -> Result[tuple[TestConfig, TaskMoved], str]:
    """Move a task from one forest to the other in a single step.

    Both forests change together or not at all. Target checks run against
    the destination forest.
    """
    if source == dest:
        return move_task(config, source, task_id, target_parent_id, target_index)

    node = find_by_id(config.forest(source), task_id)
    if node is None:
        return Err(f"Task not found in {source.value} tasks: {task_id}")

    dest_tasks = config.forest(dest)
    target = _check_target(dest_tasks, target_parent_id, target_index)
    if isinstance(target, Err):
        return target

    updated = config.with_forest(source, remove_by_id(config.forest(source), task_id))
    updated = updated.with_forest(
        dest, insert_at(dest_tasks, node, target_parent_id, target_index)
    )
    location = locate(updated.forest(dest), task_id)
    assert location is not None

    event = TaskMoved(
        source_forest=source,
        dest_forest=dest,
        task_id=task_id,
        parent_id=location.parent_id,
        index=location.index,
        slot_name=location.slot_name,
    )
    return Ok((updated, event))


def duplicate_task(
    config: TestConfig,
    task_id: str,
) -> Result[tuple[TestConfig, TaskDuplicated], str]:
    """Clone a task's subtree and insert the copy right after the original.

    Every node of the copy gets a fresh id, and user task ids get a
    ``_copy`` suffix. Tasks in a named slot or a single-slot container
    cannot be duplicated: their container has no room for a sibling.
    """
    forest = find_forest_of(config, task_id)
    if forest is None:
        return Err(f"Task not found: {task_id}")

    tasks = config.forest(forest)
    node = find_by_id(tasks, task_id)
    location = locate(tasks, task_id)
    assert node is not None and location is not None

    if location.in_named_slot:
        return Err(f"Task {_describe(node)} fills a named slot and cannot be duplicated")
    if location.parent_id is not None:
        parent = find_by_id(tasks, location.parent_id)
        assert parent is not None
        if container_kind(parent.task_type) is ContainerKind.SINGLE:
            return Err(f"Task {_describe(parent)} holds a single child; cannot duplicate into it")

    clone = clone_subtree(node, DUPLICATE_TASK_ID_SUFFIX)
    index = (location.index or 0) + 1
    updated = config.with_forest(forest, insert_at(tasks, clone, location.parent_id, index))

    event = TaskDuplicated(
        forest=forest,
        source_id=task_id,
        task_id=clone.id,
        new_ids=[task.id for task in flatten([clone])],
    )
    return Ok((updated, event))


# =============================================================================
# Test Metadata
# =============================================================================


def update_test_metadata(
    config: TestConfig,
    updates: Mapping[str, Any],
) -> Result[tuple[TestConfig, TestConfigChanged], str]:
    """Change test-level fields (``id``, ``name``, ``timeout``, ``test_vars``).

    Empty ``id`` and ``timeout`` values are stored as None.
    """
    rejected = sorted(key for key in updates if key not in TEST_METADATA_FIELDS)
    if rejected:
        return Err(f"Cannot update test field(s): {', '.join(rejected)}")

    changes = dict(updates)
    for key in ("id", "timeout"):
        if key in changes and not changes[key]:
            changes[key] = None
    if "test_vars" in changes:
        changes["test_vars"] = dict(changes["test_vars"] or {})
    if "name" in changes:
        changes["name"] = changes["name"] or ""

    updated = config.model_copy(update=changes)
    return Ok((updated, TestConfigChanged(fields=sorted(changes))))


def replace_test(config: TestConfig) -> tuple[TestConfig, TestConfigChanged]:
    """Swap in a whole new test definition."""
    return config, TestConfigChanged(fields=["*"])
