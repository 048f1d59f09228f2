"""Pure structural edits over task forests.

Every function returns a new forest and shares untouched subtrees with the
input. None of them check for cycles or id clashes; that is the job of the
editing service, which validates a request before calling in here.
"""

import copy
import itertools
from collections.abc import Callable, Iterable, Mapping
from typing import Any, assert_never
from uuid import uuid4

from .models import Forest, TaskNode
from .slots import ContainerKind, container_kind, get_glue_spec, get_slot_names, slot_name_at
from .traversal import find_by_id

# Fields a field-level update may touch. Structure (id, type, children) is
# changed only through insert/move/remove.
UPDATABLE_FIELDS = ("task_id", "title", "timeout", "if_condition", "config", "config_vars")

_id_counter = itertools.count(1)


def generate_task_id() -> str:
    """Generate a process-unique task id."""
    return f"task_{next(_id_counter)}_{uuid4().hex[:8]}"


def reset_id_counter() -> None:
    """Restart the id sequence (test helper; ids stay unique via the uuid part)."""
    global _id_counter
    _id_counter = itertools.count(1)


def create_task(task_type: str, title: str | None = None) -> TaskNode:
    """Create a fresh, empty task of the given type (palette insert)."""
    return TaskNode(id=generate_task_id(), task_type=task_type, title=title or None)


# =============================================================================
# Internal Rewriting
# =============================================================================


def _same(new: Iterable[TaskNode], old: Iterable[TaskNode]) -> bool:
    new_list, old_list = list(new), list(old)
    return len(new_list) == len(old_list) and all(a is b for a, b in zip(new_list, old_list))


def _rebuild(node: TaskNode, children: list[TaskNode], named: dict[str, TaskNode]) -> TaskNode:
    if _same(children, node.children) and _same(named.values(), node.named_children.values()):
        return node
    return node.model_copy(update={"children": children, "named_children": named})


def _replace_in(node: TaskNode, task_id: str, fn: Callable[[TaskNode], TaskNode]) -> TaskNode:
    if node.id == task_id:
        return fn(node)
    children = [_replace_in(child, task_id, fn) for child in node.children]
    named = {slot: _replace_in(child, task_id, fn) for slot, child in node.named_children.items()}
    return _rebuild(node, children, named)


def _replace(forest: Forest, task_id: str, fn: Callable[[TaskNode], TaskNode]) -> Forest:
    return [_replace_in(root, task_id, fn) for root in forest]


def _clamp(index: int | None, length: int) -> int:
    if index is None:
        return length
    return max(0, min(index, length))


def _strip_container_keys(task_type: str, config: Mapping[str, Any]) -> dict[str, Any]:
    spec = get_glue_spec(task_type)
    if spec is None:
        return dict(config)
    return {key: value for key, value in config.items() if key not in spec.config_keys}


# =============================================================================
# Structural Edits
# =============================================================================


def remove_by_id(forest: Forest, task_id: str) -> Forest:
    """Remove a task and its whole subtree, wherever it sits.

    An emptied named slot disappears from ``named_children`` entirely.
    """

    def prune(node: TaskNode) -> TaskNode:
        children = [prune(child) for child in node.children if child.id != task_id]
        named = {
            slot: prune(child)
            for slot, child in node.named_children.items()
            if child.id != task_id
        }
        return _rebuild(node, children, named)

    return [prune(root) for root in forest if root.id != task_id]


def insert_at_root(forest: Forest, node: TaskNode, index: int | None = None) -> Forest:
    """Insert a task at forest root, clamping ``index`` (None appends)."""
    result = list(forest)
    result.insert(_clamp(index, len(result)), node)
    return result


def set_named_slot(forest: Forest, node: TaskNode, parent_id: str, slot_name: str) -> Forest:
    """Put a task into a named slot, replacing any occupant.

    Unknown parents and undeclared slot names leave the forest unchanged.
    """
    parent = find_by_id(forest, parent_id)
    if parent is None or slot_name not in get_slot_names(parent.task_type):
        return list(forest)

    def fill(target: TaskNode) -> TaskNode:
        named = dict(target.named_children)
        named[slot_name] = node
        ordered = {name: named[name] for name in get_slot_names(target.task_type) if name in named}
        return target.model_copy(update={"named_children": ordered})

    return _replace(forest, parent_id, fill)


def insert_at(
    forest: Forest,
    node: TaskNode,
    parent_id: str | None,
    index: int | None = None,
) -> Forest:
    """Insert a task under a container (or at root when ``parent_id`` is None).

    Ordered containers clamp ``index``; single-slot containers only accept a
    child while empty; named-slot containers treat ``index`` as the slot
    position and route to :func:`set_named_slot`. Leaf or unknown parents
    leave the forest unchanged.
    """
    if parent_id is None:
        return insert_at_root(forest, node, index)

    parent = find_by_id(forest, parent_id)
    if parent is None:
        return list(forest)

    kind = container_kind(parent.task_type)
    if kind is ContainerKind.NONE:
        return list(forest)
    if kind is ContainerKind.NAMED:
        slot_name = slot_name_at(parent.task_type, index or 0)
        if slot_name is None:
            return list(forest)
        return set_named_slot(forest, node, parent_id, slot_name)
    if kind is ContainerKind.SINGLE:
        if parent.children:
            return list(forest)
        return _replace(forest, parent_id, lambda p: p.model_copy(update={"children": [node]}))
    if kind is ContainerKind.ORDERED:

        def add(target: TaskNode) -> TaskNode:
            children = list(target.children)
            children.insert(_clamp(index, len(children)), node)
            return target.model_copy(update={"children": children})

        return _replace(forest, parent_id, add)
    assert_never(kind)


def move_to(
    forest: Forest,
    node: TaskNode,
    parent_id: str | None,
    index: int | None,
) -> Forest:
    """Remove a task from where it is and insert it at a new position.

    ``index`` addresses the target container after the removal. Does not
    check for cycles.
    """
    return insert_at(remove_by_id(forest, node.id), node, parent_id, index)


def duplicate_task(node: TaskNode, task_id_suffix: str = "") -> TaskNode:
    """Deep-copy a subtree, giving every node (slot children included) a fresh id.

    Args:
        node: Root of the subtree to copy
        task_id_suffix: Appended to every user-chosen ``task_id`` in the copy
    """
    return node.model_copy(
        update={
            "id": generate_task_id(),
            "task_id": f"{node.task_id}{task_id_suffix}" if node.task_id else node.task_id,
            "config": copy.deepcopy(node.config),
            "config_vars": dict(node.config_vars),
            "children": [duplicate_task(child, task_id_suffix) for child in node.children],
            "named_children": {
                slot: duplicate_task(child, task_id_suffix)
                for slot, child in node.named_children.items()
            },
        }
    )


def update_by_id(forest: Forest, task_id: str, updates: Mapping[str, Any]) -> Forest:
    """Merge field updates into a task wherever it sits.

    Only :data:`UPDATABLE_FIELDS` are applied. Child-carrying keys are
    dropped from an incoming ``config`` so children never leak into it.

    Raises:
        pydantic.ValidationError: If an updated value has the wrong type
    """

    def apply(node: TaskNode) -> TaskNode:
        changes = {key: value for key, value in updates.items() if key in UPDATABLE_FIELDS}
        for field in ("config", "config_vars"):
            if field in changes and changes[field] is None:
                changes[field] = {}
        if isinstance(changes.get("config"), Mapping):
            changes["config"] = _strip_container_keys(node.task_type, changes["config"])
        current = {name: getattr(node, name) for name in TaskNode.model_fields}
        return TaskNode.model_validate({**current, **changes})

    return _replace(forest, task_id, apply)
