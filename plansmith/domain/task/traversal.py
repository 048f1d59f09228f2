"""Pure tree traversal over task forests.

All functions in this module are pure - no I/O, no side effects.
They take data in, return data out. Every search descends into both
ordered children and named-slot children (slots in declared order).
"""

from collections.abc import Callable
from typing import TypeVar

from .models import Forest, TaskLocation, TaskNode

T = TypeVar("T")


# =============================================================================
# Fundamental Operations
# =============================================================================


def fold_forest(
    forest: Forest,
    initial: T,
    f: Callable[[T, TaskNode, list[str]], T],
) -> T:
    """Fold over all nodes in the forest with their ancestor ids.

    Visits every node in depth-first pre-order, accumulating a result.

    Args:
        forest: The forest to fold over
        initial: Starting accumulator value
        f: Function (accumulator, node, ancestor_ids) -> new_accumulator

    Returns:
        Final accumulated value after visiting all nodes
    """

    def fold_node(acc: T, node: TaskNode, ancestors: list[str]) -> T:
        acc = f(acc, node, ancestors)
        inner = ancestors + [node.id]
        for child in node.child_nodes():
            acc = fold_node(acc, child, inner)
        return acc

    result = initial
    for root in forest:
        result = fold_node(result, root, [])
    return result


def find_first(
    forest: Forest,
    predicate: Callable[[TaskNode], bool],
) -> TaskNode | None:
    """Find the first node matching a predicate (depth-first)."""

    def search(node: TaskNode) -> TaskNode | None:
        if predicate(node):
            return node
        for child in node.child_nodes():
            found = search(child)
            if found is not None:
                return found
        return None

    for root in forest:
        found = search(root)
        if found is not None:
            return found
    return None


def flatten(forest: Forest) -> list[TaskNode]:
    """Return every node in depth-first pre-order."""

    def collect(acc: list[TaskNode], node: TaskNode, ancestors: list[str]) -> list[TaskNode]:
        acc.append(node)
        return acc

    return fold_forest(forest, [], collect)


# =============================================================================
# Lookups
# =============================================================================


def find_by_id(forest: Forest, task_id: str) -> TaskNode | None:
    """Find a task by its id anywhere in the forest."""
    return find_first(forest, lambda node: node.id == task_id)


def find_path(forest: Forest, task_id: str) -> list[str] | None:
    """Return the ids of a task's ancestors, root first.

    Returns:
        ``[]`` for a root task, the ancestor chain for nested tasks,
        or None if the task is not in the forest
    """

    def search(node: TaskNode, ancestors: list[str]) -> list[str] | None:
        if node.id == task_id:
            return ancestors
        inner = ancestors + [node.id]
        for child in node.child_nodes():
            found = search(child, inner)
            if found is not None:
                return found
        return None

    for root in forest:
        found = search(root, [])
        if found is not None:
            return found
    return None


def find_parent(forest: Forest, task_id: str) -> TaskNode | None:
    """Return the parent of a task, or None for roots and unknown ids."""
    path = find_path(forest, task_id)
    if not path:
        return None
    return find_by_id(forest, path[-1])


def locate(forest: Forest, task_id: str) -> TaskLocation | None:
    """Return where a task sits inside its container.

    Root tasks report ``parent_id=None`` and their root index; ordered
    children report their index; named-slot children report the slot name.
    """
    for i, root in enumerate(forest):
        if root.id == task_id:
            return TaskLocation(parent_id=None, index=i)

    def search(node: TaskNode) -> TaskLocation | None:
        for i, child in enumerate(node.children):
            if child.id == task_id:
                return TaskLocation(parent_id=node.id, index=i)
        for slot_name, child in node.named_children.items():
            if child.id == task_id:
                return TaskLocation(parent_id=node.id, slot_name=slot_name)
        for child in node.child_nodes():
            found = search(child)
            if found is not None:
                return found
        return None

    for root in forest:
        found = search(root)
        if found is not None:
            return found
    return None


def get_all_task_ids(forest: Forest) -> list[str]:
    """Return every task id in the forest in pre-order."""
    return [node.id for node in flatten(forest)]


# =============================================================================
# Structural Checks
# =============================================================================


def is_descendant(forest: Forest, task_id: str, of_id: str) -> bool:
    """Check if ``task_id`` lies inside the subtree rooted at ``of_id``.

    A task counts as inside its own subtree.
    """
    if task_id == of_id:
        return True
    path = find_path(forest, task_id)
    return path is not None and of_id in path


def would_create_cycle(forest: Forest, task_id: str, target_parent_id: str | None) -> bool:
    """Check if placing ``task_id`` under ``target_parent_id`` makes a cycle."""
    if target_parent_id is None:
        return False
    return is_descendant(forest, target_parent_id, task_id)


def count_tasks(forest: Forest) -> int:
    return fold_forest(forest, 0, lambda acc, node, ancestors: acc + 1)


def get_max_depth(forest: Forest) -> int:
    """Return the deepest nesting level (0 when nothing is nested)."""
    return fold_forest(forest, 0, lambda acc, node, ancestors: max(acc, len(ancestors)))


# =============================================================================
# High-Level Operations
# =============================================================================


def find_preceding_tasks(
    forest: Forest,
    task_id: str,
    include_parents: bool = True,
) -> list[TaskNode]:
    """Collect the tasks that run before a given task.

    Feeds variable-reference suggestions: every task whose outputs may be
    visible to ``task_id``. That is, all earlier siblings (with their
    subtrees) at each level of the ancestor chain and, optionally, the
    ancestors themselves.

    Args:
        forest: The forest containing the task
        task_id: The task whose predecessors are wanted
        include_parents: Whether enclosing containers count as preceding

    Returns:
        Preceding tasks, outermost level first; empty if the task is unknown
    """

    def search(siblings: list[TaskNode]) -> list[TaskNode] | None:
        for i, node in enumerate(siblings):
            if node.id == task_id:
                return flatten(siblings[:i])
            found = search(node.child_nodes())
            if found is not None:
                before = flatten(siblings[:i])
                if include_parents:
                    before.append(node)
                return before + found
        return None

    return search(list(forest)) or []
