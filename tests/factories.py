"""Builders for task trees used across the tests."""

from typing import Any

from plansmith.domain.task import TaskNode, create_task


def task(task_type: str, *children: TaskNode, **fields: Any) -> TaskNode:
    """Build a task with ordered children."""
    node = create_task(task_type)
    return node.model_copy(update={"children": list(children), **fields})


def background(bg: TaskNode | None = None, fg: TaskNode | None = None, **fields: Any) -> TaskNode:
    """Build a run_task_background task with the given slot occupants."""
    named = {}
    if bg is not None:
        named["backgroundTask"] = bg
    if fg is not None:
        named["foregroundTask"] = fg
    return create_task("run_task_background").model_copy(
        update={"named_children": named, **fields}
    )


def shape(forest: list[TaskNode]) -> list[Any]:
    """Id-free structure of a forest: (type, title, children or slots)."""
    result = []
    for node in forest:
        if node.named_children:
            inner: Any = {slot: shape([child])[0] for slot, child in node.named_children.items()}
        else:
            inner = shape(node.children)
        result.append((node.task_type, node.title, inner))
    return result


def ids(forest: list[TaskNode]) -> list[str]:
    return [node.id for node in forest]
