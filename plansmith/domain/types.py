"""Domain value objects for plansmith.

Immutable value objects representing core domain concepts.
These provide type safety and domain-specific operations.
"""

from dataclasses import dataclass

from plansmith.domain.shared.result import Err, Ok, Result
from plansmith.domain.task.models import Forest, ForestKind, TaskNode
from plansmith.domain.task.slots import get_slot_names, slot_name_at
from plansmith.domain.task.traversal import find_path, locate


@dataclass(frozen=True)
class TaskAddress:
    """Immutable, id-free address of a task inside a test plan.

    Task ids are regenerated whenever a document is loaded, so anything that
    outlives one session (CLI arguments, scripts) addresses tasks by position:
    a forest plus one segment per level, each either a child index or a slot
    name.

    Example:
        addr = TaskAddress.from_string("cleanup:1.0.foregroundTask")
        addr.forest           # ForestKind.CLEANUP
        addr.parent()         # cleanup:1.0
        addr.child("2")       # cleanup:1.0.foregroundTask.2
    """

    forest: ForestKind
    segments: tuple[str, ...]

    @classmethod
    def from_string(cls, address: str, separator: str = ".") -> "TaskAddress":
        """Parse ``[main:|cleanup:]seg.seg...``; the forest defaults to main.

        Raises:
            ValueError: If the forest prefix is unknown
        """
        forest = ForestKind.MAIN
        if ":" in address:
            prefix, address = address.split(":", 1)
            forest = ForestKind(prefix)
        if not address:
            return cls(forest=forest, segments=())
        return cls(forest=forest, segments=tuple(address.split(separator)))

    def __str__(self) -> str:
        """Return the address as ``forest:seg.seg``."""
        return f"{self.forest.value}:{'.'.join(self.segments)}"

    def parent(self) -> "TaskAddress":
        """Return the address of the enclosing container (empty at root)."""
        return TaskAddress(forest=self.forest, segments=self.segments[:-1])

    def child(self, segment: str) -> "TaskAddress":
        return TaskAddress(forest=self.forest, segments=self.segments + (segment,))

    @property
    def leaf_segment(self) -> str:
        """Return the last segment, or empty string for the forest itself."""
        if not self.segments:
            return ""
        return self.segments[-1]

    def __bool__(self) -> bool:
        """Return True if the address points below the forest root."""
        return len(self.segments) > 0

    def resolve(self, forest: Forest) -> Result[TaskNode, str]:
        """Follow the address through a forest.

        Args:
            forest: The forest named by ``self.forest``

        Returns:
            Ok(node) at the address, or Err(str) naming the first bad segment
        """
        if not self.segments:
            return Err("Address does not name a task")

        siblings: list[TaskNode] = list(forest)
        node: TaskNode | None = None
        for depth, segment in enumerate(self.segments):
            if node is not None and get_slot_names(node.task_type):
                if segment.isdigit():
                    segment = slot_name_at(node.task_type, int(segment)) or segment
                node = node.named_children.get(segment)
            elif segment.isdigit() and int(segment) < len(siblings):
                node = siblings[int(segment)]
            else:
                node = None

            if node is None:
                shown = ".".join(self.segments[: depth + 1])
                return Err(f"No task at {self.forest.value}:{shown}")
            siblings = list(node.children)
        assert node is not None
        return Ok(node)


def address_of(forest: Forest, kind: ForestKind, task_id: str) -> TaskAddress | None:
    """Build the address of a task from its current position."""
    path = find_path(forest, task_id)
    if path is None:
        return None
    segments: list[str] = []
    for node_id in path + [task_id]:
        location = locate(forest, node_id)
        assert location is not None
        if location.slot_name is not None:
            segments.append(location.slot_name)
        else:
            segments.append(str(location.index))
    return TaskAddress(forest=kind, segments=tuple(segments))
