"""Descriptor registry: lookup of task descriptors by name or alias."""

from collections.abc import Iterable, Iterator

from plansmith.domain.task.slots import GLUE_SPECS

from .models import TaskDescriptor

_GLUE_DESCRIPTIONS = {
    "run_tasks": "Run child tasks one after another.",
    "run_tasks_concurrent": "Run child tasks in parallel.",
    "run_task_options": "Run a single child task with result and failure options.",
    "run_task_matrix": "Run one child task once per matrix value.",
    "run_task_background": "Run a background task while a foreground task runs.",
}


class DescriptorRegistry:
    """Read-only mapping from task type name (or alias) to its descriptor.

    Example:
        registry = DescriptorRegistry(builtin_descriptors())
        if "run_tasks" in registry:
            print(registry.get("run_tasks").description)
    """

    def __init__(self, descriptors: Iterable[TaskDescriptor] = ()) -> None:
        self._by_name: dict[str, TaskDescriptor] = {}
        self._by_alias: dict[str, TaskDescriptor] = {}
        for descriptor in descriptors:
            self._by_name[descriptor.name] = descriptor
            for alias in descriptor.aliases:
                self._by_alias[alias] = descriptor

    def get(self, task_type: str) -> TaskDescriptor | None:
        """Return the descriptor for a type name or alias."""
        return self._by_name.get(task_type) or self._by_alias.get(task_type)

    def __contains__(self, task_type: object) -> bool:
        return isinstance(task_type, str) and self.get(task_type) is not None

    def __iter__(self) -> Iterator[TaskDescriptor]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def names(self) -> list[str]:
        return sorted(self._by_name)

    def merged(self, descriptors: Iterable[TaskDescriptor]) -> "DescriptorRegistry":
        """Return a new registry with extra descriptors (later ones win)."""
        return DescriptorRegistry([*self._by_name.values(), *descriptors])


def builtin_descriptors() -> list[TaskDescriptor]:
    """Descriptors for the glue task types known to the slot registry."""
    return [
        TaskDescriptor(
            name=spec.task_type,
            description=_GLUE_DESCRIPTIONS.get(spec.task_type, ""),
            category="flow",
        )
        for spec in GLUE_SPECS.values()
    ]
