"""Slot registry: which task types are containers and how they hold children.

Container ("glue") task types come in three kinds:

- ORDERED: an ordered list of children of any length (``run_tasks``,
  ``run_tasks_concurrent``), serialized under ``config.tasks``.
- SINGLE: at most one child (``run_task_options``, ``run_task_matrix``),
  serialized under ``config.task``.
- NAMED: a fixed set of named slots holding at most one child each
  (``run_task_background``), serialized under one config key per slot.

Every other task type is a plain task (``ContainerKind.NONE``). The table is
static; editing, layout and serialization all consult it.
"""

from enum import Enum

from pydantic import BaseModel


class ContainerKind(str, Enum):
    """How a task type holds its children."""

    NONE = "none"
    ORDERED = "ordered"
    SINGLE = "single"
    NAMED = "named"


class Composition(str, Enum):
    """How a container runs (and draws) its children."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class SlotSpec(BaseModel):
    """A named child position of a NAMED container."""

    name: str
    label: str

    model_config = {"frozen": True}


class GlueSpec(BaseModel):
    """Container semantics of one glue task type."""

    task_type: str
    kind: ContainerKind
    composition: Composition = Composition.SEQUENTIAL
    children_key: str | None = None
    slots: tuple[SlotSpec, ...] = ()

    model_config = {"frozen": True}

    @property
    def max_children(self) -> int | None:
        """Capacity of the container, None for unbounded."""
        if self.kind == ContainerKind.SINGLE:
            return 1
        if self.kind == ContainerKind.NAMED:
            return len(self.slots)
        return None

    @property
    def slot_names(self) -> list[str]:
        return [slot.name for slot in self.slots]

    @property
    def config_keys(self) -> list[str]:
        """Config keys that carry children and must never stay in ``config``."""
        if self.kind == ContainerKind.NAMED:
            return self.slot_names
        return [self.children_key] if self.children_key else []


GLUE_SPECS: dict[str, GlueSpec] = {
    spec.task_type: spec
    for spec in (
        GlueSpec(
            task_type="run_tasks",
            kind=ContainerKind.ORDERED,
            composition=Composition.SEQUENTIAL,
            children_key="tasks",
        ),
        GlueSpec(
            task_type="run_tasks_concurrent",
            kind=ContainerKind.ORDERED,
            composition=Composition.CONCURRENT,
            children_key="tasks",
        ),
        GlueSpec(
            task_type="run_task_options",
            kind=ContainerKind.SINGLE,
            composition=Composition.SEQUENTIAL,
            children_key="task",
        ),
        GlueSpec(
            task_type="run_task_matrix",
            kind=ContainerKind.SINGLE,
            composition=Composition.CONCURRENT,
            children_key="task",
        ),
        GlueSpec(
            task_type="run_task_background",
            kind=ContainerKind.NAMED,
            composition=Composition.CONCURRENT,
            slots=(
                SlotSpec(name="backgroundTask", label="Background"),
                SlotSpec(name="foregroundTask", label="Foreground"),
            ),
        ),
    )
}


def get_glue_spec(task_type: str) -> GlueSpec | None:
    """Return the container spec for a task type, or None for plain tasks."""
    return GLUE_SPECS.get(task_type)


def container_kind(task_type: str) -> ContainerKind:
    """Return the container kind for a task type."""
    spec = GLUE_SPECS.get(task_type)
    return spec.kind if spec else ContainerKind.NONE


def is_glue_task(task_type: str) -> bool:
    """Check if a task type can hold children."""
    return task_type in GLUE_SPECS


def is_concurrent(task_type: str) -> bool:
    spec = GLUE_SPECS.get(task_type)
    return spec is not None and spec.composition == Composition.CONCURRENT


def get_slot_names(task_type: str) -> list[str]:
    """Return the declared slot names of a NAMED container, else ``[]``."""
    spec = GLUE_SPECS.get(task_type)
    if spec is None or spec.kind != ContainerKind.NAMED:
        return []
    return spec.slot_names


def get_slot_index(task_type: str, slot_name: str) -> int | None:
    """Return the position of a named slot, or None if the type lacks it."""
    names = get_slot_names(task_type)
    return names.index(slot_name) if slot_name in names else None


def slot_name_at(task_type: str, index: int) -> str | None:
    """Return the slot addressed by ``index`` on a NAMED container."""
    names = get_slot_names(task_type)
    if 0 <= index < len(names):
        return names[index]
    return None


def get_slot_label(task_type: str, slot_name: str) -> str:
    spec = GLUE_SPECS.get(task_type)
    if spec is not None:
        for slot in spec.slots:
            if slot.name == slot_name:
                return slot.label
    return slot_name
