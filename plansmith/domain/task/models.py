"""Task domain models.

Pure domain models for test plan editing. Uses Pydantic for serialization
compatibility with the rest of the codebase. Models are frozen: every edit
yields a new snapshot.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .slots import ContainerKind, container_kind, get_glue_spec, get_slot_names

# Reserved selection id for the test header (the diagram's start node).
TEST_HEADER_ID = "__test_header__"


class ForestKind(str, Enum):
    """The two phases of a test plan."""

    MAIN = "main"
    CLEANUP = "cleanup"


class TaskNode(BaseModel):
    """A task in the plan (plain task or glue container).

    Containers keep their children in ``children`` (ordered and single-slot
    kinds) or ``named_children`` (named-slot kind), never in ``config``.
    """

    id: str
    task_type: str
    task_id: str | None = None
    title: str | None = None
    timeout: str | None = None
    if_condition: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    config_vars: dict[str, str] = Field(default_factory=dict)
    children: list["TaskNode"] = Field(default_factory=list)
    named_children: dict[str, "TaskNode"] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_container_shape(self) -> "TaskNode":
        spec = get_glue_spec(self.task_type)
        if spec is not None:
            leaked = sorted(key for key in spec.config_keys if key in self.config)
            if leaked:
                raise ValueError(
                    f"{self.task_type} keeps children out of config, found: {', '.join(leaked)}"
                )

        kind = container_kind(self.task_type)
        if kind == ContainerKind.NAMED:
            if self.children:
                raise ValueError(
                    f"{self.task_type} holds children in named slots, not a list"
                )
            unknown = sorted(set(self.named_children) - set(get_slot_names(self.task_type)))
            if unknown:
                raise ValueError(f"{self.task_type} has no slot(s): {', '.join(unknown)}")
            return self

        if self.named_children:
            raise ValueError(f"{self.task_type} has no named slots")
        if kind == ContainerKind.NONE and self.children:
            raise ValueError(f"{self.task_type} cannot have children")
        if kind == ContainerKind.SINGLE and len(self.children) > 1:
            raise ValueError(f"{self.task_type} holds at most one child")
        return self

    def child_nodes(self) -> list["TaskNode"]:
        """Return direct children in display order (slots in declared order)."""
        if self.named_children:
            return [
                self.named_children[name]
                for name in get_slot_names(self.task_type)
                if name in self.named_children
            ]
        return list(self.children)

    def is_leaf(self) -> bool:
        """Check if this node currently has no children."""
        return not self.children and not self.named_children


Forest = list[TaskNode]


class TaskLocation(BaseModel):
    """Where a task sits: under ``parent_id`` (None at root) at an index or slot."""

    parent_id: str | None = None
    index: int | None = None
    slot_name: str | None = None

    model_config = {"frozen": True}

    @property
    def in_named_slot(self) -> bool:
        return self.slot_name is not None


class TestConfig(BaseModel):
    """A complete test definition: metadata plus the main and cleanup forests."""

    __test__ = False  # not a pytest test class

    id: str | None = None
    name: str = "New Test"
    timeout: str | None = None
    test_vars: dict[str, Any] = Field(default_factory=dict)
    tasks: list[TaskNode] = Field(default_factory=list)
    cleanup_tasks: list[TaskNode] = Field(default_factory=list)

    model_config = {"frozen": True}

    def forest(self, kind: ForestKind) -> Forest:
        """Return the forest for a phase."""
        if kind == ForestKind.CLEANUP:
            return self.cleanup_tasks
        return self.tasks

    def with_forest(self, kind: ForestKind, forest: Forest) -> "TestConfig":
        """Return a copy with one forest replaced."""
        if kind == ForestKind.CLEANUP:
            return self.model_copy(update={"cleanup_tasks": forest})
        return self.model_copy(update={"tasks": forest})


class Selection(BaseModel):
    """Selected task ids (in selection order) plus the primary one."""

    task_ids: tuple[str, ...] = ()
    primary_task_id: str | None = None

    model_config = {"frozen": True}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.task_ids

    @property
    def is_empty(self) -> bool:
        return not self.task_ids
