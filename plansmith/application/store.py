"""Builder store.

Holds the state of one editing session (the test definition, selection,
YAML source, validation findings) and exposes the mutation API used by
views. Each mutation delegates to the pure editing service; a refused edit
is logged and leaves the state untouched, a committed one swaps in a new
immutable snapshot and notifies subscribers.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel

from plansmith.domain.descriptors import DescriptorRegistry, builtin_descriptors
from plansmith.domain.shared import DomainEvent, Err, Result
from plansmith.domain.task import (
    ForestKind,
    Selection,
    TaskNode,
    TaskRemoved,
    TestConfig,
    get_all_task_ids,
)
from plansmith.infrastructure.serialization import (
    config_from_test_details,
    deserialize_test,
    serialize_test,
)
from plansmith.layout import LayoutResult, LayoutSettings, compute_builder_layout

from . import editing_service, selection
from .validation import ValidationFinding, validate_test

logger = logging.getLogger(__name__)

ActiveView = Literal["graph", "list", "yaml"]

Listener = Callable[["BuilderState", DomainEvent | None], None]


class BuilderState(BaseModel):
    """Snapshot of an editing session."""

    test_config: TestConfig = TestConfig()
    selection: Selection = Selection()
    yaml_source: str = ""
    active_view: ActiveView = "list"
    validation_errors: tuple[ValidationFinding, ...] = ()
    is_dirty: bool = False
    source_test_id: str | None = None
    layout: LayoutResult | None = None

    model_config = {"frozen": True}


class BuilderStore:
    """Stateful wrapper around the editing service.

    Mutating methods return True when the edit was committed and False when
    it was refused. ``events`` records every committed edit in order.

    When a descriptor registry is attached, the diagram layout is recomputed
    on every change and kept on the state; otherwise ``layout`` computes it
    on demand.

    Example:
        store = BuilderStore()
        store.add_task(create_task("run_tasks"))
        store.subscribe(lambda state, event: print(event))
    """

    def __init__(
        self,
        state: BuilderState | None = None,
        descriptors: DescriptorRegistry | None = None,
        layout_settings: LayoutSettings | None = None,
    ) -> None:
        self._state = state or BuilderState()
        self._descriptors = descriptors
        self._layout_settings = layout_settings or LayoutSettings()
        self._listeners: list[Listener] = []
        self.events: list[DomainEvent] = []
        if descriptors is not None:
            self._state = self._with_layout(self._state)

    # =========================================================================
    # State plumbing
    # =========================================================================

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def test_config(self) -> TestConfig:
        return self._state.test_config

    @property
    def layout(self) -> LayoutResult:
        """The current diagram."""
        if self._state.layout is not None:
            return self._state.layout
        return self._compute_layout(self._state)

    @property
    def descriptors(self) -> DescriptorRegistry | None:
        return self._descriptors

    def attach_descriptors(self, descriptors: DescriptorRegistry) -> None:
        """Attach task descriptors; from now on the layout is kept up to date."""
        self._descriptors = descriptors
        self._set({})

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A function that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _compute_layout(self, state: BuilderState) -> LayoutResult:
        config = state.test_config
        return compute_builder_layout(
            config.tasks,
            config.cleanup_tasks,
            descriptors=self._descriptors,
            selected_task_id=state.selection.primary_task_id,
            settings=self._layout_settings,
        )

    def _with_layout(self, state: BuilderState) -> BuilderState:
        return state.model_copy(update={"layout": self._compute_layout(state)})

    def _set(self, changes: Mapping[str, Any], event: DomainEvent | None = None) -> None:
        state = self._state.model_copy(update=dict(changes))
        if self._descriptors is not None:
            state = self._with_layout(state)
        elif "test_config" in changes or "selection" in changes:
            state = state.model_copy(update={"layout": None})
        self._state = state

        if event is not None:
            self.events.append(event)
            logger.debug(f"Committed {type(event).__name__} ({event.event_id})")
        for listener in list(self._listeners):
            listener(state, event)

    def _commit(
        self,
        result: Result[tuple[TestConfig, DomainEvent], str],
        action: str,
        **changes: Any,
    ) -> bool:
        if isinstance(result, Err):
            logger.info(f"Rejected {action}: {result.error}")
            return False
        config, event = result.value
        self._set({"test_config": config, "is_dirty": True, **changes}, event)
        return True

    # =========================================================================
    # Task edits
    # =========================================================================

    def add_task(
        self,
        node: TaskNode,
        parent_id: str | None = None,
        index: int | None = None,
        forest: ForestKind = ForestKind.MAIN,
    ) -> bool:
        """Add a task (with its subtree) to a forest. See ``editing_service.add_task``."""
        result = editing_service.add_task(self.test_config, forest, node, parent_id, index)
        return self._commit(result, "add")

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> bool:
        return self._commit(editing_service.update_task(self.test_config, task_id, updates), "update")

    def remove_task(self, task_id: str) -> bool:
        """Remove a task and its subtree; removed ids leave the selection."""
        result = editing_service.remove_task(self.test_config, task_id)
        if isinstance(result, Err):
            return self._commit(result, "remove")
        event = result.value[1]
        assert isinstance(event, TaskRemoved)
        pruned = selection.discard(self._state.selection, event.removed_ids)
        return self._commit(result, "remove", selection=pruned)

    def move_task(
        self,
        task_id: str,
        target_parent_id: str | None,
        target_index: int | None,
        forest: ForestKind = ForestKind.MAIN,
    ) -> bool:
        """Move a task within one forest. See ``editing_service.move_task``."""
        result = editing_service.move_task(
            self.test_config, forest, task_id, target_parent_id, target_index
        )
        return self._commit(result, "move")

    def move_task_across(
        self,
        task_id: str,
        source: ForestKind,
        dest: ForestKind,
        target_parent_id: str | None = None,
        target_index: int | None = None,
    ) -> bool:
        result = editing_service.move_task_across(
            self.test_config, task_id, source, dest, target_parent_id, target_index
        )
        return self._commit(result, "cross-forest move")

    def duplicate_task(self, task_id: str) -> bool:
        """Duplicate a task next to itself; the copy's id is on the last event."""
        return self._commit(editing_service.duplicate_task(self.test_config, task_id), "duplicate")

    # =========================================================================
    # Test metadata
    # =========================================================================

    def set_test_name(self, name: str) -> bool:
        return self._commit(
            editing_service.update_test_metadata(self.test_config, {"name": name}), "rename"
        )

    def set_test_timeout(self, timeout: str | None) -> bool:
        return self._commit(
            editing_service.update_test_metadata(self.test_config, {"timeout": timeout}),
            "timeout change",
        )

    def set_test_vars(self, test_vars: Mapping[str, Any]) -> bool:
        return self._commit(
            editing_service.update_test_metadata(self.test_config, {"test_vars": test_vars}),
            "test variables change",
        )

    def set_test_id(self, test_id: str | None) -> bool:
        return self._commit(
            editing_service.update_test_metadata(self.test_config, {"id": test_id}), "id change"
        )

    def set_test_config(self, config: TestConfig) -> None:
        """Replace the whole test definition."""
        config, event = editing_service.replace_test(config)
        self._set(
            {
                "test_config": config,
                "is_dirty": True,
                "yaml_source": serialize_test(config),
                "selection": Selection(),
            },
            event,
        )

    # =========================================================================
    # Selection
    # =========================================================================

    def set_selection(self, task_ids: Sequence[str], primary_task_id: str | None = None) -> None:
        self._set({"selection": selection.select(task_ids, primary_task_id)})

    def select_test_header(self) -> None:
        self._set({"selection": selection.select_test_header()})

    def add_to_selection(self, task_id: str) -> None:
        self._set({"selection": selection.add(self._state.selection, task_id)})

    def toggle_selection(self, task_id: str) -> None:
        self._set({"selection": selection.toggle(self._state.selection, task_id)})

    def remove_from_selection(self, task_ids: str | Iterable[str]) -> None:
        if isinstance(task_ids, str):
            task_ids = [task_ids]
        self._set({"selection": selection.discard(self._state.selection, task_ids)})

    def clear_selection(self) -> None:
        self._set({"selection": selection.clear()})

    def select_all(self) -> None:
        """Select every task in both forests, main first."""
        config = self.test_config
        task_ids = get_all_task_ids(config.tasks) + get_all_task_ids(config.cleanup_tasks)
        self._set({"selection": selection.select(task_ids)})

    # =========================================================================
    # Views and YAML
    # =========================================================================

    def _reject_yaml(self, error: str) -> bool:
        logger.info(f"Rejected YAML: {error}")
        self._set({"validation_errors": (ValidationFinding(message=error),)})
        return False

    def set_active_view(self, view: ActiveView) -> bool:
        """Switch views, syncing through YAML at the boundary of the YAML view.

        Entering the YAML view regenerates the source from the tree. Leaving
        it parses the source; if parsing fails the store stays in the YAML
        view with a finding and returns False.
        """
        current = self._state.active_view
        if view == "yaml" and current != "yaml":
            self._set({"active_view": view, "yaml_source": serialize_test(self.test_config)})
            return True

        if current == "yaml" and view != "yaml":
            result = deserialize_test(self._state.yaml_source)
            if isinstance(result, Err):
                return self._reject_yaml(result.error)
            config, event = editing_service.replace_test(result.value)
            self._set(
                {
                    "active_view": view,
                    "test_config": config,
                    "validation_errors": (),
                    "selection": Selection(),
                },
                event,
            )
            return True

        self._set({"active_view": view})
        return True

    def set_yaml_source(self, text: str) -> None:
        self._set({"yaml_source": text, "is_dirty": True})

    def sync_to_yaml(self) -> None:
        self._set({"yaml_source": serialize_test(self.test_config)})

    def sync_from_yaml(self) -> bool:
        """Rebuild the tree from the YAML source; keeps the tree on failure."""
        result = deserialize_test(self._state.yaml_source)
        if isinstance(result, Err):
            return self._reject_yaml(result.error)
        config, event = editing_service.replace_test(result.value)
        self._set(
            {
                "test_config": config,
                "validation_errors": (),
                "is_dirty": True,
                "selection": Selection(),
            },
            event,
        )
        return True

    def load_from_yaml(self, text: str) -> bool:
        """Start a clean session from YAML text."""
        result = deserialize_test(text)
        if isinstance(result, Err):
            return self._reject_yaml(result.error)
        config, event = editing_service.replace_test(result.value)
        self._set(
            {
                "test_config": config,
                "yaml_source": text,
                "source_test_id": None,
                "is_dirty": False,
                "validation_errors": (),
                "selection": Selection(),
            },
            event,
        )
        return True

    def load_test_details(self, details: Mapping[str, Any]) -> bool:
        """Start a clean session from a test-details payload."""
        result = config_from_test_details(details)
        if isinstance(result, Err):
            return self._reject_yaml(result.error)
        config, event = editing_service.replace_test(result.value)
        self._set(
            {
                "test_config": config,
                "yaml_source": serialize_test(config),
                "source_test_id": config.id,
                "is_dirty": False,
                "validation_errors": (),
                "selection": Selection(),
            },
            event,
        )
        return True

    def reset(self) -> None:
        """Return to an empty "New Test"."""
        config, event = editing_service.replace_test(TestConfig())
        self._set(
            {
                "test_config": config,
                "yaml_source": "",
                "source_test_id": None,
                "is_dirty": False,
                "validation_errors": (),
                "selection": Selection(),
                "active_view": "list",
            },
            event,
        )

    def export_yaml(self) -> str:
        return serialize_test(self.test_config)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(
        self,
        descriptors: DescriptorRegistry | None = None,
        for_save: bool = False,
    ) -> list[ValidationFinding]:
        """Validate the test and keep the findings on the state.

        Uses the attached registry when none is given, and the built-in glue
        descriptors when the store has none either.
        """
        registry = descriptors if descriptors is not None else self._descriptors
        if registry is None:
            registry = DescriptorRegistry(builtin_descriptors())
        findings = validate_test(self.test_config, registry, for_save=for_save)
        self._set({"validation_errors": tuple(findings)})
        return findings

    def clear_validation_errors(self) -> None:
        self._set({"validation_errors": ()})
