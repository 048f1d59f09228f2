"""YAML serialization of test plans.

Maps a :class:`TestConfig` to the YAML test document and back. Children of
glue tasks live in the task's ``config`` on the YAML side (``tasks`` for
ordered containers, ``task`` for single-slot ones, one key per slot for
named-slot ones) and in ``children``/``named_children`` on the model side.

Task ids are not part of the document; every load assigns fresh ones.
Deserialization never raises: malformed input yields ``Err(message)``.
"""

import logging
from collections.abc import Mapping
from typing import Any

import yaml
from pydantic import ValidationError

from plansmith.domain.shared.result import Err, Ok, Result
from plansmith.domain.task import (
    ContainerKind,
    TaskNode,
    TestConfig,
    generate_task_id,
    get_glue_spec,
)

logger = logging.getLogger(__name__)

DEFAULT_TEST_NAME = "New Test"
UNTITLED_TEST_NAME = "Untitled Test"

# Keep long expressions on one line.
_NO_WRAP = float("inf")


def _dump(document: Any) -> str:
    return yaml.safe_dump(
        document,
        indent=2,
        width=_NO_WRAP,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


# =============================================================================
# Model -> Document
# =============================================================================


def task_to_document(task: TaskNode) -> dict[str, Any]:
    """Convert a task (and its subtree) to its YAML document form."""
    document: dict[str, Any] = {"name": task.task_type}

    if task.task_id:
        document["id"] = task.task_id
    if task.title:
        document["title"] = task.title
    if task.timeout:
        document["timeout"] = task.timeout
    if task.if_condition:
        document["if"] = task.if_condition

    config: dict[str, Any] = dict(task.config)
    spec = get_glue_spec(task.task_type)
    if spec is not None:
        if spec.kind is ContainerKind.ORDERED and task.children:
            config[spec.children_key] = [task_to_document(child) for child in task.children]
        elif spec.kind is ContainerKind.SINGLE and task.children:
            config[spec.children_key] = task_to_document(task.children[0])
        elif spec.kind is ContainerKind.NAMED:
            for slot_name in spec.slot_names:
                if slot_name in task.named_children:
                    config[slot_name] = task_to_document(task.named_children[slot_name])

    if config:
        document["config"] = config
    if task.config_vars:
        document["configVars"] = dict(task.config_vars)

    return document


def test_to_document(config: TestConfig) -> dict[str, Any]:
    """Convert a test definition to its YAML document form."""
    document: dict[str, Any] = {"name": config.name}

    if config.id:
        document["id"] = config.id
    if config.timeout:
        document["timeout"] = config.timeout
    if config.test_vars:
        document["config"] = dict(config.test_vars)
    if config.tasks:
        document["tasks"] = [task_to_document(task) for task in config.tasks]
    if config.cleanup_tasks:
        document["cleanupTasks"] = [task_to_document(task) for task in config.cleanup_tasks]

    return document


test_to_document.__test__ = False  # type: ignore[attr-defined]


def serialize_test(config: TestConfig) -> str:
    """Serialize a test definition to YAML text."""
    return _dump(test_to_document(config))


def serialize_task(task: TaskNode) -> str:
    """Serialize a single task (with its subtree) to YAML text."""
    return _dump(task_to_document(task))


# =============================================================================
# Document -> Model
# =============================================================================


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{where}: expected a mapping")
    return dict(value)


def task_from_document(document: Any, where: str = "task") -> TaskNode:
    """Build a task (and its subtree) from its YAML document form.

    Args:
        document: Parsed YAML mapping for one task
        where: Location used in error messages (e.g. ``tasks[2]``)

    Returns:
        The task with fresh ids throughout

    Raises:
        ValueError: If the document is not a well-formed task (pydantic's
            ValidationError is a ValueError too)
    """
    if not isinstance(document, Mapping):
        raise ValueError(f"{where}: task must be a mapping")

    task_type = document.get("name")
    if not isinstance(task_type, str) or not task_type:
        raise ValueError(f"{where}: task is missing its 'name'")

    config = _mapping(document.get("config"), f"{where}.config")
    config_vars = {
        str(key): str(value)
        for key, value in _mapping(document.get("configVars"), f"{where}.configVars").items()
    }

    children: list[TaskNode] = []
    named_children: dict[str, TaskNode] = {}
    spec = get_glue_spec(task_type)
    if spec is not None:
        if spec.kind is ContainerKind.ORDERED:
            raw_children = config.pop(spec.children_key, None)
            if raw_children is not None:
                if not isinstance(raw_children, list):
                    raise ValueError(f"{where}.config.{spec.children_key}: expected a list of tasks")
                children = [
                    task_from_document(child, f"{where}.config.{spec.children_key}[{i}]")
                    for i, child in enumerate(raw_children)
                ]
        elif spec.kind is ContainerKind.SINGLE:
            raw_child = config.pop(spec.children_key, None)
            if raw_child is not None:
                children = [task_from_document(raw_child, f"{where}.config.{spec.children_key}")]
        elif spec.kind is ContainerKind.NAMED:
            for slot_name in spec.slot_names:
                raw_child = config.pop(slot_name, None)
                if raw_child is not None:
                    named_children[slot_name] = task_from_document(
                        raw_child, f"{where}.config.{slot_name}"
                    )

    return TaskNode(
        id=generate_task_id(),
        task_type=task_type,
        task_id=_optional_str(document.get("id")),
        title=_optional_str(document.get("title")),
        timeout=_optional_str(document.get("timeout")),
        if_condition=_optional_str(document.get("if")),
        config=config,
        config_vars=config_vars,
        children=children,
        named_children=named_children,
    )


def _task_list(value: Any, where: str) -> list[TaskNode]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list of tasks")
    return [task_from_document(item, f"{where}[{i}]") for i, item in enumerate(value)]


def config_from_document(document: Any) -> Result[TestConfig, str]:
    """Build a test definition from a parsed YAML document.

    Root-level ``configVars`` are merged into the test variables.

    Returns:
        Ok(TestConfig), or Err(str) describing the first problem found
    """
    if not isinstance(document, Mapping):
        return Err("YAML must be an object")

    try:
        name = document.get("name")
        test_vars = _mapping(document.get("config"), "config")
        test_vars.update(_mapping(document.get("configVars"), "configVars"))
        config = TestConfig(
            id=_optional_str(document.get("id")),
            name=UNTITLED_TEST_NAME if name is None else str(name),
            timeout=_optional_str(document.get("timeout")),
            test_vars=test_vars,
            tasks=_task_list(document.get("tasks"), "tasks"),
            cleanup_tasks=_task_list(document.get("cleanupTasks"), "cleanupTasks"),
        )
    except ValidationError as e:
        return Err(f"Invalid task structure: {e}")
    except ValueError as e:
        return Err(str(e))
    except RecursionError:
        return Err("Task nesting is too deep")

    return Ok(config)


def deserialize_test(text: str) -> Result[TestConfig, str]:
    """Parse YAML text into a test definition.

    Blank text yields an empty "New Test". The caller keeps its current
    forests when this returns ``Err``.

    Args:
        text: YAML source

    Returns:
        Ok(TestConfig) on success, Err(str) with a readable message otherwise
    """
    if not text or not text.strip():
        return Ok(TestConfig(name=DEFAULT_TEST_NAME))

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning(f"Rejected YAML test document: {e}")
        return Err(f"Invalid YAML: {e}")

    result = config_from_document(document)
    if isinstance(result, Err):
        logger.warning(f"Rejected test document: {result.error}")
    return result


def deserialize_task(text: str) -> Result[TaskNode, str]:
    """Parse YAML text holding a single task."""
    try:
        return Ok(task_from_document(yaml.safe_load(text)))
    except yaml.YAMLError as e:
        return Err(f"Invalid YAML: {e}")
    except ValidationError as e:
        return Err(f"Invalid task structure: {e}")
    except ValueError as e:
        return Err(str(e))


# =============================================================================
# Helpers
# =============================================================================


def format_duration(seconds: int) -> str:
    """Render a timeout in seconds the way test documents write it."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    return f"{seconds // 3600}h"


def config_from_test_details(details: Mapping[str, Any]) -> Result[TestConfig, str]:
    """Build a test definition from a test-details API payload.

    The payload carries ``id``, ``name``, ``timeout`` in seconds and the raw
    test ``config`` (with ``tasks``, ``cleanupTasks`` and ``config``).
    """
    raw = details.get("config") or {}
    if not isinstance(raw, Mapping):
        return Err("Test details config must be an object")

    document: dict[str, Any] = {
        "id": details.get("id"),
        "name": details.get("name") or UNTITLED_TEST_NAME,
        "config": raw.get("config"),
        "tasks": raw.get("tasks"),
        "cleanupTasks": raw.get("cleanupTasks"),
    }
    timeout = details.get("timeout") or 0
    if isinstance(timeout, int) and timeout > 0:
        document["timeout"] = format_duration(timeout)

    return config_from_document(document)


def validate_yaml_syntax(text: str) -> Result[None, str]:
    """Check that text parses as YAML, without building a test."""
    if not text or not text.strip():
        return Ok(None)
    try:
        yaml.safe_load(text)
    except yaml.YAMLError as e:
        return Err(f"Invalid YAML: {e}")
    return Ok(None)


def format_yaml(text: str) -> str:
    """Re-emit YAML with consistent styling; unparsable text comes back as is."""
    try:
        return _dump(yaml.safe_load(text))
    except yaml.YAMLError:
        return text
