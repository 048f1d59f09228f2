"""Task editing CLI commands.

Commands that edit the tasks of a test document in place. Tasks are named
by address: an optional forest prefix, then one segment per level, each a
child index or a slot name (``main:0.1``, ``cleanup:2.backgroundTask``).
Every edit goes through the editing service, so the structural rules of
the builder apply here too.
"""

from pathlib import Path

import typer

from plansmith.application import editing_service
from plansmith.domain.shared import Err, Result
from plansmith.domain.task import (
    UPDATABLE_FIELDS,
    ForestKind,
    TestConfig,
    create_task,
)
from plansmith.domain.types import TaskAddress, address_of
from plansmith.interfaces.cli.common import (
    load_registry,
    load_test,
    parse_address,
    parse_assignments,
    print_error,
    print_success,
    print_tree,
    print_warning,
    resolve_task,
    save_test,
)

app = typer.Typer(help="Task editing commands")


# =============================================================================
# Helpers
# =============================================================================


def _resolve_container(
    config: TestConfig,
    target: str | None,
    default_forest: ForestKind,
) -> tuple[ForestKind, str | None]:
    """Turn a container address into (forest, parent id); a bare forest means its root."""
    if target is None:
        return default_forest, None
    address = parse_address(target)
    if not address:
        return address.forest, None
    return address.forest, resolve_task(config, address).id


def _apply(
    file: Path,
    result: Result[tuple[TestConfig, object], str],
    task_id: str,
    verb: str,
) -> None:
    """Save an edit and report where the task ended up, or exit with the refusal."""
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)

    config, _ = result.value
    save_test(file, config)
    for kind in ForestKind:
        address = address_of(config.forest(kind), kind, task_id)
        if address is not None:
            print_success(f"{verb} {address}")
            return
    print_success(verb)


def _forest_option(cleanup: bool) -> ForestKind:
    return ForestKind.CLEANUP if cleanup else ForestKind.MAIN


# =============================================================================
# Commands
# =============================================================================


@app.command("list")
def list_tasks(
    file: Path = typer.Argument(..., help="Test YAML file"),
    descriptors: Path | None = typer.Option(
        None, "--descriptors", "-d", help="Task descriptor catalog (YAML or JSON)"
    ),
) -> None:
    """List all tasks with their addresses."""
    config = load_test(file)
    print_tree(config, load_registry(descriptors))


@app.command("add")
def add(
    file: Path = typer.Argument(..., help="Test YAML file"),
    task_type: str = typer.Argument(..., help="Task type, e.g. run_tasks"),
    parent: str | None = typer.Option(
        None, "--parent", "-p", help="Container address (default: forest root)"
    ),
    index: int | None = typer.Option(
        None, "--index", "-i", help="Position (slot position for named slots); default: append"
    ),
    cleanup: bool = typer.Option(False, "--cleanup", help="Add to the cleanup tasks"),
    title: str | None = typer.Option(None, "--title", help="Task title"),
    task_id: str | None = typer.Option(None, "--task-id", help="User task id for references"),
) -> None:
    """Add a new task.

    Example:
        plansmith task add smoke.yaml run_tasks
        plansmith task add smoke.yaml sleep --parent main:0 --index 0
    """
    config = load_test(file)
    forest, parent_id = _resolve_container(config, parent, _forest_option(cleanup))

    node = create_task(task_type, title)
    if task_id:
        node = node.model_copy(update={"task_id": task_id})

    result = editing_service.add_task(config, forest, node, parent_id, index)
    _apply(file, result, node.id, f"Added {task_type} at")


@app.command("remove")
def remove(
    file: Path = typer.Argument(..., help="Test YAML file"),
    address: str = typer.Argument(..., help="Task address"),
) -> None:
    """Remove a task and everything inside it."""
    config = load_test(file)
    node = resolve_task(config, parse_address(address))

    result = editing_service.remove_task(config, node.id)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)

    updated, event = result.value
    save_test(file, updated)
    print_success(f"Removed {address} ({len(event.removed_ids)} task(s))")


@app.command("move")
def move(
    file: Path = typer.Argument(..., help="Test YAML file"),
    address: str = typer.Argument(..., help="Address of the task to move"),
    to: str | None = typer.Option(
        None,
        "--to",
        "-t",
        help="Target container address; 'main:' or 'cleanup:' for a forest root "
        "(default: root of the task's forest)",
    ),
    index: int | None = typer.Option(
        None, "--index", "-i", help="Target position, counted after the task is taken out"
    ),
) -> None:
    """Move a task to another position, container or forest."""
    config = load_test(file)
    source = parse_address(address)
    node = resolve_task(config, source)
    dest, parent_id = _resolve_container(config, to, source.forest)

    if dest == source.forest:
        result = editing_service.move_task(config, dest, node.id, parent_id, index)
    else:
        result = editing_service.move_task_across(
            config, node.id, source.forest, dest, parent_id, index
        )
    _apply(file, result, node.id, f"Moved {address} to")


@app.command("duplicate")
def duplicate(
    file: Path = typer.Argument(..., help="Test YAML file"),
    address: str = typer.Argument(..., help="Task address"),
) -> None:
    """Copy a task (with everything inside it) right after itself."""
    config = load_test(file)
    node = resolve_task(config, parse_address(address))

    result = editing_service.duplicate_task(config, node.id)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    _apply(file, result, result.value[1].task_id, "Duplicated to")


@app.command("update")
def update(
    file: Path = typer.Argument(..., help="Test YAML file"),
    address: str = typer.Argument(..., help="Task address"),
    title: str | None = typer.Option(None, "--title", help="New title ('' clears)"),
    task_id: str | None = typer.Option(None, "--task-id", help="New user task id ('' clears)"),
    timeout: str | None = typer.Option(None, "--timeout", help="New timeout ('' clears)"),
    condition: str | None = typer.Option(None, "--if", help="New run condition ('' clears)"),
    config_items: list[str] = typer.Option(
        [], "--config", "-c", help="Config value as KEY=VALUE (repeatable)"
    ),
    var_items: list[str] = typer.Option(
        [], "--var", help="Config variable as KEY=EXPRESSION (repeatable)"
    ),
) -> None:
    """Change fields of a task; config and variables are merged in."""
    config = load_test(file)
    target: TaskAddress = parse_address(address)
    node = resolve_task(config, target)

    updates: dict[str, object] = {}
    for field, value in (
        ("title", title),
        ("task_id", task_id),
        ("timeout", timeout),
        ("if_condition", condition),
    ):
        if value is not None:
            updates[field] = value or None
    if config_items:
        updates["config"] = {**node.config, **parse_assignments(config_items)}
    if var_items:
        new_vars = {key: str(value) for key, value in parse_assignments(var_items).items()}
        updates["config_vars"] = {**node.config_vars, **new_vars}

    if not updates:
        print_warning(f"Nothing to update (options: {', '.join(UPDATABLE_FIELDS)})")
        return

    result = editing_service.update_task(config, node.id, updates)
    _apply(file, result, node.id, "Updated")
