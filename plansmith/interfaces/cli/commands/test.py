"""Test document CLI commands.

Commands that work on a whole test document (show, validate, format,
layout, new) and on the tests stored in the tests directory (list, store).
"""

from pathlib import Path

import typer

from plansmith.application.validation import has_errors, validate_test
from plansmith.domain.shared import Err
from plansmith.domain.task import TestConfig, count_tasks, get_max_depth
from plansmith.global_config import get_tests_dir, load_settings
from plansmith.infrastructure.serialization import format_yaml, validate_yaml_syntax
from plansmith.infrastructure.storage import FileStorage, TestRepository
from plansmith.interfaces.cli.common import (
    load_registry,
    load_test,
    parse_address,
    print_error,
    print_header,
    print_info,
    print_success,
    print_tree,
    print_warning,
    resolve_task,
    save_test,
)
from plansmith.layout import compute_builder_layout

app = typer.Typer(help="Test document commands")


# =============================================================================
# Commands
# =============================================================================


@app.command("show")
def show(
    file: Path = typer.Argument(..., help="Test YAML file"),
    descriptors: Path | None = typer.Option(
        None, "--descriptors", "-d", help="Task descriptor catalog (YAML or JSON)"
    ),
) -> None:
    """Show a test as a tree with task addresses.

    Example:
        plansmith test show smoke.yaml
    """
    config = load_test(file)
    registry = load_registry(descriptors)

    print_header(f"TEST: {config.name}")
    if config.id:
        typer.echo(f"Id:       {config.id}")
    if config.timeout:
        typer.echo(f"Timeout:  {config.timeout}")
    if config.test_vars:
        typer.echo(f"Vars:     {', '.join(sorted(config.test_vars))}")
    typer.echo(
        f"Tasks:    {count_tasks(config.tasks)} main, "
        f"{count_tasks(config.cleanup_tasks)} cleanup "
        f"(max depth {max(get_max_depth(config.tasks), get_max_depth(config.cleanup_tasks))})"
    )
    typer.echo("")
    print_tree(config, registry)


@app.command("validate")
def validate(
    file: Path = typer.Argument(..., help="Test YAML file"),
    descriptors: Path | None = typer.Option(
        None, "--descriptors", "-d", help="Task descriptor catalog (YAML or JSON)"
    ),
    for_save: bool = typer.Option(
        False, "--for-save", help="Also require what saving needs (a test id)"
    ),
) -> None:
    """Check a test for unknown task types and missing metadata.

    Exits with status 1 if any error is found; warnings alone pass.
    """
    config = load_test(file)
    registry = load_registry(descriptors)
    findings = validate_test(config, registry, for_save=for_save)

    for finding in findings:
        where = f" [{finding.task_id}]" if finding.task_id else ""
        if finding.severity == "error":
            print_error(f"{finding.message}{where}")
        else:
            print_warning(f"{finding.message}{where}")

    if has_errors(findings):
        raise typer.Exit(1)
    print_success(f"{file} is valid")


@app.command("format")
def format_file(
    file: Path = typer.Argument(..., help="YAML file to format"),
    check: bool = typer.Option(
        False, "--check", help="Only report whether the file would change"
    ),
) -> None:
    """Rewrite a YAML file with consistent styling."""
    storage = FileStorage()
    loaded = storage.load_text(file)
    if isinstance(loaded, Err):
        print_error(loaded.error)
        raise typer.Exit(1)

    syntax = validate_yaml_syntax(loaded.value)
    if isinstance(syntax, Err):
        print_error(syntax.error)
        raise typer.Exit(1)

    formatted = format_yaml(loaded.value)
    if formatted == loaded.value:
        print_info(f"{file} already formatted")
        return
    if check:
        print_warning(f"{file} would be reformatted")
        raise typer.Exit(1)

    saved = storage.save_text(file, formatted)
    if isinstance(saved, Err):
        print_error(saved.error)
        raise typer.Exit(1)
    print_success(f"Formatted {file}")


@app.command("layout")
def layout(
    file: Path = typer.Argument(..., help="Test YAML file"),
    descriptors: Path | None = typer.Option(
        None, "--descriptors", "-d", help="Task descriptor catalog (YAML or JSON)"
    ),
    selected: str | None = typer.Option(
        None, "--select", "-s", help="Address of the task to mark as selected"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full layout as JSON"),
) -> None:
    """Compute the builder diagram of a test.

    Prints one line per diagram node (kind, id, position, size), or the
    full layout with --json.
    """
    config = load_test(file)
    registry = load_registry(descriptors)
    selected_id = resolve_task(config, parse_address(selected)).id if selected else None

    result = compute_builder_layout(
        config.tasks,
        config.cleanup_tasks,
        descriptors=registry,
        selected_task_id=selected_id,
        settings=load_settings().layout,
    )

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    typer.echo(f"Diagram {result.width:g} x {result.height:g}, {len(result.nodes)} nodes")
    for node in result.nodes:
        flags = []
        if node.is_selected:
            flags.append("selected")
        if node.disabled:
            flags.append("disabled")
        if node.known_type is False:
            flags.append("unknown")
        suffix = f" ({', '.join(flags)})" if flags else ""
        typer.echo(
            f"{node.kind:<10} {node.id:<48} "
            f"x={node.x:g} y={node.y:g} w={node.width:g} h={node.height:g}{suffix}"
        )


@app.command("new")
def new(
    file: Path = typer.Argument(..., help="Test YAML file to create"),
    name: str | None = typer.Option(None, "--name", "-n", help="Test name"),
    test_id: str | None = typer.Option(None, "--id", help="Test id"),
    timeout: str | None = typer.Option(None, "--timeout", "-t", help="Test timeout, e.g. 30m"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Create an empty test document."""
    if file.exists() and not force:
        print_error(f"{file} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    config = TestConfig(
        id=test_id or None,
        name=name or load_settings().default_test_name,
        timeout=timeout or None,
    )
    save_test(file, config)
    print_success(f"Created {file}")


# =============================================================================
# Stored Tests
# =============================================================================


@app.command("list")
def list_stored() -> None:
    """List the tests stored in the tests directory."""
    tests_dir = get_tests_dir(load_settings())
    result = TestRepository(tests_dir).list_ids()
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)

    if not result.value:
        print_info(f"No tests in {tests_dir}")
        return
    for test_id in result.value:
        typer.echo(test_id)


@app.command("store")
def store(
    file: Path = typer.Argument(..., help="Test YAML file"),
    force: bool = typer.Option(False, "--force", "-f", help="Replace a stored test"),
) -> None:
    """Copy a test into the tests directory under its id."""
    config = load_test(file)
    repository = TestRepository(get_tests_dir(load_settings()))
    if config.id and repository.exists(config.id) and not force:
        print_error(f"Test {config.id} is already stored (use --force to replace)")
        raise typer.Exit(1)

    result = repository.save(config)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    print_success(f"Stored {config.id} at {result.value}")
