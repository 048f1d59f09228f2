"""CLI interface for plansmith using Typer.

This module provides the command-line interface for plansmith, which
edits and lays out YAML test plans outside the visual builder.

Usage:
    plansmith test show smoke.yaml       # Show the task tree with addresses
    plansmith test validate smoke.yaml   # Check task types and metadata
    plansmith task add smoke.yaml sleep  # Append a task to the main tasks
    plansmith task move smoke.yaml main:1 --to cleanup:

The CLI is structured as:
- app: Main Typer application
- commands/: Command groups (test, task)
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

import logging

import typer

from plansmith import __version__
from plansmith.global_config import load_settings

# Import command groups
from plansmith.interfaces.cli.commands import task, test

# Create the main Typer application
app = typer.Typer(
    name="plansmith",
    help="Edit and lay out YAML test plans",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"plansmith version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log debug output"),
) -> None:
    """plansmith - build test plans from nested tasks.

    Tasks live in two forests (main and cleanup) and are addressed by
    position, e.g. main:0.1 or cleanup:2.backgroundTask.
    """
    level = "DEBUG" if verbose else load_settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# =============================================================================
# Register Command Groups
# =============================================================================

app.add_typer(test.app, name="test")
app.add_typer(task.app, name="task")


__all__ = ["app"]
