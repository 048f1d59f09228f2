"""CLI command groups for plansmith.

Command groups:
- test: Whole-document commands (show, validate, format, layout, new, list, store)
- task: Task editing commands (list, add, remove, move, duplicate, update)

Each command group is a Typer app that gets registered
with the main app using app.add_typer().
"""

from plansmith.interfaces.cli.commands import task, test

__all__ = ["test", "task"]
