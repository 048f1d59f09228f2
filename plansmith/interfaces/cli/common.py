"""Shared utilities for plansmith CLI commands.

This module provides common utilities used across CLI commands:
- Formatted output helpers (error, success, info)
- Loading and saving test documents, exiting on failure
- Task address parsing and resolution
- Tree rendering with rich
"""

from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from plansmith.domain.descriptors import DescriptorRegistry
from plansmith.domain.shared import Err
from plansmith.domain.task import ForestKind, TaskNode, TestConfig, get_slot_label
from plansmith.domain.types import TaskAddress
from plansmith.global_config import load_settings
from plansmith.infrastructure.storage import DescriptorRepository, TestRepository


def print_error(msg: str) -> None:
    """Print a formatted error message.

    Args:
        msg: Error message to display
    """
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    """Print a formatted success message.

    Args:
        msg: Success message to display
    """
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def print_warning(msg: str) -> None:
    """Print a formatted warning message.

    Args:
        msg: Warning message to display
    """
    typer.echo(typer.style(f"Warning: {msg}", fg=typer.colors.YELLOW), err=True)


def print_separator(char: str = "=", width: int = 60) -> None:
    typer.echo(char * width)


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with separators.

    Args:
        title: Header title text
        width: Width of the separator lines
    """
    print_separator("=", width)
    typer.echo(title)
    print_separator("=", width)


# =============================================================================
# Loading and Saving
# =============================================================================


def load_test(path: Path) -> TestConfig:
    """Load a test document or exit with an error.

    Raises:
        typer.Exit: If the file cannot be read or parsed.
    """
    result = TestRepository(path.parent).load_file(path)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    return result.value


def save_test(path: Path, config: TestConfig) -> None:
    """Write a test document or exit with an error."""
    result = TestRepository(path.parent).save_file(path, config)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)


def load_registry(descriptors: Path | None = None) -> DescriptorRegistry:
    """Build the descriptor registry from a catalog (or the configured one).

    Raises:
        typer.Exit: If the catalog cannot be loaded.
    """
    if descriptors is None:
        configured = load_settings().descriptors_file
        descriptors = Path(configured).expanduser() if configured else None

    result = DescriptorRepository().load_registry(descriptors)
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    return result.value


# =============================================================================
# Task Addresses
# =============================================================================


def parse_address(text: str) -> TaskAddress:
    """Parse a ``[main:|cleanup:]seg.seg`` address or exit."""
    try:
        return TaskAddress.from_string(text)
    except ValueError:
        print_error(f"Invalid address '{text}' (expected e.g. main:0.1 or cleanup:2)")
        raise typer.Exit(1)


def resolve_task(config: TestConfig, address: TaskAddress) -> TaskNode:
    """Find the task at an address or exit."""
    result = address.resolve(config.forest(address.forest))
    if isinstance(result, Err):
        print_error(result.error)
        raise typer.Exit(1)
    return result.value


def parse_assignments(items: list[str]) -> dict[str, Any]:
    """Parse ``KEY=VALUE`` pairs; values are read as YAML scalars.

    Raises:
        typer.Exit: If an item has no ``=``.
    """
    values: dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            print_error(f"Expected KEY=VALUE, got '{item}'")
            raise typer.Exit(1)
        try:
            values[key] = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            values[key] = raw
    return values


# =============================================================================
# Rendering
# =============================================================================


def task_label(
    node: TaskNode,
    address: TaskAddress,
    registry: DescriptorRegistry | None = None,
    slot_label: str | None = None,
) -> Text:
    """One-line description of a task for tree output."""
    label = Text()
    label.append(str(address), style="dim")
    label.append(" ")
    if slot_label:
        label.append(f"{slot_label}: ", style="magenta")
    label.append(node.task_type, style="bold")
    if node.title:
        label.append(f' "{node.title}"')
    if node.task_id:
        label.append(f" #{node.task_id}", style="cyan")
    if node.if_condition:
        label.append(f" if {node.if_condition}", style="yellow")
    if registry is not None and node.task_type not in registry:
        label.append(" (unknown type)", style="red")
    return label


def _add_task(
    branch: Tree,
    node: TaskNode,
    address: TaskAddress,
    registry: DescriptorRegistry | None,
    slot_label: str | None = None,
) -> None:
    child_branch = branch.add(task_label(node, address, registry, slot_label))
    for i, child in enumerate(node.children):
        _add_task(child_branch, child, address.child(str(i)), registry)
    for slot_name, child in node.named_children.items():
        label = get_slot_label(node.task_type, slot_name)
        _add_task(child_branch, child, address.child(slot_name), registry, label)


def build_tree(config: TestConfig, registry: DescriptorRegistry | None = None) -> Tree:
    """Render both forests of a test as a rich tree."""
    title = Text(config.name or "(unnamed test)", style="bold")
    if config.id:
        title.append(f" [{config.id}]", style="dim")
    root = Tree(title)

    for kind in ForestKind:
        forest = config.forest(kind)
        branch = root.add(Text(f"{kind.value} tasks ({len(forest)})", style="green"))
        for i, node in enumerate(forest):
            _add_task(branch, node, TaskAddress(forest=kind, segments=(str(i),)), registry)
    return root


def print_tree(config: TestConfig, registry: DescriptorRegistry | None = None) -> None:
    Console().print(build_tree(config, registry))


__all__ = [
    "print_error",
    "print_success",
    "print_info",
    "print_warning",
    "print_separator",
    "print_header",
    "load_test",
    "save_test",
    "load_registry",
    "parse_address",
    "resolve_task",
    "parse_assignments",
    "task_label",
    "build_tree",
    "print_tree",
]
