"""Result type for operations that can be refused without raising.

Editing a test plan is interactive: a drop onto an occupied slot or a move
into a task's own subtree is an expected outcome, not a crash. Operations
that can be refused return ``Ok(value)`` or ``Err(message)`` and leave the
caller to decide what a refusal means.

Example usage:
    >>> def parse_index(segment: str) -> Result[int, str]:
    ...     if not segment.isdigit():
    ...         return Err(f"Not an index: {segment}")
    ...     return Ok(int(segment))
    ...
    >>> result = parse_index("3")
    >>> if is_ok(result):
    ...     print(result.value)
    3
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Refused or failed outcome carrying an error (usually a message)."""

    error: E


# Using Union here as TypeVar aliases don't work with | syntax at runtime
Result = Union[Ok[T], Err[E]]  # noqa: UP007


def is_ok(result: Ok[T] | Err[E]) -> bool:
    """Return True if the result is ``Ok``."""
    return isinstance(result, Ok)


def is_err(result: Ok[T] | Err[E]) -> bool:
    """Return True if the result is ``Err``."""
    return isinstance(result, Err)


def map_result(result: Ok[T] | Err[E], fn: Callable[[T], U]) -> Ok[U] | Err[E]:
    """Transform the value of an ``Ok``; pass an ``Err`` through untouched.

    Args:
        result: The result to transform.
        fn: Function applied to the ``Ok`` value.

    Returns:
        ``Ok(fn(value))`` or the original ``Err``.
    """
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def flat_map(result: Ok[T] | Err[E], fn: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
    """Chain a second fallible step after a successful first one.

    Used to sequence checks such as "parent exists" then "slot is free"
    without nesting ``isinstance`` tests.

    Args:
        result: The result of the first step.
        fn: Next step, called with the ``Ok`` value.

    Returns:
        The result of ``fn`` or the original ``Err``.
    """
    if isinstance(result, Ok):
        return fn(result.value)
    return result


def unwrap_or(result: Ok[T] | Err[E], default: T) -> T:
    """Return the ``Ok`` value, or ``default`` for an ``Err``."""
    if isinstance(result, Ok):
        return result.value
    return default
