"""Shared domain utilities for plansmith.

This package provides common building blocks used across domain modules:

- Result type for refusals that are not exceptions
- Base domain event

Example usage:
    >>> from plansmith.domain.shared import Ok, Err, Result, is_ok
    >>>
    >>> def resolve_slot(names: list[str], index: int) -> Result[str, str]:
    ...     if not 0 <= index < len(names):
    ...         return Err(f"No slot at index {index}")
    ...     return Ok(names[index])
"""

from plansmith.domain.shared.events import DomainEvent
from plansmith.domain.shared.result import (
    Err,
    Ok,
    Result,
    flat_map,
    is_err,
    is_ok,
    map_result,
    unwrap_or,
)

__all__ = [
    # Result
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    "map_result",
    "flat_map",
    "unwrap_or",
    # Domain events
    "DomainEvent",
]
