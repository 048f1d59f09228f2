"""Base domain event infrastructure.

Every committed edit to a test plan produces an immutable event describing
what changed. The builder store keeps them in order and hands each one to
its subscribers, so views and other collaborators can react without
diffing forests.

Example usage:
    >>> from plansmith.domain.shared.events import DomainEvent
    >>>
    >>> class TaskRenamed(DomainEvent):
    ...     task_id: str
    ...     title: str
    ...
    >>> event = TaskRenamed(task_id="task_1_ab12cd34", title="Wait for sync")
    >>> print(f"Event {event.event_id} occurred at {event.timestamp}")
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Subclasses add their own fields; every event gets a unique id and a
    UTC timestamp.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}
