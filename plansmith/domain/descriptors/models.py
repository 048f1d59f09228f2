"""Task descriptor models.

A descriptor is the read-only schema an external catalog publishes for one
task type. The editor only needs to know whether a type exists; the config
schema and outputs are carried for form renderers and variable suggestions.
"""

from typing import Any

from pydantic import BaseModel, Field


class TaskOutputField(BaseModel):
    """A named output a task publishes for later variable references."""

    name: str
    type: str = "string"
    description: str = ""


class TaskDescriptor(BaseModel):
    """Schema and metadata for one task type."""

    name: str
    aliases: list[str] = Field(default_factory=list)
    description: str = ""
    category: str = "general"
    config_schema: dict[str, Any] = Field(default_factory=dict, alias="configSchema")
    outputs: list[TaskOutputField] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)

    model_config = {"frozen": True, "populate_by_name": True}
