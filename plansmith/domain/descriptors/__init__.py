"""Task descriptors - the task type catalog the editor consults.

Key Types:
    TaskDescriptor - Schema and metadata for one task type
    TaskOutputField - A named task output
    DescriptorRegistry - Lookup by name or alias
"""

from .models import TaskDescriptor, TaskOutputField
from .registry import DescriptorRegistry, builtin_descriptors

__all__ = [
    "TaskDescriptor",
    "TaskOutputField",
    "DescriptorRegistry",
    "builtin_descriptors",
]
