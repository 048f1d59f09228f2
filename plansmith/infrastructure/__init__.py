"""Infrastructure layer for plansmith.

This module provides clean interfaces for I/O operations and the YAML
document format, returning Result types for explicit error handling.

Exports:
    Storage:
        - FileStorage: Low-level text, JSON and YAML file I/O
        - TestRepository: Test document persistence
        - DescriptorRepository: Task descriptor catalogs

    Serialization:
        - serialize_test / deserialize_test: YAML test documents
"""

from plansmith.infrastructure.serialization import (
    deserialize_test,
    serialize_test,
)
from plansmith.infrastructure.storage import (
    DescriptorRepository,
    FileStorage,
    TestRepository,
)

__all__ = [
    # Storage
    "FileStorage",
    "TestRepository",
    "DescriptorRepository",
    # Serialization
    "serialize_test",
    "deserialize_test",
]
