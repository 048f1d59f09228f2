"""Storage infrastructure for plansmith.

Provides file persistence for test documents and descriptor catalogs,
using Result types for explicit error handling.
"""

from plansmith.infrastructure.storage.file_storage import FileStorage
from plansmith.infrastructure.storage.repositories import (
    DescriptorRepository,
    TestRepository,
)

__all__ = [
    "FileStorage",
    "TestRepository",
    "DescriptorRepository",
]
