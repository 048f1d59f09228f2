"""Repository implementations for test documents and task descriptors.

Provides repository classes that wrap file storage and the YAML
serializer, returning Result types for explicit error handling.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from plansmith.domain.descriptors import DescriptorRegistry, TaskDescriptor, builtin_descriptors
from plansmith.domain.shared.result import Err, Ok, Result
from plansmith.domain.task import TestConfig
from plansmith.infrastructure.serialization import deserialize_test, serialize_test
from plansmith.infrastructure.storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

TEST_SUFFIXES = (".yaml", ".yml")


class TestRepository:
    """Repository for test documents.

    Each test lives in ``<tests_dir>/<test id>.yaml``. Standalone files
    elsewhere can be read and written with ``load_file``/``save_file``.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, tests_dir: Path, storage: FileStorage | None = None) -> None:
        """Initialize the repository.

        Args:
            tests_dir: Directory holding one YAML document per test.
            storage: FileStorage instance to use. Creates new one if not provided.
        """
        self.tests_dir = tests_dir
        self._storage = storage or FileStorage()

    def path_for(self, test_id: str) -> Path:
        return self.tests_dir / f"{test_id}.yaml"

    def list_ids(self) -> Result[list[str], str]:
        """List the ids of all stored tests.

        Returns:
            Ok(list[str]) sorted by id (empty if the directory does not exist),
            Err(str) if the directory cannot be read.
        """
        if not self.tests_dir.exists():
            return Ok([])
        try:
            ids = {
                path.stem
                for path in self.tests_dir.iterdir()
                if path.is_file() and path.suffix in TEST_SUFFIXES
            }
            return Ok(sorted(ids))
        except PermissionError:
            return Err(f"Permission denied accessing {self.tests_dir}")
        except OSError as e:
            return Err(f"Error listing tests: {e}")

    def load_file(self, path: Path) -> Result[TestConfig, str]:
        """Load a test document from any path."""
        result = self._storage.load_text(path)
        if isinstance(result, Err):
            return result

        parsed = deserialize_test(result.value)
        if isinstance(parsed, Err):
            return Err(f"{path}: {parsed.error}")
        return parsed

    def save_file(self, path: Path, config: TestConfig) -> Result[None, str]:
        """Write a test document to any path."""
        return self._storage.save_text(path, serialize_test(config))

    def load(self, test_id: str) -> Result[TestConfig, str]:
        """Load a stored test by id."""
        for suffix in TEST_SUFFIXES:
            path = self.tests_dir / f"{test_id}{suffix}"
            if path.exists():
                return self.load_file(path)
        return Err(f"Test not found: {test_id}")

    def save(self, config: TestConfig) -> Result[Path, str]:
        """Store a test under its id.

        Returns:
            Ok(Path) of the written file, Err(str) if the test has no id or
            the write failed.
        """
        if not config.id:
            return Err("Test id is required to save")

        path = self.path_for(config.id)
        result = self.save_file(path, config)
        if isinstance(result, Err):
            return result
        logger.debug(f"Saved test {config.id} to {path}")
        return Ok(path)

    def exists(self, test_id: str) -> bool:
        return any((self.tests_dir / f"{test_id}{suffix}").exists() for suffix in TEST_SUFFIXES)

    def delete(self, test_id: str) -> Result[None, str]:
        """Delete a stored test."""
        for suffix in TEST_SUFFIXES:
            path = self.tests_dir / f"{test_id}{suffix}"
            if path.exists():
                try:
                    path.unlink()
                    return Ok(None)
                except OSError as e:
                    return Err(f"Error deleting {path}: {e}")
        return Err(f"Test not found: {test_id}")


class DescriptorRepository:
    """Repository for task descriptor catalogs.

    A catalog is a YAML or JSON file holding either a list of descriptors or
    a mapping with a ``descriptors`` list.
    """

    def __init__(self, storage: FileStorage | None = None) -> None:
        self._storage = storage or FileStorage()

    def load(self, path: Path) -> Result[list[TaskDescriptor], str]:
        """Load the descriptors of one catalog file."""
        result = self._storage.load_structured(path)
        if isinstance(result, Err):
            return result

        data = result.value
        if isinstance(data, dict):
            data = data.get("descriptors")
        if not isinstance(data, list):
            return Err(f"{path}: expected a list of task descriptors")

        try:
            return Ok([TaskDescriptor.model_validate(item) for item in data])
        except ValidationError as e:
            return Err(f"Invalid task descriptor in {path}: {e}")

    def load_registry(self, path: Path | None = None) -> Result[DescriptorRegistry, str]:
        """Build a registry of the built-in descriptors plus an optional catalog."""
        registry = DescriptorRegistry(builtin_descriptors())
        if path is None:
            return Ok(registry)

        result = self.load(path)
        if isinstance(result, Err):
            return result
        logger.debug(f"Loaded {len(result.value)} task descriptors from {path}")
        return Ok(registry.merged(result.value))
