"""File storage with Result-based error handling.

Provides a thin wrapper around file I/O operations for text, JSON and YAML
data, returning Result types instead of raising exceptions.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from plansmith.domain.shared.result import Err, Ok, Result


class FileStorage:
    """Low-level file I/O with Result-based error handling.

    This class wraps basic load/save operations and returns Result types
    for explicit error handling. It does not contain any domain logic -
    just file I/O.

    Example:
        storage = FileStorage()
        result = storage.load_text(Path("smoke.yaml"))
        if isinstance(result, Ok):
            text = result.value
        else:
            print(f"Error: {result.error}")
    """

    def load_text(self, path: Path) -> Result[str, str]:
        """Load a UTF-8 text file.

        Args:
            path: Path to the file to read.

        Returns:
            Ok(str) if successful, Err(str) with error message if failed.
        """
        try:
            if not path.exists():
                return Err(f"File not found: {path}")
            return Ok(path.read_text(encoding="utf-8"))

        except PermissionError:
            return Err(f"Permission denied reading {path}")
        except UnicodeDecodeError as e:
            return Err(f"{path} is not UTF-8 text: {e}")
        except OSError as e:
            return Err(f"Error reading {path}: {e}")

    def save_text(self, path: Path, content: str) -> Result[None, str]:
        """Save text to a file, creating parent directories.

        Args:
            path: Path to the file to write.
            content: Text to write.

        Returns:
            Ok(None) if successful, Err(str) with error message if failed.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            return Ok(None)

        except PermissionError:
            return Err(f"Permission denied writing {path}")
        except OSError as e:
            return Err(f"Error writing {path}: {e}")

    def load_json(self, path: Path) -> Result[Any, str]:
        """Load JSON data from a file."""
        result = self.load_text(path)
        if isinstance(result, Err):
            return result
        try:
            return Ok(json.loads(result.value))
        except json.JSONDecodeError as e:
            return Err(f"Invalid JSON in {path}: {e}")

    def save_json(self, path: Path, data: Any, indent: int = 2) -> Result[None, str]:
        """Save JSON data to a file."""
        try:
            content = json.dumps(data, indent=indent)
        except TypeError as e:
            return Err(f"Data not JSON serializable: {e}")
        return self.save_text(path, content)

    def load_yaml(self, path: Path) -> Result[Any, str]:
        """Load YAML data from a file (safe loader)."""
        result = self.load_text(path)
        if isinstance(result, Err):
            return result
        try:
            return Ok(yaml.safe_load(result.value))
        except yaml.YAMLError as e:
            return Err(f"Invalid YAML in {path}: {e}")

    def load_structured(self, path: Path) -> Result[Any, str]:
        """Load JSON or YAML, chosen by file extension."""
        if path.suffix.lower() == ".json":
            return self.load_json(path)
        return self.load_yaml(path)
