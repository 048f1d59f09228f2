"""Global configuration storage for plansmith.

Stores user preferences (descriptor catalog, tests directory, layout sizes)
in ~/.plansmith/config.json. Set PLANSMITH_HOME to use another directory.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

from plansmith.layout import LayoutSettings

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "PLANSMITH_HOME"


class BuilderSettings(BaseModel):
    """User preferences for the builder."""

    default_test_name: str = "New Test"
    descriptors_file: str | None = None
    tests_dir: str | None = None
    log_level: str = "WARNING"
    layout: LayoutSettings = Field(default_factory=LayoutSettings)


def get_config_dir() -> Path:
    """Get the plansmith config directory."""
    override = os.environ.get(HOME_ENV_VAR)
    config_dir = Path(override) if override else Path.home() / ".plansmith"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def load_settings() -> BuilderSettings:
    """Load user settings, falling back to defaults."""
    config_file = get_config_dir() / "config.json"
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
            return BuilderSettings(**data)
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable settings file {config_file}: {e}")
    return BuilderSettings()  # defaults


def save_settings(settings: BuilderSettings) -> None:
    """Save user settings."""
    config_file = get_config_dir() / "config.json"
    config_file.write_text(
        json.dumps(settings.model_dump(), indent=2),
        encoding="utf-8",
    )


def get_tests_dir(settings: BuilderSettings) -> Path:
    """Directory where tests are stored by id."""
    if settings.tests_dir:
        return Path(settings.tests_dir).expanduser()
    return get_config_dir() / "tests"
