"""Tests for user settings."""

import json

from plansmith.global_config import (
    BuilderSettings,
    get_config_dir,
    get_tests_dir,
    load_settings,
    save_settings,
)


class TestSettings:
    def test_config_dir_from_env(self, plansmith_home):
        assert get_config_dir() == plansmith_home
        assert plansmith_home.is_dir()

    def test_defaults_without_file(self):
        settings = load_settings()
        assert settings == BuilderSettings()
        assert settings.layout.node_width == 220

    def test_save_and_load(self):
        settings = BuilderSettings(default_test_name="Draft", log_level="DEBUG")
        settings.layout.node_width = 300
        save_settings(settings)
        loaded = load_settings()
        assert loaded.default_test_name == "Draft"
        assert loaded.log_level == "DEBUG"
        assert loaded.layout.node_width == 300

    def test_corrupt_file_falls_back(self, plansmith_home, caplog):
        (get_config_dir() / "config.json").write_text("{oops", encoding="utf-8")
        assert load_settings() == BuilderSettings()
        assert "Ignoring unreadable settings file" in caplog.text

    def test_wrong_types_fall_back(self):
        (get_config_dir() / "config.json").write_text(
            json.dumps({"layout": {"node_width": "wide"}}), encoding="utf-8"
        )
        assert load_settings() == BuilderSettings()

    def test_tests_dir(self, plansmith_home, tmp_path):
        assert get_tests_dir(BuilderSettings()) == plansmith_home / "tests"
        custom = BuilderSettings(tests_dir=str(tmp_path / "mine"))
        assert get_tests_dir(custom) == tmp_path / "mine"
