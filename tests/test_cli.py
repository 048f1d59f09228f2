"""Tests for the plansmith CLI."""

import json

import pytest
from typer.testing import CliRunner

from plansmith import __version__
from plansmith.domain.task import TestConfig
from plansmith.infrastructure.serialization import deserialize_test, serialize_test
from plansmith.interfaces.cli import app

from .factories import background, shape, task

runner = CliRunner()


def read(path) -> TestConfig:
    return deserialize_test(path.read_text(encoding="utf-8")).value


@pytest.fixture
def plan_file(tmp_path, sample_config):
    path = tmp_path / "smoke.yaml"
    path.write_text(serialize_test(sample_config), encoding="utf-8")
    return path


class TestApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_verbose_flag_accepted(self, plan_file):
        result = runner.invoke(app, ["--verbose", "task", "list", str(plan_file)])
        assert result.exit_code == 0


class TestTestCommands:
    """Tests for the `test` command group."""

    def test_new_and_show(self, tmp_path):
        path = tmp_path / "new.yaml"
        result = runner.invoke(app, ["test", "new", str(path), "--name", "Checkout", "--id", "co"])
        assert result.exit_code == 0, result.output
        config = read(path)
        assert (config.name, config.id) == ("Checkout", "co")

        again = runner.invoke(app, ["test", "new", str(path)])
        assert again.exit_code == 1

        shown = runner.invoke(app, ["test", "show", str(path)])
        assert shown.exit_code == 0
        assert "TEST: Checkout" in shown.output
        assert "main tasks (0)" in shown.output

    def test_show_missing_file(self, tmp_path):
        result = runner.invoke(app, ["test", "show", str(tmp_path / "none.yaml")])
        assert result.exit_code == 1

    def test_show_lists_addresses(self, plan_file):
        result = runner.invoke(app, ["test", "show", str(plan_file)])
        assert result.exit_code == 0
        assert "main:1.foregroundTask" in result.output
        assert "cleanup:0.0" in result.output

    def test_validate(self, tmp_path, plan_file):
        assert runner.invoke(app, ["test", "validate", str(plan_file)]).exit_code == 1

        catalog = tmp_path / "catalog.yaml"
        catalog.write_text(
            "- name: sleep\n- name: http_request\n- name: check_status\n", encoding="utf-8"
        )
        result = runner.invoke(app, ["test", "validate", str(plan_file), "-d", str(catalog)])
        assert result.exit_code == 0, result.output
        assert "is valid" in result.output

    def test_validate_for_save(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("name: t\ntasks:\n- name: run_tasks\n", encoding="utf-8")
        assert runner.invoke(app, ["test", "validate", str(path)]).exit_code == 0
        assert runner.invoke(app, ["test", "validate", str(path), "--for-save"]).exit_code == 1

    def test_format(self, tmp_path):
        path = tmp_path / "messy.yaml"
        path.write_text("name:   t\ntasks: [{name: sleep}]\n", encoding="utf-8")
        assert runner.invoke(app, ["test", "format", str(path), "--check"]).exit_code == 1
        assert runner.invoke(app, ["test", "format", str(path)]).exit_code == 0
        assert path.read_text(encoding="utf-8") == "name: t\ntasks:\n- name: sleep\n"
        result = runner.invoke(app, ["test", "format", str(path), "--check"])
        assert result.exit_code == 0
        assert "already formatted" in result.output

    def test_format_rejects_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("a: [", encoding="utf-8")
        assert runner.invoke(app, ["test", "format", str(path)]).exit_code == 1
        assert path.read_text(encoding="utf-8") == "a: ["

    def test_layout_json(self, plan_file):
        result = runner.invoke(app, ["test", "layout", str(plan_file), "--json", "--select", "main:0"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        selected = [node for node in data["nodes"] if node["is_selected"]]
        assert len(selected) == 1
        assert selected[0]["task_type"] == "run_tasks"

    def test_layout_text(self, plan_file):
        result = runner.invoke(app, ["test", "layout", str(plan_file)])
        assert result.exit_code == 0
        assert result.output.startswith("Diagram ")
        assert "drop_zone" in result.output

    def test_store_and_list(self, plan_file, plansmith_home):
        assert "No tests" in runner.invoke(app, ["test", "list"]).output
        result = runner.invoke(app, ["test", "store", str(plan_file)])
        assert result.exit_code == 0, result.output
        assert (plansmith_home / "tests" / "smoke.yaml").exists()
        assert runner.invoke(app, ["test", "list"]).output.strip() == "smoke"
        assert runner.invoke(app, ["test", "store", str(plan_file)]).exit_code == 1
        assert runner.invoke(app, ["test", "store", str(plan_file), "--force"]).exit_code == 0


class TestTaskCommands:
    """Tests for the `task` command group."""

    def test_add_nested_then_list(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("name: t\n", encoding="utf-8")
        first = runner.invoke(app, ["task", "add", str(path), "run_tasks", "--title", "Group"])
        assert first.exit_code == 0, first.output
        assert "main:0" in first.output
        second = runner.invoke(app, ["task", "add", str(path), "sleep", "--parent", "main:0"])
        assert second.exit_code == 0, second.output
        assert "main:0.0" in second.output
        assert shape(read(path).tasks) == [("run_tasks", "Group", [("sleep", None, [])])]

        listed = runner.invoke(app, ["task", "list", str(path)])
        assert listed.exit_code == 0
        assert "Group" in listed.output

    def test_add_to_cleanup_with_task_id(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("name: t\n", encoding="utf-8")
        result = runner.invoke(
            app, ["task", "add", str(path), "sleep", "--cleanup", "--task-id", "nap"]
        )
        assert result.exit_code == 0
        assert read(path).cleanup_tasks[0].task_id == "nap"

    def test_add_into_occupied_slot_fails(self, plan_file):
        before = plan_file.read_text(encoding="utf-8")
        result = runner.invoke(
            app, ["task", "add", str(plan_file), "sleep", "--parent", "main:1", "--index", "0"]
        )
        assert result.exit_code == 1
        assert "occupied" in result.output
        assert plan_file.read_text(encoding="utf-8") == before

    def test_bad_address(self, plan_file):
        result = runner.invoke(app, ["task", "remove", str(plan_file), "nowhere:1"])
        assert result.exit_code == 1
        assert "Invalid address" in result.output
        missing = runner.invoke(app, ["task", "remove", str(plan_file), "main:9"])
        assert missing.exit_code == 1
        assert "No task at main:9" in missing.output

    def test_remove(self, plan_file):
        result = runner.invoke(app, ["task", "remove", str(plan_file), "main:1"])
        assert result.exit_code == 0, result.output
        assert "(4 task(s))" in result.output
        assert [node.task_type for node in read(plan_file).tasks] == ["run_tasks", "run_tasks_concurrent"]

    def test_move_reorder(self, tmp_path):
        path = tmp_path / "t.yaml"
        config = TestConfig(tasks=[task("sleep", title=t) for t in "ABC"])
        path.write_text(serialize_test(config), encoding="utf-8")
        result = runner.invoke(app, ["task", "move", str(path), "main:1", "--index", "0"])
        assert result.exit_code == 0, result.output
        assert [node.title for node in read(path).tasks] == ["B", "A", "C"]

    def test_move_across_forests(self, plan_file):
        result = runner.invoke(app, ["task", "move", str(plan_file), "main:2", "--to", "cleanup:"])
        assert result.exit_code == 0, result.output
        assert "cleanup:1" in result.output
        config = read(plan_file)
        assert len(config.tasks) == 2
        assert config.cleanup_tasks[1].task_type == "run_tasks_concurrent"

    def test_move_into_own_subtree_fails(self, tmp_path):
        path = tmp_path / "t.yaml"
        config = TestConfig(tasks=[task("run_tasks", task("run_tasks"))])
        path.write_text(serialize_test(config), encoding="utf-8")
        result = runner.invoke(app, ["task", "move", str(path), "main:0", "--to", "main:0.0"])
        assert result.exit_code == 1

    def test_move_into_slot(self, tmp_path):
        path = tmp_path / "t.yaml"
        config = TestConfig(tasks=[background(), task("sleep")])
        path.write_text(serialize_test(config), encoding="utf-8")
        result = runner.invoke(
            app, ["task", "move", str(path), "main:1", "--to", "main:0", "--index", "1"]
        )
        assert result.exit_code == 0, result.output
        assert "main:0.foregroundTask" in result.output

    def test_duplicate(self, plan_file):
        result = runner.invoke(app, ["task", "duplicate", str(plan_file), "main:0"])
        assert result.exit_code == 0, result.output
        assert "main:1" in result.output
        config = read(plan_file)
        assert shape([config.tasks[1]]) == shape([config.tasks[0]])
        assert config.tasks[1].children[1].task_id == "fetch_copy"

    def test_duplicate_slot_child_fails(self, plan_file):
        result = runner.invoke(app, ["task", "duplicate", str(plan_file), "main:1.backgroundTask"])
        assert result.exit_code == 1

    def test_update(self, plan_file):
        result = runner.invoke(
            app,
            [
                "task", "update", str(plan_file), "main:0.0",
                "--title", "Warm", "--if", "${ready}",
                "--config", "retries=3", "--var", "token=auth.token",
            ],
        )
        assert result.exit_code == 0, result.output
        node = read(plan_file).tasks[0].children[0]
        assert node.title == "Warm"
        assert node.if_condition == "${ready}"
        assert node.config == {"duration": "5s", "retries": 3}
        assert node.config_vars == {"token": "auth.token"}

    def test_update_clears_field(self, plan_file):
        runner.invoke(app, ["task", "update", str(plan_file), "main:0", "--title", ""])
        assert read(plan_file).tasks[0].title is None

    def test_update_nothing(self, plan_file):
        result = runner.invoke(app, ["task", "update", str(plan_file), "main:0"])
        assert result.exit_code == 0
        assert "Nothing to update" in result.output

    def test_update_bad_assignment(self, plan_file):
        result = runner.invoke(app, ["task", "update", str(plan_file), "main:0", "--config", "oops"])
        assert result.exit_code == 1
