"""Tests for the builder store."""

import logging

from plansmith.application import BuilderState, BuilderStore
from plansmith.domain.task import (
    TEST_HEADER_ID,
    ForestKind,
    TaskAdded,
    TaskDuplicated,
    TestConfig,
    TestConfigChanged,
    create_task,
    get_all_task_ids,
)

from .factories import background, ids, shape, task

CLEANUP = ForestKind.CLEANUP


def loaded(config: TestConfig, **kwargs) -> BuilderStore:
    return BuilderStore(BuilderState(test_config=config), **kwargs)


class TestTaskEdits:
    """Mutations commit, emit one event, and refuse without side effects."""

    def test_add_commits_and_notifies(self):
        store = BuilderStore()
        seen = []
        store.subscribe(lambda state, event: seen.append(event))

        node = create_task("run_tasks")
        assert store.add_task(node) is True
        assert ids(store.test_config.tasks) == [node.id]
        assert store.state.is_dirty
        assert isinstance(store.events[-1], TaskAdded)
        assert seen == [store.events[-1]]

    def test_refused_edit_is_noop(self, caplog):
        leaf = task("sleep")
        store = loaded(TestConfig(tasks=[leaf]))
        before = store.state
        with caplog.at_level(logging.INFO, logger="plansmith.application.store"):
            assert store.add_task(create_task("sleep"), parent_id=leaf.id) is False
        assert store.state is before
        assert store.events == []
        assert "Rejected add" in caplog.text

    def test_unsubscribe(self):
        store = BuilderStore()
        seen = []
        unsubscribe = store.subscribe(lambda state, event: seen.append(event))
        unsubscribe()
        store.add_task(create_task("sleep"))
        assert seen == []

    def test_add_to_cleanup(self):
        store = BuilderStore()
        node = create_task("sleep")
        assert store.add_task(node, forest=CLEANUP)
        assert ids(store.test_config.cleanup_tasks) == [node.id]

    def test_remove_prunes_selection(self):
        inner = task("sleep")
        group = task("run_tasks", inner)
        other = task("sleep")
        store = loaded(TestConfig(tasks=[group, other]))
        store.set_selection([inner.id, other.id], inner.id)

        assert store.remove_task(group.id)
        assert store.state.selection.task_ids == (other.id,)
        assert store.state.selection.primary_task_id == other.id

    def test_remove_last_selected_clears_primary(self):
        node = task("sleep")
        store = loaded(TestConfig(tasks=[node]))
        store.set_selection([node.id])
        store.remove_task(node.id)
        assert store.state.selection.task_ids == ()
        assert store.state.selection.primary_task_id is None

    def test_move_and_reorder(self):
        a, b, c = task("sleep"), task("sleep"), task("sleep")
        store = loaded(TestConfig(tasks=[a, b, c]))
        assert store.move_task(b.id, None, 0)
        assert ids(store.test_config.tasks) == [b.id, a.id, c.id]

    def test_move_into_occupied_slot_refused(self):
        b, c = task("check_status"), task("sleep")
        a = background(bg=b)
        store = loaded(TestConfig(tasks=[a, c]))
        assert not store.move_task(c.id, a.id, 0)
        assert store.test_config.tasks[0].named_children["backgroundTask"].id == b.id
        assert ids(store.test_config.tasks) == [a.id, c.id]

    def test_move_across(self):
        node = task("sleep")
        store = loaded(TestConfig(tasks=[node]))
        assert store.move_task_across(node.id, ForestKind.MAIN, CLEANUP)
        assert ids(store.test_config.cleanup_tasks) == [node.id]
        assert store.test_config.tasks == []

    def test_duplicate(self):
        node = task("sleep", title="Nap")
        store = loaded(TestConfig(tasks=[node]))
        assert store.duplicate_task(node.id)
        event = store.events[-1]
        assert isinstance(event, TaskDuplicated)
        assert ids(store.test_config.tasks) == [node.id, event.task_id]

    def test_update(self):
        node = task("sleep")
        store = loaded(TestConfig(tasks=[node]))
        assert store.update_task(node.id, {"title": "Nap", "config": {"duration": "1s"}})
        assert store.test_config.tasks[0].title == "Nap"
        assert not store.update_task(node.id, {"task_type": "run_tasks"})

    def test_malformed_update_refused_without_raising(self, caplog):
        node = task("sleep")
        store = loaded(TestConfig(tasks=[node]))
        before = store.state
        with caplog.at_level(logging.INFO, logger="plansmith.application.store"):
            assert store.update_task(node.id, {"config": ["a", "b"]}) is False
            assert store.update_task(node.id, {"config_vars": {"n": 5}}) is False
        assert store.state is before
        assert store.events == []
        assert "Rejected update" in caplog.text

    def test_ids_unique_across_forests_after_edits(self, sample_config):
        store = loaded(sample_config)
        first = sample_config.tasks[0]
        store.duplicate_task(first.id)
        store.move_task_across(first.id, ForestKind.MAIN, CLEANUP)
        all_ids = get_all_task_ids(store.test_config.tasks) + get_all_task_ids(
            store.test_config.cleanup_tasks
        )
        assert len(all_ids) == len(set(all_ids))


class TestMetadata:
    """Tests for test-level setters."""

    def test_setters(self):
        store = BuilderStore()
        assert store.set_test_name("Login flow")
        assert store.set_test_timeout("5m")
        assert store.set_test_vars({"user": "admin"})
        assert store.set_test_id("login")
        config = store.test_config
        assert (config.name, config.timeout, config.id) == ("Login flow", "5m", "login")
        assert config.test_vars == {"user": "admin"}
        assert all(isinstance(event, TestConfigChanged) for event in store.events)

    def test_set_test_config_replaces_and_clears_selection(self, sample_config):
        store = BuilderStore()
        store.select_test_header()
        store.set_test_config(sample_config)
        assert store.test_config is sample_config
        assert store.state.selection.is_empty
        assert "Smoke test" in store.state.yaml_source


class TestSelection:
    """Tests for selection methods."""

    def test_select_all_spans_both_forests(self, sample_config):
        store = loaded(sample_config)
        store.select_all()
        expected = get_all_task_ids(sample_config.tasks) + get_all_task_ids(
            sample_config.cleanup_tasks
        )
        assert store.state.selection.task_ids == tuple(expected)
        assert store.state.selection.primary_task_id == expected[0]

    def test_toggle_add_remove_clear(self):
        store = BuilderStore()
        store.add_to_selection("a")
        store.toggle_selection("b")
        assert store.state.selection.task_ids == ("a", "b")
        store.toggle_selection("a")
        assert store.state.selection.task_ids == ("b",)
        assert store.state.selection.primary_task_id == "b"
        store.remove_from_selection("b")
        assert store.state.selection.is_empty
        store.set_selection(["x", "y"])
        store.clear_selection()
        assert store.state.selection.primary_task_id is None

    def test_select_test_header(self):
        store = BuilderStore()
        store.select_test_header()
        assert store.state.selection.primary_task_id == TEST_HEADER_ID


class TestYamlSync:
    """Tests for the YAML side of the store."""

    def test_export_and_load(self, sample_config):
        text = loaded(sample_config).export_yaml()
        store = BuilderStore()
        assert store.load_from_yaml(text)
        assert shape(store.test_config.tasks) == shape(sample_config.tasks)
        assert shape(store.test_config.cleanup_tasks) == shape(sample_config.cleanup_tasks)
        assert not store.state.is_dirty
        assert store.state.yaml_source == text

    def test_bad_yaml_keeps_tree_and_records_finding(self, sample_config):
        store = loaded(sample_config)
        assert not store.load_from_yaml("tasks: [unclosed")
        assert store.test_config is sample_config
        assert len(store.state.validation_errors) == 1
        assert store.state.validation_errors[0].severity == "error"

    def test_leaving_yaml_view_parses_source(self):
        store = BuilderStore()
        assert store.set_active_view("yaml")
        assert store.state.yaml_source.startswith("name: New Test")
        store.set_yaml_source("name: Edited\ntasks:\n- name: sleep\n")
        assert store.set_active_view("graph")
        assert store.state.active_view == "graph"
        assert store.test_config.name == "Edited"
        assert shape(store.test_config.tasks) == [("sleep", None, [])]

    def test_leaving_yaml_view_with_bad_source_stays(self):
        store = BuilderStore()
        store.set_active_view("yaml")
        store.set_yaml_source("- just\n- a list\n")
        assert not store.set_active_view("list")
        assert store.state.active_view == "yaml"
        assert store.state.validation_errors[0].message == "YAML must be an object"

    def test_sync_round_trip(self, sample_config):
        store = loaded(sample_config)
        store.sync_to_yaml()
        assert store.sync_from_yaml()
        assert shape(store.test_config.tasks) == shape(sample_config.tasks)
        assert store.state.is_dirty

    def test_load_test_details(self):
        store = BuilderStore()
        details = {
            "id": "42",
            "name": "From API",
            "timeout": 7200,
            "config": {
                "config": {"region": "eu"},
                "tasks": [{"name": "run_tasks", "config": {"tasks": [{"name": "sleep"}]}}],
                "cleanupTasks": [{"name": "sleep"}],
            },
        }
        assert store.load_test_details(details)
        config = store.test_config
        assert (config.id, config.name, config.timeout) == ("42", "From API", "2h")
        assert config.test_vars == {"region": "eu"}
        assert shape(config.tasks) == [("run_tasks", None, [("sleep", None, [])])]
        assert store.state.source_test_id == "42"
        assert not store.state.is_dirty

    def test_reset(self, sample_config):
        store = loaded(sample_config)
        store.set_active_view("yaml")
        store.reset()
        assert store.test_config == TestConfig()
        assert store.state.active_view == "list"
        assert not store.state.is_dirty


class TestValidationAndLayout:
    """Tests for validation findings and the cached layout."""

    def test_validate_records_findings(self, registry):
        store = loaded(TestConfig(name="", tasks=[task("mystery")]))
        findings = store.validate(registry)
        assert [f.field for f in findings] == ["name", "task_type"]
        assert store.state.validation_errors == tuple(findings)
        store.clear_validation_errors()
        assert store.state.validation_errors == ()

    def test_validate_falls_back_to_builtin_types(self):
        store = loaded(TestConfig(tasks=[task("run_tasks"), task("sleep")]))
        findings = store.validate()
        assert [f.message for f in findings] == ["Unknown task type: sleep"]

    def test_layout_kept_current_with_descriptors(self, registry):
        store = BuilderStore(descriptors=registry)
        assert store.state.layout is not None
        node = create_task("sleep")
        store.add_task(node)
        store.set_selection([node.id])
        card = store.state.layout.task_node(node.id)
        assert card.is_selected
        assert card.known_type is True

    def test_layout_on_demand_without_descriptors(self):
        store = BuilderStore()
        node = create_task("sleep")
        store.add_task(node)
        assert store.state.layout is None
        assert store.layout.task_node(node.id).known_type is None

    def test_attach_descriptors(self, registry):
        store = BuilderStore()
        store.attach_descriptors(registry)
        assert store.state.layout is not None
