"""Tests for pure structural edits."""

from plansmith.domain.task import (
    create_task,
    duplicate_task,
    find_by_id,
    flatten,
    generate_task_id,
    get_all_task_ids,
    insert_at,
    insert_at_root,
    move_to,
    remove_by_id,
    set_named_slot,
    update_by_id,
)

from .factories import background, ids, shape, task


class TestCreateTask:
    """Tests for create_task and id generation."""

    def test_fresh_ids(self):
        assert generate_task_id() != generate_task_id()
        first, second = create_task("sleep"), create_task("sleep")
        assert first.id != second.id
        assert first.id.startswith("task_")

    def test_empty_task(self):
        node = create_task("run_tasks", "Group")
        assert node.title == "Group"
        assert node.children == []
        assert node.config == {}
        assert create_task("sleep", "").title is None


class TestInsert:
    """Tests for insert_at, insert_at_root and set_named_slot."""

    def test_insert_at_root_clamps(self):
        a, b = task("sleep"), task("sleep")
        forest = insert_at_root([a], b, 99)
        assert ids(forest) == [a.id, b.id]
        c = task("sleep")
        forest = insert_at_root(forest, c, -5)
        assert ids(forest) == [c.id, a.id, b.id]

    def test_insert_into_ordered_container(self):
        x = task("sleep")
        group = task("run_tasks", x)
        y = task("sleep")
        forest = insert_at([group], y, group.id, 0)
        assert ids(forest[0].children) == [y.id, x.id]
        z = task("sleep")
        forest = insert_at(forest, z, group.id, None)
        assert ids(forest[0].children) == [y.id, x.id, z.id]

    def test_input_forest_untouched(self):
        group = task("run_tasks")
        forest = [group]
        insert_at(forest, task("sleep"), group.id, 0)
        assert forest[0].children == []

    def test_untouched_subtrees_are_shared(self):
        left, right = task("run_tasks", task("sleep")), task("run_tasks")
        forest = insert_at([left, right], task("sleep"), right.id, 0)
        assert forest[0] is left
        assert forest[1] is not right

    def test_single_slot_only_when_empty(self):
        options = task("run_task_options")
        first, second = task("sleep"), task("sleep")
        forest = insert_at([options], first, options.id, 0)
        assert ids(forest[0].children) == [first.id]
        forest = insert_at(forest, second, options.id, 0)
        assert ids(forest[0].children) == [first.id]

    def test_named_slot_addressed_by_index(self):
        bg = background()
        node = task("sleep")
        forest = insert_at([bg], node, bg.id, 1)
        assert forest[0].named_children == {"foregroundTask": node}
        assert forest[0].children == []

    def test_named_slot_bad_index_is_noop(self):
        bg = background()
        forest = insert_at([bg], task("sleep"), bg.id, 5)
        assert forest[0].named_children == {}

    def test_leaf_and_unknown_parent_are_noops(self):
        leaf = task("sleep")
        assert insert_at([leaf], task("sleep"), leaf.id, 0) == [leaf]
        assert insert_at([leaf], task("sleep"), "missing", 0) == [leaf]

    def test_set_named_slot_keeps_declared_order(self):
        fg = task("sleep", title="fg")
        bg = background(fg=fg)
        watch = task("check_status", title="bg")
        forest = set_named_slot([bg], watch, bg.id, "backgroundTask")
        assert list(forest[0].named_children) == ["backgroundTask", "foregroundTask"]

    def test_set_named_slot_rejects_undeclared_slot(self):
        bg = background()
        forest = set_named_slot([bg], task("sleep"), bg.id, "sideTask")
        assert forest[0].named_children == {}


class TestRemove:
    """Tests for remove_by_id."""

    def test_removes_subtree(self):
        inner = task("sleep")
        group = task("run_tasks", task("run_tasks", inner))
        keep = task("sleep")
        forest = remove_by_id([group, keep], group.id)
        assert ids(forest) == [keep.id]
        assert find_by_id(forest, inner.id) is None

    def test_emptied_named_slot_disappears(self):
        watch, main = task("check_status"), task("sleep")
        bg = background(bg=watch, fg=main)
        forest = remove_by_id([bg], watch.id)
        assert list(forest[0].named_children) == ["foregroundTask"]

    def test_remove_inside_slot_subtree(self):
        inner = task("sleep")
        bg = background(fg=task("run_task_matrix", inner))
        forest = remove_by_id([bg], inner.id)
        assert forest[0].named_children["foregroundTask"].children == []

    def test_missing_id_is_noop(self):
        leaf = task("sleep")
        assert remove_by_id([leaf], "missing") == [leaf]


class TestMove:
    """Tests for move_to."""

    def test_index_counts_after_removal(self):
        a, b, c = task("sleep"), task("sleep"), task("sleep")
        assert ids(move_to([a, b, c], a, None, 2)) == [b.id, c.id, a.id]
        assert ids(move_to([a, b, c], c, None, 0)) == [c.id, a.id, b.id]

    def test_into_container_keeps_identity(self):
        a = task("sleep")
        group = task("run_tasks")
        forest = move_to([a, group], a, group.id, 0)
        assert ids(forest) == [group.id]
        assert forest[0].children[0] is a


class TestDuplicate:
    """Tests for duplicate_task."""

    def test_fresh_ids_everywhere(self):
        original = background(
            bg=task("check_status"),
            fg=task("run_tasks", task("sleep"), task("sleep")),
        )
        clone = duplicate_task(original)
        original_ids = set(get_all_task_ids([original]))
        clone_ids = get_all_task_ids([clone])
        assert len(clone_ids) == len(original_ids)
        assert original_ids.isdisjoint(clone_ids)
        assert shape([clone]) == shape([original])

    def test_config_copied_by_value(self):
        original = task("http_request", config={"headers": {"a": "1"}}, config_vars={"url": "x"})
        clone = duplicate_task(original)
        clone.config["headers"]["a"] = "2"
        clone.config_vars["url"] = "y"
        assert original.config == {"headers": {"a": "1"}}
        assert original.config_vars == {"url": "x"}

    def test_task_id_suffix(self):
        original = task("run_tasks", task("sleep", task_id="inner"), task_id="outer")
        clone = duplicate_task(original, "_copy")
        assert clone.task_id == "outer_copy"
        assert clone.children[0].task_id == "inner_copy"
        assert duplicate_task(task("sleep"), "_copy").task_id is None


class TestUpdate:
    """Tests for update_by_id."""

    def test_merges_opaque_fields(self):
        node = task("sleep", title="old")
        forest = update_by_id([node], node.id, {"title": "new", "timeout": "10s"})
        assert forest[0].title == "new"
        assert forest[0].timeout == "10s"
        assert forest[0].id == node.id

    def test_structural_fields_ignored(self):
        child = task("sleep")
        group = task("run_tasks", child)
        forest = update_by_id(
            [group], group.id, {"id": "other", "task_type": "sleep", "children": []}
        )
        assert forest[0].id == group.id
        assert forest[0].task_type == "run_tasks"
        assert ids(forest[0].children) == [child.id]

    def test_container_keys_stripped_from_config(self):
        group = task("run_tasks")
        forest = update_by_id([group], group.id, {"config": {"tasks": [], "stopOnFailure": True}})
        assert forest[0].config == {"stopOnFailure": True}

    def test_slot_keys_stripped_from_config(self):
        bg = background()
        forest = update_by_id([bg], bg.id, {"config": {"backgroundTask": {}, "exitOnForeground": True}})
        assert forest[0].config == {"exitOnForeground": True}

    def test_update_nested(self):
        inner = task("sleep")
        forest = update_by_id([background(fg=inner)], inner.id, {"if_condition": "x"})
        assert flatten(forest)[1].if_condition == "x"
