"""Tests for the selection helpers."""

from plansmith.application import selection
from plansmith.domain.task import TEST_HEADER_ID, Selection


class TestSelect:
    def test_primary_defaults_to_first(self):
        result = selection.select(["a", "b"])
        assert result.task_ids == ("a", "b")
        assert result.primary_task_id == "a"

    def test_duplicates_dropped(self):
        assert selection.select(["a", "b", "a"]).task_ids == ("a", "b")

    def test_primary_must_be_selected(self):
        assert selection.select(["a"], "z").primary_task_id == "a"
        assert selection.select(["a", "b"], "b").primary_task_id == "b"

    def test_empty(self):
        assert selection.select([]) == Selection()

    def test_header(self):
        header = selection.select_test_header()
        assert header.task_ids == (TEST_HEADER_ID,)
        assert TEST_HEADER_ID in header


class TestUpdates:
    def test_add_keeps_primary(self):
        result = selection.add(selection.select(["a"]), "b")
        assert result.task_ids == ("a", "b")
        assert result.primary_task_id == "a"

    def test_add_existing_is_identity(self):
        current = selection.select(["a"])
        assert selection.add(current, "a") is current

    def test_toggle(self):
        current = selection.toggle(Selection(), "a")
        assert current.primary_task_id == "a"
        assert selection.toggle(current, "a").is_empty

    def test_discard_moves_primary(self):
        current = selection.select(["a", "b", "c"], "b")
        result = selection.discard(current, ["b"])
        assert result.task_ids == ("a", "c")
        assert result.primary_task_id == "a"

    def test_discard_unrelated_is_identity(self):
        current = selection.select(["a"])
        assert selection.discard(current, ["x"]) is current

    def test_clear(self):
        assert selection.clear().is_empty
