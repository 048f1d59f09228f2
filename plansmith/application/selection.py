"""Selection service.

Pure helpers that derive a new ``Selection`` from an old one. The primary
task is the one whose properties an editor shows; it is always one of the
selected ids (or the test header), or None when nothing is selected.
"""

from collections.abc import Iterable, Sequence

from plansmith.domain.task import TEST_HEADER_ID, Selection


def _unique(task_ids: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(task_ids))


def select(task_ids: Sequence[str], primary_task_id: str | None = None) -> Selection:
    """Replace the selection; the primary defaults to the first id."""
    ids = _unique(task_ids)
    if primary_task_id is None or primary_task_id not in ids:
        primary_task_id = ids[0] if ids else None
    return Selection(task_ids=ids, primary_task_id=primary_task_id)


def select_test_header() -> Selection:
    """Select the test header (the diagram's start node)."""
    return Selection(task_ids=(TEST_HEADER_ID,), primary_task_id=TEST_HEADER_ID)


def add(selection: Selection, task_id: str) -> Selection:
    """Add a task; it becomes primary only if there was none."""
    if task_id in selection:
        return selection
    return Selection(
        task_ids=selection.task_ids + (task_id,),
        primary_task_id=selection.primary_task_id or task_id,
    )


def toggle(selection: Selection, task_id: str) -> Selection:
    """Add a task if absent, remove it if present (shift-click)."""
    if task_id in selection:
        return discard(selection, [task_id])
    return add(selection, task_id)


def discard(selection: Selection, task_ids: Iterable[str]) -> Selection:
    """Drop ids from the selection.

    If the primary is dropped, the first remaining id takes over.
    """
    gone = set(task_ids)
    if not gone.intersection(selection.task_ids):
        return selection
    remaining = tuple(task_id for task_id in selection.task_ids if task_id not in gone)
    primary = selection.primary_task_id
    if primary is None or primary in gone:
        primary = remaining[0] if remaining else None
    return Selection(task_ids=remaining, primary_task_id=primary)


def clear() -> Selection:
    return Selection()
