"""Tests for the task manager (task_engine/manager.py)."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from todo_cli.constants import INVALID_DUE_DATE_MESSAGE
from todo_cli.task_engine.manager import TaskManager
from todo_cli.task_engine.model import Priority, Task
from todo_cli.task_engine.store import TaskStore


class RecordingStore(TaskStore):
    """TaskStore that counts saves."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self.saves = 0

    def save(self, tasks: list[Task]):
        self.saves += 1
        return super().save(tasks)


def _iso_in(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / ".todo_data.json"


@pytest.fixture
def store(store_path: Path) -> RecordingStore:
    return RecordingStore(store_path)


@pytest.fixture
def manager(store: RecordingStore) -> TaskManager:
    return TaskManager(store)


# ---------------------------------------------------------------------------
# Add / ID assignment
# ---------------------------------------------------------------------------

class TestAdd:
    def test_add_assigns_sequential_ids(self, manager: TaskManager) -> None:
        results = [manager.add(f"Task {i}") for i in range(3)]
        assert [r.task.id for r in results if r.task] == [1, 2, 3]
        assert results[0].message == "Added task #1: Task 0"
        assert manager.next_id == 4

    def test_add_persists(self, manager: TaskManager, store_path: Path) -> None:
        manager.add("Buy milk", priority=Priority.MEDIUM, tags="home, errands", due="2030-05-01")
        reloaded = TaskManager(TaskStore(store_path))
        assert len(reloaded.tasks) == 1
        task = reloaded.tasks[0]
        assert task.description == "Buy milk"
        assert task.priority == Priority.MEDIUM
        assert task.tags == ["home", "errands"]
        assert task.due_date == date(2030, 5, 1)

    def test_add_with_invalid_date_creates_nothing(
        self, manager: TaskManager, store: RecordingStore, store_path: Path
    ) -> None:
        result = manager.add("Bad date", due="2024-13-40")
        assert not result.ok
        assert result.message == INVALID_DUE_DATE_MESSAGE
        assert manager.tasks == []
        assert manager.next_id == 1
        assert store.saves == 0
        assert not store_path.exists()

    def test_add_rejects_blank_description(self, manager: TaskManager) -> None:
        result = manager.add("   ")
        assert not result.ok
        assert manager.tasks == []

    def test_add_with_blank_tags_has_no_tags(self, manager: TaskManager) -> None:
        result = manager.add("x", tags=" , ")
        assert result.task is not None
        assert result.task.tags is None

    def test_ids_not_reused_within_a_run(self, manager: TaskManager) -> None:
        manager.add("one")
        manager.add("two")
        manager.remove(2)
        assert manager.add("three").task.id == 3  # type: ignore[union-attr]

    def test_next_id_after_load_is_max_plus_one(self, store_path: Path) -> None:
        TaskStore(store_path).save([Task(id=4, description="a"), Task(id=9, description="b")])
        assert TaskManager(TaskStore(store_path)).next_id == 10

    def test_ids_strictly_increase_across_add_remove(self, manager: TaskManager) -> None:
        assigned: list[int] = []
        for i in range(6):
            result = manager.add(f"t{i}")
            assert result.task is not None
            assigned.append(result.task.id)
            if i % 2:
                manager.remove(result.task.id)
        assert assigned == sorted(set(assigned))
        assert manager.next_id == max(assigned) + 1


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------

class TestEdit:
    def test_edit_not_found(self, manager: TaskManager) -> None:
        result = manager.edit(42, description="x")
        assert not result.ok
        assert result.message == "Task #42 not found"

    def test_invalid_date_ignored_but_description_applied(self, manager: TaskManager) -> None:
        manager.add("Old", due="2030-01-02")
        result = manager.edit(1, description="New", due="2024-13-40")
        assert result.ok
        task = manager.get(1)
        assert task is not None
        assert task.description == "New"
        assert task.due_date == date(2030, 1, 2)
        assert result.message == "Edited task #1: New. Due - 2030-01-02"

    def test_edit_message_without_due(self, manager: TaskManager) -> None:
        manager.add("Old")
        assert manager.edit(1, description="New").message == "Edited task #1: New. Due - No due date"

    def test_blank_description_keeps_existing(self, manager: TaskManager) -> None:
        manager.add("Keep me")
        manager.edit(1, description="  ")
        assert manager.get(1).description == "Keep me"  # type: ignore[union-attr]

    def test_add_tags_merges_sorted(self, manager: TaskManager) -> None:
        manager.add("x", tags="work,urgent")
        manager.edit(1, add_tags="urgent, home")
        assert manager.get(1).tags == ["home", "urgent", "work"]  # type: ignore[union-attr]

    def test_replace_applied_before_add(self, manager: TaskManager) -> None:
        manager.add("x", tags="old")
        manager.edit(1, tags="b, a", add_tags="c")
        assert manager.get(1).tags == ["a", "b", "c"]  # type: ignore[union-attr]

    def test_replace_with_empty_clears_tags(self, manager: TaskManager) -> None:
        manager.add("x", tags="old")
        manager.edit(1, tags="")
        assert manager.get(1).tags is None  # type: ignore[union-attr]

    def test_edit_priority_and_due_persist(self, manager: TaskManager, store_path: Path) -> None:
        manager.add("x")
        manager.edit(1, priority=Priority.HIGH, due="2031-12-31")
        task = TaskManager(TaskStore(store_path)).get(1)
        assert task is not None
        assert task.priority == Priority.HIGH
        assert task.due_date == date(2031, 12, 31)


# ---------------------------------------------------------------------------
# Complete / remove
# ---------------------------------------------------------------------------

class TestCompleteRemove:
    def test_complete(self, manager: TaskManager, store_path: Path) -> None:
        manager.add("x")
        result = manager.complete(1)
        assert result.message == "Completed task #1"
        task = TaskManager(TaskStore(store_path)).get(1)
        assert task is not None
        assert task.completed and task.completed_at is not None

    def test_complete_not_found(self, manager: TaskManager) -> None:
        assert manager.complete(7).message == "Task #7 not found"

    def test_complete_many_is_best_effort(self, manager: TaskManager) -> None:
        manager.add("a")
        manager.add("b")
        results = manager.complete_many([1, 99, 2])
        assert [r.ok for r in results] == [True, False, True]
        assert results[1].message == "Task #99 not found"
        assert all(t.completed for t in manager.tasks)

    def test_remove(self, manager: TaskManager) -> None:
        manager.add("a")
        manager.add("b")
        result = manager.remove(1)
        assert result.message == "Removed task #1"
        assert [t.id for t in manager.tasks] == [2]

    def test_remove_not_found_does_not_save(self, manager: TaskManager, store: RecordingStore) -> None:
        manager.add("a")
        saves = store.saves
        result = manager.remove(5)
        assert not result.ok
        assert store.saves == saves

    def test_remove_all_resets_ids(self, manager: TaskManager, store_path: Path) -> None:
        manager.add("a")
        manager.add("b")
        result = manager.remove_all()
        assert result.message == "All tasks have been removed."
        assert manager.tasks == []
        assert manager.next_id == 1
        assert TaskStore(store_path).load() == []
        assert manager.add("c").task.id == 1  # type: ignore[union-attr]

    def test_save_failure_keeps_memory_state(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        manager = TaskManager(TaskStore(blocker / "tasks.json"))
        result = manager.add("survives")
        assert result.ok
        assert [t.description for t in manager.tasks] == ["survives"]


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_list_sorts_by_due_then_undated(self, manager: TaskManager) -> None:
        manager.add("undated")
        manager.add("in five", due=_iso_in(5))
        manager.add("overdue", due=_iso_in(-2))
        manager.add("today", due=_iso_in(0))
        query = manager.list()
        assert query.heading == "Your tasks:"
        assert [t.description for t in query.tasks] == ["overdue", "today", "in five", "undated"]

    def test_list_keeps_undated_order(self, manager: TaskManager) -> None:
        for name in ("c", "a", "b"):
            manager.add(name)
        manager.add("dated", due=_iso_in(10))
        assert [t.description for t in manager.list().tasks] == ["dated", "c", "a", "b"]

    def test_list_urgent_filter(self, manager: TaskManager) -> None:
        manager.add("overdue", due=_iso_in(-2))
        manager.add("in three", due=_iso_in(3))
        manager.add("in four", due=_iso_in(4))
        manager.add("undated")
        manager.add("done", due=_iso_in(1))
        manager.complete(5)
        query = manager.list(urgent_only=True)
        assert query.heading == "Urgent tasks:"
        assert [t.description for t in query.tasks] == ["overdue", "in three"]

    def test_urgent_threshold_is_configurable(self, store: RecordingStore) -> None:
        manager = TaskManager(store, urgent_days=5)
        manager.add("in four", due=_iso_in(4))
        assert manager.list(urgent_only=True).count == 1

    def test_empty_messages(self, manager: TaskManager) -> None:
        assert manager.list().is_empty
        assert manager.list().empty_message == "No tasks found!"
        manager.add("far", due=_iso_in(30))
        urgent = manager.list(urgent_only=True)
        assert urgent.is_empty
        assert urgent.empty_message == "No urgent tasks due within the next 3 days!"

    def test_query_is_one_shot(self, manager: TaskManager) -> None:
        manager.add("a")
        query = manager.list()
        assert len(list(query.tasks)) == 1
        assert list(query.tasks) == []
        assert query.count == 1

    def test_search_preserves_order(self, manager: TaskManager) -> None:
        manager.add("Call Bob", due=_iso_in(9))
        manager.add("Email team")
        manager.add("call plumber", due=_iso_in(1))
        query = manager.search("CALL")
        assert query.heading == "Tasks matching 'CALL':"
        assert [t.id for t in query.tasks] == [1, 3]

    def test_search_no_match(self, manager: TaskManager) -> None:
        manager.add("a")
        query = manager.search("zzz")
        assert query.is_empty
        assert query.empty_message == "No tasks found matching 'zzz'"
