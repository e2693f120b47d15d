"""Task manager: the in-memory collection, ID assignment, and query views.

This is the primary entry-point for all task manipulation.  It loads the
collection once through :class:`TaskStore`, applies mutations in memory,
flushes after every mutating operation, and hands back result objects for
the front end to print.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Iterator, Optional

from loguru import logger

from ..constants import DEFAULT_URGENT_DAYS, INVALID_DUE_DATE_MESSAGE
from ..utils import _today
from .model import Priority, Task, merge_tags, parse_due_date, parse_tags
from .store import TaskStore


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class OperationResult:
    """Outcome of a single operation, ready for display."""

    ok: bool
    message: str
    task: Optional[Task] = None


@dataclass
class TaskQuery:
    """A one-shot view over tasks produced by ``list`` or ``search``.

    ``tasks`` is an iterator: it can be consumed once.  ``count`` is known up
    front so callers can pick ``empty_message`` without draining it.
    """

    heading: str
    empty_message: str
    count: int
    tasks: Iterator[Task] = field(default_factory=lambda: iter(()))

    @property
    def is_empty(self) -> bool:
        return self.count == 0


def _not_found(task_id: int) -> OperationResult:
    return OperationResult(False, f"Task #{task_id} not found")


def _due_sort_key(task: Task, today: date) -> tuple[int, int]:
    days = task.days_until_due(today)
    if days is None:
        return (1, 0)
    return (0, days)


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------

class TaskManager:
    """Own the task collection for one run.

    Parameters
    ----------
    store:
        Persistence backend.  Defaults to a :class:`TaskStore` at the
        platform data location.
    urgent_days:
        Threshold used by ``list(urgent_only=True)``.
    """

    def __init__(self, store: Optional[TaskStore] = None, urgent_days: int = DEFAULT_URGENT_DAYS) -> None:
        self.store = store if store is not None else TaskStore()
        self.urgent_days = urgent_days
        self.tasks: list[Task] = self.store.load()
        self.next_id = max((t.id for t in self.tasks), default=0) + 1

    def _flush(self) -> None:
        self.store.save(self.tasks)

    def get(self, task_id: int) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        description: str,
        priority: Optional[Priority] = None,
        tags: Optional[str] = None,
        due: Optional[str] = None,
    ) -> OperationResult:
        """Create and persist a new task.

        An unparseable *due* date rejects the whole add; nothing is created.
        """
        due_date = parse_due_date(due)
        if due is not None and due_date is None:
            return OperationResult(False, INVALID_DUE_DATE_MESSAGE)
        if not description or not description.strip():
            return OperationResult(False, "Warning: Task description cannot be empty.")

        task = Task(
            id=self.next_id,
            description=description,
            due_date=due_date,
            priority=priority,
            tags=parse_tags(tags),
        )
        self.tasks.append(task)
        self.next_id += 1
        self._flush()
        logger.debug("Added task {}", task.id)
        return OperationResult(True, f"Added task #{task.id}: {task.description}", task)

    def edit(
        self,
        task_id: int,
        description: Optional[str] = None,
        priority: Optional[Priority] = None,
        tags: Optional[str] = None,
        add_tags: Optional[str] = None,
        due: Optional[str] = None,
    ) -> OperationResult:
        """Apply the supplied fields to a task.

        *tags* replaces the tag set and *add_tags* merges into it (replace
        first).  Unlike ``add``, an unparseable *due* is ignored and the rest
        of the edit still applies.
        """
        task = self.get(task_id)
        if task is None:
            return _not_found(task_id)

        if description is not None and description.strip():
            task.description = description
        if priority is not None:
            task.priority = priority
        if tags is not None:
            task.tags = parse_tags(tags)
        if add_tags is not None:
            task.tags = merge_tags(task.tags, add_tags)
        due_date = parse_due_date(due)
        if due_date is not None:
            task.due_date = due_date
        elif due is not None:
            logger.debug("Ignoring invalid due date {!r} for task {}", due, task_id)

        self._flush()
        due_text = task.due_date.isoformat() if task.due_date else "No due date"
        return OperationResult(True, f"Edited task #{task.id}: {task.description}. Due - {due_text}", task)

    def complete(self, task_id: int) -> OperationResult:
        task = self.get(task_id)
        if task is None:
            return _not_found(task_id)
        task.complete()
        self._flush()
        return OperationResult(True, f"Completed task #{task_id}", task)

    def complete_many(self, task_ids: Iterable[int]) -> list[OperationResult]:
        """Complete each id independently; a missing id does not stop the rest."""
        return [self.complete(task_id) for task_id in task_ids]

    def remove(self, task_id: int) -> OperationResult:
        task = self.get(task_id)
        if task is None:
            return _not_found(task_id)
        self.tasks.remove(task)
        self._flush()
        return OperationResult(True, f"Removed task #{task_id}", task)

    def remove_all(self) -> OperationResult:
        self.tasks.clear()
        self.next_id = 1
        self._flush()
        return OperationResult(True, "All tasks have been removed.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, urgent_only: bool = False) -> TaskQuery:
        """Tasks with a due date first (soonest, including overdue, on top)."""
        today = _today()
        if urgent_only:
            selected = [t for t in self.tasks if t.is_urgent(self.urgent_days, today)]
            heading = "Urgent tasks:"
            empty = f"No urgent tasks due within the next {self.urgent_days} days!"
        else:
            selected = list(self.tasks)
            heading = "Your tasks:"
            empty = "No tasks found!"
        ordered = sorted(selected, key=lambda t: _due_sort_key(t, today))
        return TaskQuery(heading, empty, len(ordered), iter(ordered))

    def search(self, keyword: str) -> TaskQuery:
        matches = [t for t in self.tasks if t.matches_keyword(keyword)]
        return TaskQuery(
            f"Tasks matching '{keyword}':",
            f"No tasks found matching '{keyword}'",
            len(matches),
            iter(matches),
        )
