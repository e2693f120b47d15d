"""Render task queries for the terminal with rich."""

from __future__ import annotations

from datetime import date
from typing import Optional

from rich.console import Console
from rich.text import Text

from .task_engine.manager import TaskQuery
from .task_engine.model import Priority, Task
from .utils import _today

PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


def status_mark(task: Task) -> str:
    return "✓" if task.completed else " "


def due_hint(task: Task, today: Optional[date] = None) -> tuple[str, str]:
    """Return ``(label, style)`` describing how close the due date is.

    Tasks without a due date get ``("", "")``.
    """
    days = task.days_until_due(today)
    if days is None or task.due_date is None:
        return "", ""
    if days < 0:
        return f"🔴 OVERDUE by {-days} days", "bold red"
    if days == 0:
        return "🟡 DUE TODAY", "bold yellow"
    if days == 1:
        return "🟠 Due tomorrow", "dark_orange"
    if days <= 3:
        return f"🟡 Due in {days} days", "yellow"
    if days <= 7:
        return f"(due {task.due_date.strftime('%m-%d')})", "cyan"
    return f"(due {task.due_date.isoformat()})", "dim"


def format_task_line(task: Task, today: Optional[date] = None) -> Text:
    line = Text(f"[{status_mark(task)}] {task.id}: ")
    line.append(task.description, style="strike dim" if task.completed else "")
    if task.priority is not None:
        line.append(f" ({task.priority.value})", style=PRIORITY_STYLES[task.priority])
    if task.tags:
        line.append(" " + " ".join(f"#{tag}" for tag in task.tags), style="blue")
    label, style = due_hint(task, today)
    if label and not task.completed:
        line.append(f" {label}", style=style)
    return line


def format_search_line(task: Task) -> Text:
    due = task.due_date.isoformat() if task.due_date else "No due date"
    line = Text(f"[{status_mark(task)}] {task.id}: ")
    line.append(task.description)
    line.append(f". Due - {due}", style="dim")
    return line


def render_query(console: Console, query: TaskQuery, *, search: bool = False) -> None:
    """Print a heading and one line per task, or the empty message."""
    if query.is_empty:
        console.print(query.empty_message, markup=False, highlight=False)
        return
    console.print(query.heading, style="bold", markup=False, highlight=False)
    today = _today()
    for task in query.tasks:
        line = format_search_line(task) if search else format_task_line(task, today)
        console.print(line, highlight=False)
