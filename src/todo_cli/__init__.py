"""Provide the public `todo_cli` package exports."""

from __future__ import annotations

from .task_engine.manager import OperationResult, TaskManager, TaskQuery
from .task_engine.model import Priority, Task
from .task_engine.store import TaskStore

__all__ = ["OperationResult", "Priority", "Task", "TaskManager", "TaskQuery", "TaskStore"]
