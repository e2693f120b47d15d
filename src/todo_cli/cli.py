"""Provide the `todo` command-line entrypoint.

Parses arguments, builds a :class:`TaskManager` over the configured store,
runs exactly one operation, and prints its result.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

from .config import VALID_LOG_LEVELS, get_data_file, get_log_level, get_urgent_days, load_app_config
from .display import render_query
from .task_engine.manager import OperationResult, TaskManager
from .task_engine.model import Priority
from .task_engine.store import TaskStore


def _configure_logging(level: str = "WARNING") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<level>{level: <8}</level> | {message}",
    )


# Initialize with default level; will be reconfigured in main() based on CLI args
_configure_logging()


def _priority_arg(raw: str) -> Priority:
    try:
        return Priority.parse(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="todo", description="A simple CLI todo manager")
    parser.add_argument("--data-file", type=Path, default=None, help="Path to the task store JSON file")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=sorted(VALID_LOG_LEVELS),
        default=None,
        help="Log level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    p_add = sub.add_parser("add", aliases=["a", "+"], help="Add a new task")
    p_add.add_argument("description", help="Task description")
    p_add.add_argument("--priority", "-p", type=_priority_arg, default=None, help="low, medium or high")
    p_add.add_argument("--tags", "-t", default=None, help="Comma-separated tags")
    p_add.add_argument("--due", "-d", default=None, help="Due date in YYYY-MM-DD format")

    p_edit = sub.add_parser("edit", help="Edit an existing task by ID")
    p_edit.add_argument("id", type=int, help="Task ID")
    p_edit.add_argument("description", nargs="?", default=None, help="New task description")
    p_edit.add_argument("--priority", "-p", type=_priority_arg, default=None)
    p_edit.add_argument("--tags", "-t", default=None, help="Replace tags (comma-separated)")
    p_edit.add_argument("--add-tags", "-a", default=None, help="Add tags (comma-separated)")
    p_edit.add_argument("--due", "-d", default=None, help="New due date in YYYY-MM-DD format")

    p_list = sub.add_parser("list", aliases=["ls"], help="List all tasks")
    p_list.add_argument("--urgent", "-u", action="store_true", help="Show only tasks due soon")

    p_search = sub.add_parser("search", help="Search tasks by keyword")
    p_search.add_argument("keyword", help="Keyword to search for in task descriptions")

    p_done = sub.add_parser("complete", help="Mark a task as complete")
    p_done.add_argument("id", type=int, help="Task ID")

    p_many = sub.add_parser("complete-tasks", help="Mark multiple tasks as complete")
    p_many.add_argument("ids", type=int, nargs="+", help="Task IDs")

    p_rm = sub.add_parser("remove", aliases=["-", "rm", "del"], help="Remove a task by ID")
    p_rm.add_argument("id", type=int, help="Task ID")

    sub.add_parser("remove-all", help="Remove all tasks permanently")

    return parser


_ALIASES = {"a": "add", "+": "add", "ls": "list", "-": "remove", "rm": "remove", "del": "remove"}


def _report(result: OperationResult, out: Console, err: Console) -> int:
    if result.ok:
        out.print(result.message, markup=False, highlight=False)
        return 0
    err.print(result.message, markup=False, highlight=False)
    return 1


def _build_manager(args: argparse.Namespace) -> TaskManager:
    config, config_err = load_app_config(args.config)
    _configure_logging(args.log_level or get_log_level(config))
    if config_err:
        logger.warning("Ignoring config file: {}", config_err)
    data_file = args.data_file or get_data_file(config)
    return TaskManager(TaskStore(data_file), urgent_days=get_urgent_days(config))


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    command = _ALIASES.get(args.command, args.command)
    out = Console()
    err = Console(stderr=True)
    manager = _build_manager(args)

    if command == "add":
        return _report(manager.add(args.description, args.priority, args.tags, args.due), out, err)
    if command == "edit":
        result = manager.edit(
            args.id,
            description=args.description,
            priority=args.priority,
            tags=args.tags,
            add_tags=args.add_tags,
            due=args.due,
        )
        return _report(result, out, err)
    if command == "list":
        render_query(out, manager.list(urgent_only=args.urgent))
        return 0
    if command == "search":
        render_query(out, manager.search(args.keyword), search=True)
        return 0
    if command == "complete":
        return _report(manager.complete(args.id), out, err)
    if command == "complete-tasks":
        codes = [_report(result, out, err) for result in manager.complete_many(args.ids)]
        return max(codes)
    if command == "remove":
        return _report(manager.remove(args.id), out, err)
    if command == "remove-all":
        return _report(manager.remove_all(), out, err)

    parser.error(f"Unknown command: {args.command}")
    return 2


def run() -> None:
    sys.exit(main())
