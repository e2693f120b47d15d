"""File-based task store.

Stores the whole task collection as one pretty-printed JSON array in
``<data dir>/todo-cli/.todo_data.json``.  Every save rewrites the file as a
unit (write-tmp-then-rename) and restricts it to owner read/write.

There is no locking: one process is assumed to be the only writer, and
concurrent invocations race with the last writer winning.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from ..constants import APP_DIR_NAME, DATA_FILE_NAME, JSON_INDENT, STORE_FILE_MODE
from ..io_utils import _atomic_write_text, _restrict_permissions
from ..utils import _home_dir, _platform_data_dir
from .model import Task

CORRUPTED_WARNING = "Warning: Data file appears to be corrupted or tampered with"
UNPARSEABLE_WARNING = "Warning: could not parse tasks file, starting fresh"


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------

def resolve_store_path() -> Path:
    """Return the store file path: data dir, else home, else the cwd."""
    base = _platform_data_dir() or _home_dir() or Path(".")
    return base / APP_DIR_NAME / DATA_FILE_NAME


# ---------------------------------------------------------------------------
# Low-level decoding
# ---------------------------------------------------------------------------

def _decode_records(text: str) -> list[dict[str, Any]]:
    """Decode *text* into task records; raises ValueError when malformed."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"expected an array of tasks, got {type(data).__name__}")
    for index, record in enumerate(data):
        errors = Task.validate_dict(record)
        if errors:
            raise ValueError(f"task #{index}: {'; '.join(errors)}")
    return data


def _integrity_errors(records: list[dict[str, Any]]) -> list[str]:
    errors: list[str] = []
    seen: set[int] = set()
    for record in records:
        task_id = record["id"]
        if not record["description"]:
            errors.append(f"task {task_id} has an empty description")
        if task_id < 1:
            errors.append(f"task id {task_id} is not positive")
        if task_id in seen:
            errors.append(f"task id {task_id} appears more than once")
        seen.add(task_id)
        if bool(record.get("completed", False)) != (record.get("completed_at") is not None):
            errors.append(f"task {task_id} has inconsistent completion fields")
    return errors


# ---------------------------------------------------------------------------
# TaskStore
# ---------------------------------------------------------------------------

class TaskStore:
    """Load and save the full task collection.

    Parameters
    ----------
    path:
        Store file to use.  Defaults to :func:`resolve_store_path`, computed
        once here and reused for the lifetime of the store.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else resolve_store_path()
        self._ensure_parent_dir()

    def _ensure_parent_dir(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Warning: Could not create data directory: {}", exc)

    # -- reading --------------------------------------------------------------

    def load_with_warning(self) -> tuple[list[Task], Optional[str]]:
        """Load tasks and return ``(tasks, warning)``.

        A missing file is an empty store with no warning.  A file that cannot
        be decoded, or that decodes but fails the integrity check, yields an
        empty collection and the matching warning.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return [], None
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Unable to read {}: {}", self.path, exc)
            return [], UNPARSEABLE_WARNING

        try:
            records = _decode_records(text)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError subclass.
            logger.debug("Rejected {}: {}", self.path, exc)
            return [], UNPARSEABLE_WARNING

        problems = _integrity_errors(records)
        if problems:
            logger.debug("Integrity check failed for {}: {}", self.path, "; ".join(problems))
            return [], CORRUPTED_WARNING

        tasks = [Task.from_dict(record) for record in records]
        logger.debug("Loaded {} task(s) from {}", len(tasks), self.path)
        return tasks, None

    def load(self) -> list[Task]:
        tasks, warning = self.load_with_warning()
        if warning:
            logger.warning(warning)
        return tasks

    # -- writing --------------------------------------------------------------

    def save(self, tasks: list[Task]) -> Optional[str]:
        """Persist *tasks*, returning a warning message on failure.

        Failures are logged and returned, never raised; the caller's
        in-memory collection stays authoritative for the rest of the run.
        """
        try:
            payload = json.dumps([t.to_dict() for t in tasks], indent=JSON_INDENT, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            message = f"Warning: Could not serialize tasks: {exc}"
            logger.warning(message)
            return message
        try:
            _atomic_write_text(self.path, payload + "\n")
        except OSError as exc:
            message = f"Warning: Could not save tasks: {exc}"
            logger.warning(message)
            return message
        _restrict_permissions(self.path, STORE_FILE_MODE)
        logger.debug("Saved {} task(s) to {}", len(tasks), self.path)
        return None
