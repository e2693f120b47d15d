"""Task model for the todo store.

Defines the persisted :class:`Task` entity, the :class:`Priority` enum, tag
normalization helpers, and the date-derived predicates (urgent, overdue) that
the manager uses to filter and sort.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from ..constants import DEFAULT_URGENT_DAYS
from ..utils import _now_local, _parse_due_date, _parse_iso, _today


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Priority(str, Enum):
    """Optional task priority."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, raw: Any) -> "Priority":
        """Case-insensitive lookup by value (``low``, ``Medium``, ``HIGH``...)."""
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown priority '{raw}'; expected one of {[m.value for m in cls]}")


# ---------------------------------------------------------------------------
# Tag helpers
# ---------------------------------------------------------------------------

def _normalize_tags(values: Iterable[str]) -> Optional[list[str]]:
    """Trim, drop empties, dedupe keeping first occurrence. Empty -> None."""
    out: list[str] = []
    for value in values:
        tag = str(value).strip()
        if tag and tag not in out:
            out.append(tag)
    return out or None


def parse_tags(csv: Optional[str]) -> Optional[list[str]]:
    """Parse a comma-separated tag string."""
    if csv is None:
        return None
    return _normalize_tags(csv.split(","))


def merge_tags(existing: Optional[list[str]], csv: Optional[str]) -> Optional[list[str]]:
    """Union *csv* into *existing*; the merged set comes back sorted."""
    merged = set(existing or [])
    merged.update(parse_tags(csv) or [])
    return sorted(merged) or None


def parse_due_date(raw: Optional[str]) -> Optional[date]:
    """Strict ``YYYY-MM-DD``; returns None when invalid."""
    return _parse_due_date(raw)


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A single todo item.

    ``completed_at`` is set exactly when ``completed`` is true. Optional
    fields are ``None`` when unset and are omitted from :meth:`to_dict`.
    """

    id: int
    description: str
    completed: bool = False
    completed_at: Optional[datetime] = None
    due_date: Optional[date] = None
    priority: Optional[Priority] = None
    tags: Optional[list[str]] = None

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id < 1:
            raise ValueError(f"Task id must be a positive integer, got {self.id!r}")
        if not self.description:
            raise ValueError("Task description must be non-empty")
        if self.completed != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when the task is completed")
        if self.tags is not None:
            self.tags = _normalize_tags(self.tags)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @classmethod
    def validate_dict(cls, data: Any) -> list[str]:
        """Structural validation of a stored task record.

        Returns a list of error strings (empty = valid). Content rules such
        as non-empty descriptions are checked by the store's integrity pass,
        not here.
        """
        if not isinstance(data, dict):
            return [f"Expected an object, got {type(data).__name__}"]
        errors: list[str] = []
        task_id = data.get("id")
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            errors.append("'id' is required and must be an integer")
        if not isinstance(data.get("description"), str):
            errors.append("'description' is required and must be a string")
        if not isinstance(data.get("completed", False), bool):
            errors.append("'completed' must be a boolean")
        completed_at = data.get("completed_at")
        if completed_at is not None and _parse_iso(completed_at) is None:
            errors.append(f"'completed_at' is not an ISO timestamp: {completed_at!r}")
        due = data.get("due_date")
        if due is not None and (not isinstance(due, str) or _parse_due_date(due) is None):
            errors.append(f"'due_date' must be YYYY-MM-DD, got {due!r}")
        priority = data.get("priority")
        if priority is not None:
            valid = {p.value for p in Priority}
            if priority not in valid:
                errors.append(f"'priority' must be one of {sorted(valid)}, got {priority!r}")
        tags = data.get("tags")
        if tags is not None and (not isinstance(tags, list) or not all(isinstance(t, str) for t in tags)):
            errors.append("'tags' must be an array of strings")
        return errors

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict, leaving out unset optional fields."""
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "completed": self.completed,
        }
        if self.completed_at is not None:
            data["completed_at"] = self.completed_at.isoformat()
        if self.due_date is not None:
            data["due_date"] = self.due_date.isoformat()
        if self.priority is not None:
            data["priority"] = self.priority.value
        if self.tags:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize a stored record; raises ValueError when malformed."""
        errors = cls.validate_dict(data)
        if errors:
            raise ValueError("; ".join(errors))
        priority = data.get("priority")
        return cls(
            id=data["id"],
            description=data["description"],
            completed=bool(data.get("completed", False)),
            completed_at=_parse_iso(data.get("completed_at")),
            due_date=_parse_due_date(data.get("due_date")),
            priority=Priority(priority) if priority is not None else None,
            tags=list(data["tags"]) if data.get("tags") else None,
        )

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------

    def complete(self) -> None:
        """Mark done and stamp the completion time.

        Idempotent on the flag, not on the timestamp: a second call restamps.
        """
        self.completed = True
        self.completed_at = _now_local()

    def days_until_due(self, today: Optional[date] = None) -> Optional[int]:
        if self.due_date is None:
            return None
        return (self.due_date - (today or _today())).days

    def is_urgent(self, threshold_days: int = DEFAULT_URGENT_DAYS, today: Optional[date] = None) -> bool:
        """True when due within *threshold_days*; overdue tasks count as urgent."""
        if self.completed:
            return False
        days = self.days_until_due(today)
        return days is not None and days <= threshold_days

    def is_overdue(self, today: Optional[date] = None) -> bool:
        if self.completed:
            return False
        days = self.days_until_due(today)
        return days is not None and days < 0

    def matches_keyword(self, keyword: str) -> bool:
        return keyword.lower() in self.description.lower()
