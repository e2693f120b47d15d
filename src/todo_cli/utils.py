"""Provide utility helpers for dates, timestamps, and per-user directories."""

from __future__ import annotations

import os
import re
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from .constants import DATE_FORMAT

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _today() -> date:
    return date.today()


def _parse_due_date(value: Optional[str]) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` date, returning None when invalid."""
    if value is None:
        return None
    try:
        return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        if not isinstance(value, str):
            value = str(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        # fromisoformat on 3.10 takes at most microseconds.
        value = _EXTRA_FRACTION.sub(r"\1", value)
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _home_dir() -> Optional[Path]:
    try:
        return Path.home()
    except (KeyError, RuntimeError):
        # No HOME and no passwd entry for the current user.
        return None


def _platform_data_dir() -> Optional[Path]:
    """Return the per-user application data directory, if one can be resolved.

    Linux and other Unixes honor an absolute ``$XDG_DATA_HOME`` and default to
    ``~/.local/share``; macOS uses ``~/Library/Application Support``; Windows
    uses ``%APPDATA%``.
    """
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None
    home = _home_dir()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" if home else None
    xdg = os.environ.get("XDG_DATA_HOME", "")
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)
    return home / ".local" / "share" if home else None
