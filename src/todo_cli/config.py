"""Load optional todo-cli configuration from `<data dir>/todo-cli/config.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .constants import APP_DIR_NAME, CONFIG_FILE, DEFAULT_LOG_LEVEL, DEFAULT_URGENT_DAYS
from .io_utils import _load_data_with_error
from .utils import _home_dir, _platform_data_dir

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def default_config_path() -> Path:
    base = _platform_data_dir() or _home_dir() or Path(".")
    return base / APP_DIR_NAME / CONFIG_FILE


def load_app_config(path: Path | None = None) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        path: Config file to read; defaults to :func:`default_config_path`.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = path if path is not None else default_config_path()
    data, err = _load_data_with_error(path, {})
    if err:
        return {}, err
    return data, None


def get_urgent_days(config: dict[str, Any]) -> int:
    """Extract the urgency threshold in days.

    Args:
        config: Configuration dictionary.

    Returns:
        A non-negative integer, or the default when unset or invalid.
    """
    raw = config.get("urgent_days")
    if isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
        return raw
    return DEFAULT_URGENT_DAYS


def get_data_file(config: dict[str, Any]) -> Path | None:
    raw = config.get("data_file")
    if isinstance(raw, str) and raw.strip():
        return Path(raw).expanduser()
    return None


def get_log_level(config: dict[str, Any]) -> str:
    raw = config.get("log_level")
    if isinstance(raw, str) and raw.upper() in VALID_LOG_LEVELS:
        return raw.upper()
    return DEFAULT_LOG_LEVEL
