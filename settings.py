"""JSON-based settings persistence for the mark calendar."""

import json
import os

from jp_holidays import DEFAULT_TIMEOUT, DEFAULT_URL

_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".mark-calendar-settings.json")

_DEFAULTS = {
    "holiday_api_url": DEFAULT_URL,
    "holiday_timeout": DEFAULT_TIMEOUT,
    "export_dir": None,
    "log_level": "INFO",
    "window_width": None,
    "window_height": None,
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def load_settings() -> dict:
    """Load settings from disk, returning defaults for missing keys."""
    settings = dict(_DEFAULTS)
    try:
        with open(_SETTINGS_PATH, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return settings
    if not isinstance(stored, dict):
        return settings

    url = stored.get("holiday_api_url")
    if isinstance(url, str) and "{year}" in url:
        settings["holiday_api_url"] = url
    timeout = stored.get("holiday_timeout")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
        settings["holiday_timeout"] = float(timeout)
    if isinstance(stored.get("export_dir"), str):
        settings["export_dir"] = stored["export_dir"]
    level = stored.get("log_level")
    if isinstance(level, str) and level.upper() in _LOG_LEVELS:
        settings["log_level"] = level.upper()
    for key in ("window_width", "window_height"):
        if isinstance(stored.get(key), int) and not isinstance(stored[key], bool):
            settings[key] = stored[key]
    return settings


def save_settings(settings: dict) -> None:
    """Persist settings to disk."""
    with open(_SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
