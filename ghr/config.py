"""Persistent JSON preferences.

Holds the auto-refresh interval, the initial mouse-capture state, and the
color theme. All access is defensive: malformed or missing config falls back
to defaults. UI state is never written here.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .render.theme import DEFAULT_THEME, normalize_theme_name

logger = logging.getLogger(__name__)

APP_NAME = "ghr"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_AUTO_REFRESH_SECONDS = 30.0


@dataclass(frozen=True)
class Preferences:
    auto_refresh_seconds: float = DEFAULT_AUTO_REFRESH_SECONDS
    mouse_capture: bool = True
    theme: str = DEFAULT_THEME.name


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _positive_seconds(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def load_preferences(path: Path | None = None) -> Preferences:
    """Return validated preferences; each invalid entry falls back on its own."""
    data = load_config(path)
    refresh = _positive_seconds(data.get("auto_refresh_seconds"))
    mouse = data.get("mouse_capture")
    theme = data.get("theme")
    return Preferences(
        auto_refresh_seconds=refresh if refresh is not None else DEFAULT_AUTO_REFRESH_SECONDS,
        mouse_capture=mouse if isinstance(mouse, bool) else True,
        theme=normalize_theme_name(theme if isinstance(theme, str) else None),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_AUTO_REFRESH_SECONDS",
    "Preferences",
    "load_config",
    "load_preferences",
]
