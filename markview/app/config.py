from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _config_root() -> Path:
    root = os.getenv("XDG_CONFIG_HOME")
    if root:
        return Path(root)
    return Path.home() / ".config"


PREFERENCES_FILE = _config_root() / "MarkView" / "preferences.ini"

THEME_KEY = "theme"
COLOR_SCHEME_KEY = "color-scheme"

APPEARANCE_DEFAULT = "default"
APPEARANCE_FORCE_DARK = "force-dark"
APPEARANCE_FORCE_LIGHT = "force-light"
APPEARANCE_MODES = (APPEARANCE_DEFAULT, APPEARANCE_FORCE_DARK, APPEARANCE_FORCE_LIGHT)

DEFAULT_COLOR_SCHEME = "monokai"


def _parse_preferences(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines; malformed lines are skipped and the last key wins."""
    prefs: dict[str, str] = {}
    # Records end at "\n" only; values may hold other line-break characters.
    for line in text.split("\n"):
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        prefs[key] = value.strip()
    return prefs


def _read_preferences() -> dict[str, str]:
    """Return the persisted preference set, or an empty dict on error/missing."""
    try:
        text = PREFERENCES_FILE.read_bytes().decode("utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Unreadable preferences file %s: %s", PREFERENCES_FILE, exc)
        return {}
    return _parse_preferences(text)


def load(key: str, default: str) -> str:
    return _read_preferences().get(key, default)


def save(key: str, value: str) -> None:
    """Merge one preference into the file, rewriting the whole set."""
    prefs = _read_preferences()
    prefs[key] = value
    payload = "".join(f"{k}={v}\n" for k, v in prefs.items())
    try:
        PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
        PREFERENCES_FILE.write_text(payload, encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to save preference %s to %s: %s", key, PREFERENCES_FILE, exc)


def normalize_appearance_mode(mode: str | None) -> str:
    if isinstance(mode, str):
        lowered = mode.strip().lower()
        if lowered in APPEARANCE_MODES:
            return lowered
    return APPEARANCE_DEFAULT


def load_appearance_mode() -> str:
    """Return the appearance preference: default | force-dark | force-light."""
    return normalize_appearance_mode(load(THEME_KEY, APPEARANCE_DEFAULT))


def save_appearance_mode(mode: str) -> None:
    save(THEME_KEY, normalize_appearance_mode(mode))


def load_color_scheme(default: str = DEFAULT_COLOR_SCHEME) -> str:
    """Return the persisted editor highlighting scheme id (not validated)."""
    scheme = load(COLOR_SCHEME_KEY, default)
    return scheme or default


def save_color_scheme(scheme_id: str) -> None:
    save(COLOR_SCHEME_KEY, scheme_id.strip())
