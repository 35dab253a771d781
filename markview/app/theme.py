"""Appearance and editor scheme resolution.

The appearance preference is resolved against the live platform colour scheme
every time a page is rendered, so a cached value never leaks into the preview.
Editor schemes are Pygments styles; the host decides which are installed.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QGuiApplication, QPalette
from pygments.styles import get_all_styles

from markview.app.config import (
    APPEARANCE_FORCE_DARK,
    APPEARANCE_FORCE_LIGHT,
    normalize_appearance_mode,
)

logger = logging.getLogger(__name__)

# Ordered by preference; the first installed one is the default choice.
PREFERRED_SCHEMES = (
    "monokai",
    "dracula",
    "one-dark",
    "nord",
    "solarized-dark",
    "github-dark",
    "solarized-light",
    "friendly",
    "tango",
    "default",
)
FALLBACK_SCHEME = "default"
HOST_SCHEME_LIMIT = 10


def resolve_is_dark(mode: Optional[str], system_dark: bool) -> bool:
    normalized = normalize_appearance_mode(mode)
    if normalized == APPEARANCE_FORCE_DARK:
        return True
    if normalized == APPEARANCE_FORCE_LIGHT:
        return False
    return bool(system_dark)


def system_prefers_dark() -> bool:
    """Read the live platform dark/light signal."""
    if QGuiApplication.instance() is None:
        return False
    scheme = QGuiApplication.styleHints().colorScheme()
    if scheme == Qt.ColorScheme.Dark:
        return True
    if scheme == Qt.ColorScheme.Light:
        return False
    # Platform did not report a scheme; judge by the window colour.
    window = QGuiApplication.palette().color(QPalette.ColorRole.Window)
    return window.lightness() < 128


def apply_appearance_mode(mode: Optional[str]) -> None:
    """Push force modes into the Qt style hints so every widget follows."""
    if QGuiApplication.instance() is None:
        return
    hints = QGuiApplication.styleHints()
    normalized = normalize_appearance_mode(mode)
    if normalized == APPEARANCE_FORCE_DARK:
        hints.setColorScheme(Qt.ColorScheme.Dark)
    elif normalized == APPEARANCE_FORCE_LIGHT:
        hints.setColorScheme(Qt.ColorScheme.Light)
    else:
        hints.unsetColorScheme()
    logger.debug("Applied appearance mode %s", normalized)


def available_schemes() -> list[str]:
    return sorted(get_all_styles())


def scheme_choices(available: Optional[Iterable[str]] = None) -> list[str]:
    """Return the schemes offered to the user, never empty.

    Known preferred ids that the host provides come first (host spelling kept).
    Without any of those, the first ten host schemes are offered, and with no
    host schemes at all the single fallback id is used.
    """
    host = list(available) if available is not None else available_schemes()
    by_lower = {}
    for scheme_id in host:
        by_lower.setdefault(scheme_id.lower(), scheme_id)
    preferred = [by_lower[s.lower()] for s in PREFERRED_SCHEMES if s.lower() in by_lower]
    if preferred:
        return preferred
    if host:
        return host[:HOST_SCHEME_LIMIT]
    return [FALLBACK_SCHEME]


def resolve_scheme(scheme_id: Optional[str], available: Optional[Iterable[str]] = None) -> str:
    """Map a persisted scheme id onto one of the offered choices."""
    choices = scheme_choices(available)
    wanted = (scheme_id or "").strip().lower()
    for choice in choices:
        if choice.lower() == wanted:
            return choice
    if wanted:
        logger.info("Editor scheme %r not available; using %s", scheme_id, choices[0])
    return choices[0]
