from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtWidgets import QApplication

from markview.app import config
from markview.app.ui.main_window import APP_NAME, APP_VERSION, MainWindow

logger = logging.getLogger("markview")

# ============================================================================
# DEBUG CONFIGURATION - Environment Variables
# ============================================================================
# MARKVIEW_DEBUG                   - DEBUG level logging for every module
# MARKVIEW_DETAILED_RENDER_LOGGING - Per-step timing of each preview render
#
# Example:
#   MARKVIEW_DEBUG=1 markview notes.md
# ============================================================================

_QT_NOISE = (
    "QWindowsFontEngineDirectWrite::recalcAdvances",
    "GetDesignGlyphMetrics failed",
    "Accessible invalid",
    "Could not find accessible on path",
)


def _debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def _configure_logging() -> None:
    level = logging.DEBUG if _debug_enabled("MARKVIEW_DEBUG") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Forward Qt messages to logging, dropping known harmless warnings."""
    if any(noise in message for noise in _QT_NOISE):
        return
    qt_logger = logging.getLogger("markview.qt")
    if mode == QtMsgType.QtDebugMsg:
        qt_logger.debug(message)
    elif mode == QtMsgType.QtInfoMsg:
        qt_logger.info(message)
    elif mode == QtMsgType.QtWarningMsg:
        qt_logger.warning(message)
    else:
        qt_logger.error(message)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="markview", description="Markdown editor with a live preview.")
    parser.add_argument("file", nargs="?", help="Markdown file to open at startup.")
    parser.add_argument(
        "--appearance",
        choices=config.APPEARANCE_MODES,
        help="Override the saved appearance for this session only.",
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging()
    qInstallMessageHandler(_qt_message_handler)
    logger.debug("Preferences file: %s", config.PREFERENCES_FILE)

    qt_app = QApplication(sys.argv[:1])
    qt_app.setApplicationName(APP_NAME)
    qt_app.setApplicationVersion(APP_VERSION)

    window = MainWindow(appearance_override=args.appearance)
    window.resize(800, 600)
    if args.file:
        window.open_file(args.file)
    window.show()
    rc = qt_app.exec()
    logger.debug("Qt event loop exited with code %d", rc)
    sys.exit(rc)


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
