"""Keeps the preview page in step with the editor text and the appearance.

Two sources trigger a render: edits to the document and changes to the
appearance (platform colour scheme or the user's preference). Both funnel into
``compose_page``, which is pure; ``PreviewSynchronizer`` only snapshots the
inputs and publishes the result.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from markview.app import render
from markview.app.theme import resolve_is_dark, system_prefers_dark
from markview.app.ui.path_utils import resolve_base_uri

logger = logging.getLogger(__name__)

# Per-render timing at DEBUG level, off unless asked for.
RENDER_TIMING_ENABLED = os.getenv("MARKVIEW_DETAILED_RENDER_LOGGING", "0") not in ("0", "false", "False", "")


@dataclass(frozen=True)
class DocumentSnapshot:
    text: str
    path: Optional[str] = None


@dataclass(frozen=True)
class RenderedPage:
    html: str
    base_uri: Optional[str]
    is_dark: bool
    background: tuple[int, int, int]


def compose_page(
    text: str,
    appearance_mode: Optional[str],
    document_path: Optional[str],
    system_dark: bool,
) -> RenderedPage:
    is_dark = resolve_is_dark(appearance_mode, system_dark)
    fragment = render.render_fragment(text)
    base_uri = resolve_base_uri(document_path)
    page_html = render.assemble_page(fragment, is_dark)
    return RenderedPage(
        html=page_html,
        base_uri=base_uri,
        is_dark=is_dark,
        background=render.background_color(is_dark),
    )


class PreviewSynchronizer(QObject):
    """Re-renders the preview on every document or appearance change."""

    pageReady = Signal(object)

    def __init__(
        self,
        snapshot: Callable[[], DocumentSnapshot],
        appearance_mode: Callable[[], str],
        system_dark: Callable[[], bool] = system_prefers_dark,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._snapshot = snapshot
        self._appearance_mode = appearance_mode
        self._system_dark = system_dark
        self.current_page: Optional[RenderedPage] = None
        self.render_count = 0

    def on_document_changed(self) -> None:
        self._render("document")

    def on_appearance_changed(self, *_args) -> None:
        self._render("appearance")

    def refresh(self) -> RenderedPage:
        return self._render("refresh")

    def _render(self, trigger: str) -> RenderedPage:
        started = time.perf_counter()
        snap = self._snapshot()
        page = compose_page(snap.text, self._appearance_mode(), snap.path, self._system_dark())
        composed = time.perf_counter()
        self.current_page = page
        self.render_count += 1
        self.pageReady.emit(page)
        if RENDER_TIMING_ENABLED:
            finished = time.perf_counter()
            logger.debug(
                "[Render] trigger=%s compose=%.1fms publish=%.1fms chars=%d",
                trigger,
                (composed - started) * 1000.0,
                (finished - composed) * 1000.0,
                len(snap.text),
            )
        logger.debug("Preview rendered (%s): dark=%s, base=%s", trigger, page.is_dark, page.base_uri)
        return page
