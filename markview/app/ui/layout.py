from __future__ import annotations

import logging

from PySide6.QtWidgets import QSplitter

logger = logging.getLogger(__name__)

DEFAULT_PANEL_SIZE = 300


class LayoutController:
    """Show/hide one pane of a two-pane splitter, remembering its size."""

    def __init__(self, splitter: QSplitter, panel_index: int = 1, default_size: int = DEFAULT_PANEL_SIZE) -> None:
        self._splitter = splitter
        self._panel_index = panel_index
        self._default_size = default_size
        self._saved_size = default_size
        self._hidden = False

    @property
    def is_hidden(self) -> bool:
        return self._hidden

    @property
    def saved_size(self) -> int:
        return self._saved_size

    def panel_size(self) -> int:
        sizes = self._splitter.sizes()
        if len(sizes) <= self._panel_index:
            return 0
        return sizes[self._panel_index]

    def set_panel_size(self, size: int) -> None:
        sizes = self._splitter.sizes()
        if len(sizes) != 2:
            return
        total = sum(sizes)
        size = max(0, size)
        other = max(1, total - size) if total else 1
        new_sizes = [other, other]
        new_sizes[self._panel_index] = size
        self._splitter.setSizes(new_sizes)

    def toggle_hidden(self) -> bool:
        """Collapse or restore the panel; returns True when it is now hidden."""
        if self._hidden:
            self.set_panel_size(self._saved_size)
            self._hidden = False
        else:
            current = self.panel_size()
            self._saved_size = current if current > 0 else self._default_size
            self.set_panel_size(0)
            self._hidden = True
        logger.debug("Panel %d hidden=%s (saved size %d)", self._panel_index, self._hidden, self._saved_size)
        return self._hidden
