from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QUrl, Signal
from PySide6.QtGui import QColor
from PySide6.QtWebEngineCore import QWebEngineSettings
from PySide6.QtWebEngineWidgets import QWebEngineView

from markview.app import render
from markview.app.preview import RenderedPage

logger = logging.getLogger(__name__)


class PreviewView(QWebEngineView):
    """Shows rendered pages; every page fully replaces the previous one.

    Pages small enough for ``setHtml`` are loaded inline against their base
    URI. Larger ones are written to a private temp file carrying a ``<base>``
    tag and loaded from there, so relative links still resolve.
    """

    pdfExported = Signal(str, bool)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.current_page: Optional[RenderedPage] = None
        self._spool_dir: Optional[tempfile.TemporaryDirectory] = None
        settings = self.settings()
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessRemoteUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.JavascriptEnabled, False)
        self.page().pdfPrintingFinished.connect(self._on_pdf_finished)

    def show_page(self, page: RenderedPage) -> None:
        # Background first so the old colour never flashes behind the new page.
        self.page().setBackgroundColor(QColor(*page.background))
        if render.fits_inline(page.html):
            base_url = QUrl(page.base_uri) if page.base_uri else QUrl()
            self.setHtml(page.html, base_url)
        else:
            self.load(QUrl.fromLocalFile(str(self._spool_page(page))))
        self.current_page = page

    def _spool_page(self, page: RenderedPage) -> Path:
        if self._spool_dir is None:
            self._spool_dir = tempfile.TemporaryDirectory(prefix="markview-preview-")
        target = Path(self._spool_dir.name) / "preview.html"
        target.write_text(render.with_base_href(page.html, page.base_uri), encoding="utf-8")
        logger.debug("Page of %d chars exceeds the inline limit; loading %s", len(page.html), target)
        return target

    def export_pdf(self, path: str) -> None:
        """Print the page currently shown; completion is reported via pdfExported."""
        logger.info("Exporting preview to %s", path)
        self.page().printToPdf(path)

    def _on_pdf_finished(self, path: str, success: bool) -> None:
        if not success:
            logger.warning("PDF export to %s failed", path)
        self.pdfExported.emit(path, success)

