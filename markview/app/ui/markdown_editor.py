from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontDatabase,
    QPalette,
    QSyntaxHighlighter,
    QTextCharFormat,
)
from PySide6.QtWidgets import QPlainTextEdit
from pygments import lex
from pygments.lexers.markup import MarkdownLexer
from pygments.styles import get_style_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from markview.app.preview import DocumentSnapshot
from markview.app.theme import FALLBACK_SCHEME

logger = logging.getLogger(__name__)


FENCE_STATE = 1
_FENCE_MARKERS = ("```", "~~~")


class MarkdownHighlighter(QSyntaxHighlighter):
    """Colours markdown source with a Pygments style, one block at a time."""

    def __init__(self, document, scheme_id: str = FALLBACK_SCHEME) -> None:  # type: ignore[override]
        super().__init__(document)
        self._lexer = MarkdownLexer(stripnl=False)
        self._format_cache: dict[str, QTextCharFormat] = {}
        self.scheme_id = FALLBACK_SCHEME
        self.style = get_style_by_name(FALLBACK_SCHEME)
        self.set_scheme(scheme_id)

    def set_scheme(self, scheme_id: str) -> None:
        try:
            self.style = get_style_by_name(scheme_id)
            self.scheme_id = scheme_id
        except ClassNotFound:
            logger.warning("Pygments style %r not found; using %s", scheme_id, FALLBACK_SCHEME)
            self.style = get_style_by_name(FALLBACK_SCHEME)
            self.scheme_id = FALLBACK_SCHEME
        self._format_cache = {}
        self.rehighlight()

    def _format_for_token(self, token) -> QTextCharFormat:
        key = str(token)
        fmt = self._format_cache.get(key)
        if fmt is not None:
            return fmt
        style = self.style.style_for_token(token)
        fmt = QTextCharFormat()
        if style.get("color"):
            fmt.setForeground(QColor(f"#{style['color']}"))
        if style.get("bgcolor"):
            fmt.setBackground(QColor(f"#{style['bgcolor']}"))
        if style.get("bold"):
            fmt.setFontWeight(QFont.Weight.Bold)
        if style.get("italic"):
            fmt.setFontItalic(True)
        if style.get("underline"):
            fmt.setFontUnderline(True)
        self._format_cache[key] = fmt
        return fmt

    def highlightBlock(self, text: str) -> None:  # type: ignore[override]
        is_fence_line = text.lstrip().startswith(_FENCE_MARKERS)
        if self.previousBlockState() == FENCE_STATE:
            self.setFormat(0, len(text), self._format_for_token(Token.Literal.String.Backtick))
            self.setCurrentBlockState(-1 if is_fence_line else FENCE_STATE)
            return
        if is_fence_line:
            self.setFormat(0, len(text), self._format_for_token(Token.Literal.String.Backtick))
            self.setCurrentBlockState(FENCE_STATE)
            return
        self.setCurrentBlockState(-1)
        col = 0
        # The lexer needs the trailing newline for line-anchored rules such as headings.
        for token_type, value in lex(text, self._lexer):
            if col >= len(text):
                break
            length = min(len(value), len(text) - col)
            if token_type not in Token.Text:
                self.setFormat(col, length, self._format_for_token(token_type))
            col += len(value)


class MarkdownEditor(QPlainTextEdit):
    """Plain-text markdown source editor holding the current document identity."""

    documentPathChanged = Signal(object)

    def __init__(self, parent=None, scheme_id: str = FALLBACK_SCHEME) -> None:
        super().__init__(parent)
        self._document_path: Optional[str] = None
        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        self.setFont(font)
        self.setTabStopDistance(4 * self.fontMetrics().horizontalAdvance(" "))
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.WidgetWidth)
        self.highlighter = MarkdownHighlighter(self.document(), scheme_id)
        self._apply_scheme_palette()

    @property
    def document_path(self) -> Optional[str]:
        return self._document_path

    def set_document_path(self, path: Optional[str]) -> None:
        if path == self._document_path:
            return
        self._document_path = path
        self.documentPathChanged.emit(path)

    def load_text(self, text: str, path: Optional[str]) -> None:
        """Replace the buffer with a freshly opened (or new) document."""
        self.set_document_path(path)
        self.setPlainText(text)
        self.document().setModified(False)

    def snapshot(self) -> DocumentSnapshot:
        return DocumentSnapshot(text=self.toPlainText(), path=self._document_path)

    @property
    def scheme_id(self) -> str:
        return self.highlighter.scheme_id

    def set_scheme(self, scheme_id: str) -> None:
        self.highlighter.set_scheme(scheme_id)
        self._apply_scheme_palette()

    def _apply_scheme_palette(self) -> None:
        style = self.highlighter.style
        background = QColor(style.background_color or "#ffffff")
        text_style = style.style_for_token(Token.Text)
        if text_style.get("color"):
            foreground = QColor(f"#{text_style['color']}")
        else:
            foreground = QColor("#f0f0f0" if background.lightness() < 128 else "#1e1e1e")
        palette = self.palette()
        palette.setColor(QPalette.ColorRole.Base, background)
        palette.setColor(QPalette.ColorRole.Text, foreground)
        if style.highlight_color:
            palette.setColor(QPalette.ColorRole.Highlight, QColor(style.highlight_color))
        self.setPalette(palette)
