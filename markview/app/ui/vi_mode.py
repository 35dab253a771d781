from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtGui import QKeyEvent, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

logger = logging.getLogger(__name__)

VI_NORMAL = "NORMAL"
VI_INSERT = "INSERT"

_MOTIONS = {
    "h": QTextCursor.MoveOperation.Left,
    "l": QTextCursor.MoveOperation.Right,
    "j": QTextCursor.MoveOperation.Down,
    "k": QTextCursor.MoveOperation.Up,
    "w": QTextCursor.MoveOperation.NextWord,
    "b": QTextCursor.MoveOperation.PreviousWord,
    "0": QTextCursor.MoveOperation.StartOfLine,
    "$": QTextCursor.MoveOperation.EndOfLine,
    "G": QTextCursor.MoveOperation.End,
}
_SWALLOWED_KEYS = (Qt.Key.Key_Backspace, Qt.Key.Key_Delete, Qt.Key.Key_Return, Qt.Key.Key_Enter)


class ViInputController(QObject):
    """Event filter that interprets editor keystrokes vi-style.

    In normal mode keys are commands and never reach the editor; insert mode
    passes everything through until Escape.
    """

    modeChanged = Signal(str)

    def __init__(self, editor: QPlainTextEdit) -> None:
        super().__init__(editor)
        self._editor = editor
        self._insert_mode = False
        self._pending = ""
        self._saved_cursor_width = editor.cursorWidth()
        editor.installEventFilter(self)
        self._update_cursor()

    @property
    def mode(self) -> str:
        return VI_INSERT if self._insert_mode else VI_NORMAL

    def detach(self) -> None:
        """Stop filtering the editor and restore its normal cursor."""
        self._editor.removeEventFilter(self)
        self._editor.setCursorWidth(self._saved_cursor_width)
        self.setParent(None)

    def eventFilter(self, obj, event) -> bool:  # type: ignore[override]
        if obj is self._editor and event.type() == QEvent.Type.KeyPress:
            return self.handle_key(event)
        return False

    def handle_key(self, event: QKeyEvent) -> bool:
        key = event.key()
        if self._insert_mode:
            if key == Qt.Key.Key_Escape:
                self._set_insert_mode(False)
                return True
            return False

        mods = event.modifiers() & ~Qt.KeyboardModifier.KeypadModifier
        command_mods = (
            Qt.KeyboardModifier.ControlModifier
            | Qt.KeyboardModifier.AltModifier
            | Qt.KeyboardModifier.MetaModifier
        )
        if mods & command_mods:
            # Application shortcuts (Ctrl+S and friends) still work in normal mode.
            return False

        text = event.text()
        pending, self._pending = self._pending, ""
        if pending == "d" and text == "d":
            self._delete_line()
            return True
        if pending == "g" and text == "g":
            self._move(QTextCursor.MoveOperation.Start)
            return True

        if key == Qt.Key.Key_Escape:
            return True
        if text in _MOTIONS:
            self._move(_MOTIONS[text])
            return True
        if text in ("d", "g"):
            self._pending = text
            return True
        if text == "x":
            self._delete_char()
            return True
        if text == "u":
            self._editor.undo()
            return True
        if text in ("i", "a", "A", "I", "o", "O"):
            self._begin_insert(text)
            return True
        if key in _SWALLOWED_KEYS:
            return True
        # Printable keys are commands in normal mode; unknown ones are ignored.
        return bool(text and text.isprintable())

    def _set_insert_mode(self, active: bool) -> None:
        if self._insert_mode == active:
            return
        self._insert_mode = active
        self._update_cursor()
        self.modeChanged.emit(self.mode)

    def _update_cursor(self) -> None:
        if self._insert_mode:
            self._editor.setCursorWidth(self._saved_cursor_width)
        else:
            self._editor.setCursorWidth(max(1, self._editor.fontMetrics().horizontalAdvance("M")))

    def _move(self, op: QTextCursor.MoveOperation) -> None:
        cursor = self._editor.textCursor()
        cursor.movePosition(op)
        self._editor.setTextCursor(cursor)

    def _delete_char(self) -> None:
        cursor = self._editor.textCursor()
        if cursor.hasSelection():
            cursor.removeSelectedText()
        elif not cursor.atBlockEnd():
            cursor.deleteChar()
        self._editor.setTextCursor(cursor)

    def _delete_line(self) -> None:
        cursor = self._editor.textCursor()
        block = cursor.block()
        start = block.position()
        end = start + block.length()
        last_position = self._editor.document().characterCount() - 1
        if end > last_position:
            # Last line has no trailing separator; take the preceding one instead.
            end = last_position
            start = max(0, start - 1)
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
        cursor.removeSelectedText()
        cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
        self._editor.setTextCursor(cursor)

    def _begin_insert(self, command: str) -> None:
        cursor = self._editor.textCursor()
        if command == "a" and not cursor.atBlockEnd():
            cursor.movePosition(QTextCursor.MoveOperation.Right)
        elif command == "A":
            cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock)
        elif command == "I":
            cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
        elif command == "o":
            cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock)
            cursor.insertBlock()
        elif command == "O":
            cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
            cursor.insertBlock()
            cursor.movePosition(QTextCursor.MoveOperation.PreviousBlock)
        self._editor.setTextCursor(cursor)
        self._set_insert_mode(True)


class EditingModeController(QObject):
    """Owns at most one ViInputController attached to the editor."""

    modeChanged = Signal(str)

    def __init__(self, editor: QPlainTextEdit, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._editor = editor
        self._controller: Optional[ViInputController] = None

    @property
    def controller(self) -> Optional[ViInputController]:
        return self._controller

    @property
    def is_enabled(self) -> bool:
        return self._controller is not None

    def enable(self) -> None:
        if self._controller is not None:
            return
        controller = ViInputController(self._editor)
        controller.modeChanged.connect(self.modeChanged)
        self._controller = controller
        logger.debug("Vi mode attached to editor")
        self.modeChanged.emit(controller.mode)

    def disable(self) -> None:
        if self._controller is None:
            return
        controller = self._controller
        self._controller = None
        controller.detach()
        controller.deleteLater()
        logger.debug("Vi mode detached from editor")
        self.modeChanged.emit("")

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.enable()
        else:
            self.disable()
