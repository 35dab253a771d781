from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QActionGroup, QGuiApplication, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSplitter,
)

from markview.app import config, files, theme
from markview.app.preview import PreviewSynchronizer
from markview.app.ui.layout import LayoutController
from markview.app.ui.markdown_editor import MarkdownEditor
from markview.app.ui.preview_view import PreviewView
from markview.app.ui.vi_mode import EditingModeController

logger = logging.getLogger(__name__)

APP_NAME = "MarkView"
APP_VERSION = "1.0"
APP_WEBSITE = "https://github.com/v8v88v8v88/MarkView"

APPEARANCE_LABELS = (
    (config.APPEARANCE_DEFAULT, "&System"),
    (config.APPEARANCE_FORCE_DARK, "&Dark"),
    (config.APPEARANCE_FORCE_LIGHT, "&Light"),
)

SHORTCUTS = (
    ("Ctrl+N", "New document"),
    ("Ctrl+O", "Open document"),
    ("Ctrl+S", "Save"),
    ("Ctrl+Shift+S", "Save as"),
    ("Ctrl+P", "Export preview to PDF"),
    ("F9", "Show/hide preview"),
    ("Ctrl+Alt+V", "Toggle vi mode"),
    ("Ctrl+Q", "Quit"),
)


class MainWindow(QMainWindow):
    def __init__(self, appearance_override: Optional[str] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self._appearance_mode = config.normalize_appearance_mode(
            appearance_override or config.load_appearance_mode()
        )
        theme.apply_appearance_mode(self._appearance_mode)

        self.editor = MarkdownEditor(self, scheme_id=theme.resolve_scheme(config.load_color_scheme()))
        self.preview = PreviewView(self)
        self.splitter = QSplitter(Qt.Orientation.Vertical, self)
        self.splitter.addWidget(self.editor)
        self.splitter.addWidget(self.preview)
        self.splitter.setSizes([360, 300])
        self.setCentralWidget(self.splitter)

        self.layout_controller = LayoutController(self.splitter)
        self.vi_controller = EditingModeController(self.editor, self)
        self.synchronizer = PreviewSynchronizer(
            self.editor.snapshot,
            lambda: self._appearance_mode,
            parent=self,
        )

        self._vi_label = QLabel(self)
        self._vi_label.hide()
        self.statusBar().addPermanentWidget(self._vi_label)

        self.synchronizer.pageReady.connect(self.preview.show_page)
        self.editor.textChanged.connect(self.synchronizer.on_document_changed)
        self.editor.documentPathChanged.connect(lambda _path: self.synchronizer.refresh())
        self.editor.modificationChanged.connect(lambda _modified: self._update_title())
        self.vi_controller.modeChanged.connect(self._on_vi_mode_changed)
        self.preview.pdfExported.connect(self._on_pdf_exported)
        QGuiApplication.styleHints().colorSchemeChanged.connect(self.synchronizer.on_appearance_changed)

        self._build_menus()
        self.synchronizer.refresh()
        self._update_title()

    # --- menus -----------------------------------------------------------

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        self._add_action(file_menu, "&New", self.new_document, QKeySequence.StandardKey.New)
        self._add_action(file_menu, "&Open…", self._open_with_dialog, QKeySequence.StandardKey.Open)
        self._add_action(file_menu, "&Save", self.save, QKeySequence.StandardKey.Save)
        self._add_action(file_menu, "Save &As…", self.save_as, QKeySequence.StandardKey.SaveAs)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Export PDF…", self._export_pdf_with_dialog, QKeySequence.StandardKey.Print)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Quit", self.close, QKeySequence.StandardKey.Quit)

        edit_menu = self.menuBar().addMenu("&Edit")
        self.vi_mode_action = QAction("&Vi Mode", self)
        self.vi_mode_action.setCheckable(True)
        self.vi_mode_action.setShortcut(QKeySequence("Ctrl+Alt+V"))
        self.vi_mode_action.toggled.connect(self.vi_controller.set_enabled)
        edit_menu.addAction(self.vi_mode_action)

        view_menu = self.menuBar().addMenu("&View")
        self.toggle_preview_action = QAction("Show &Preview", self)
        self.toggle_preview_action.setCheckable(True)
        self.toggle_preview_action.setChecked(True)
        self.toggle_preview_action.setShortcut(QKeySequence(Qt.Key.Key_F9))
        self.toggle_preview_action.triggered.connect(self._toggle_preview)
        view_menu.addAction(self.toggle_preview_action)

        appearance_menu = view_menu.addMenu("&Appearance")
        appearance_group = QActionGroup(self)
        appearance_group.setExclusive(True)
        for mode, label in APPEARANCE_LABELS:
            action = QAction(label, self)
            action.setCheckable(True)
            action.setChecked(mode == self._appearance_mode)
            action.triggered.connect(lambda checked=False, m=mode: self.set_appearance_mode(m))
            appearance_group.addAction(action)
            appearance_menu.addAction(action)

        scheme_menu = view_menu.addMenu("Editor &Scheme")
        scheme_group = QActionGroup(self)
        scheme_group.setExclusive(True)
        for scheme_id in theme.scheme_choices():
            action = QAction(scheme_id, self)
            action.setCheckable(True)
            action.setChecked(scheme_id == self.editor.scheme_id)
            action.triggered.connect(lambda checked=False, s=scheme_id: self.set_editor_scheme(s))
            scheme_group.addAction(action)
            scheme_menu.addAction(action)

        help_menu = self.menuBar().addMenu("&Help")
        self._add_action(help_menu, "&Keyboard Shortcuts", self._show_shortcuts, QKeySequence("Ctrl+?"))
        self._add_action(help_menu, "&About", self._show_about_dialog)

    def _add_action(self, menu, label: str, slot, shortcut=None) -> QAction:
        action = QAction(label, self)
        if shortcut is not None:
            action.setShortcut(shortcut)
        action.triggered.connect(lambda checked=False: slot())
        menu.addAction(action)
        return action

    # --- preferences -----------------------------------------------------

    @property
    def appearance_mode(self) -> str:
        return self._appearance_mode

    def set_appearance_mode(self, mode: str) -> None:
        normalized = config.normalize_appearance_mode(mode)
        self._appearance_mode = normalized
        config.save_appearance_mode(normalized)
        theme.apply_appearance_mode(normalized)
        self.synchronizer.on_appearance_changed()

    def set_editor_scheme(self, scheme_id: str) -> None:
        self.editor.set_scheme(scheme_id)
        config.save_color_scheme(self.editor.scheme_id)

    # --- documents -------------------------------------------------------

    def new_document(self) -> None:
        if not self._maybe_discard_changes():
            return
        self.editor.load_text("", None)

    def open_file(self, path: str) -> bool:
        try:
            text = files.read_document(path)
        except files.DocumentAccessError as exc:
            logger.warning("Open failed: %s", exc)
            self._alert(str(exc))
            return False
        self.editor.load_text(text, str(Path(path).resolve()))
        logger.info("Opened %s", path)
        return True

    def save(self) -> bool:
        path = self.editor.document_path
        if not path:
            return self.save_as()
        return self._write_to(path)

    def save_as(self) -> bool:
        start = self.editor.document_path or str(Path.cwd() / "Untitled.md")
        path, _selected = QFileDialog.getSaveFileName(self, "Save As", start, files.FILE_FILTER)
        if not path:
            return False
        if not Path(path).suffix:
            path = f"{path}.md"
        if not self._write_to(path):
            return False
        self.editor.set_document_path(str(Path(path).resolve()))
        self._update_title()
        return True

    def _write_to(self, path: str) -> bool:
        try:
            files.write_document(path, self.editor.toPlainText())
        except files.DocumentAccessError as exc:
            logger.warning("Save failed: %s", exc)
            self._alert(str(exc))
            return False
        self.editor.document().setModified(False)
        self.statusBar().showMessage(f"Saved {path}", 3000)
        return True

    def _open_with_dialog(self) -> None:
        if not self._maybe_discard_changes():
            return
        start = str(Path(self.editor.document_path).parent) if self.editor.document_path else str(Path.cwd())
        path, _selected = QFileDialog.getOpenFileName(self, "Open", start, files.FILE_FILTER)
        if path:
            self.open_file(path)

    def _export_pdf_with_dialog(self) -> None:
        if self.editor.document_path:
            start = str(Path(self.editor.document_path).with_suffix(".pdf"))
        else:
            start = str(Path.cwd() / "Untitled.pdf")
        path, _selected = QFileDialog.getSaveFileName(self, "Export PDF", start, "PDF files (*.pdf)")
        if path:
            self.preview.export_pdf(path)

    def _on_pdf_exported(self, path: str, success: bool) -> None:
        if success:
            self.statusBar().showMessage(f"Exported {path}", 3000)
        else:
            self._alert(f"Could not export PDF to {path}")

    def _maybe_discard_changes(self) -> bool:
        if not self.editor.document().isModified():
            return True
        answer = QMessageBox.question(
            self,
            APP_NAME,
            "The document has unsaved changes. Save them first?",
            QMessageBox.StandardButton.Save
            | QMessageBox.StandardButton.Discard
            | QMessageBox.StandardButton.Cancel,
        )
        if answer == QMessageBox.StandardButton.Save:
            return self.save()
        return answer == QMessageBox.StandardButton.Discard

    # --- view ------------------------------------------------------------

    def _toggle_preview(self) -> None:
        hidden = self.layout_controller.toggle_hidden()
        self.toggle_preview_action.setChecked(not hidden)
        if hidden:
            self.editor.setFocus(Qt.FocusReason.OtherFocusReason)

    def _on_vi_mode_changed(self, mode: str) -> None:
        if mode:
            self._vi_label.setText(mode)
            self._vi_label.show()
        else:
            self._vi_label.hide()
        if self.vi_mode_action.isChecked() != bool(mode):
            self.vi_mode_action.setChecked(bool(mode))

    def _update_title(self) -> None:
        path = self.editor.document_path
        name = Path(path).name if path else "Untitled"
        marker = "*" if self.editor.document().isModified() else ""
        self.setWindowTitle(f"{marker}{name} - {APP_NAME}")

    def _show_shortcuts(self) -> None:
        rows = "".join(f"<tr><td><b>{keys}</b></td><td>{label}</td></tr>" for keys, label in SHORTCUTS)
        QMessageBox.information(self, "Keyboard Shortcuts", f"<table cellspacing='6'>{rows}</table>")

    def _show_about_dialog(self) -> None:
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<h3>{APP_NAME} {APP_VERSION}</h3>"
            "<p>Markdown editor with a live preview.</p>"
            f"<p><a href='{APP_WEBSITE}'>{APP_WEBSITE}</a></p>"
            "<p>Licensed under the GNU General Public License v3.0.</p>",
        )

    def _alert(self, message: str) -> None:
        QMessageBox.critical(self, APP_NAME, message)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if not self._maybe_discard_changes():
            event.ignore()
            return
        self.vi_controller.disable()
        try:
            QGuiApplication.styleHints().colorSchemeChanged.disconnect(self.synchronizer.on_appearance_changed)
        except (RuntimeError, TypeError) as exc:
            logger.debug("Colour scheme signal already disconnected: %s", exc)
        super().closeEvent(event)
