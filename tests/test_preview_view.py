from pathlib import Path

import pytest

pytest.importorskip("PySide6.QtWebEngineWidgets")

from PySide6.QtWidgets import QApplication

from markview.app import render
from markview.app.preview import compose_page
from markview.app.ui.preview_view import PreviewView


def _ensure_qapp() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture(scope="module")
def app() -> QApplication:
    return _ensure_qapp()


@pytest.fixture
def view(app, monkeypatch):
    v = PreviewView()
    v.inline_loads = []
    v.url_loads = []
    monkeypatch.setattr(v, "setHtml", lambda html, base: v.inline_loads.append((html, base)))
    monkeypatch.setattr(v, "load", v.url_loads.append)
    yield v
    v.deleteLater()


def test_small_page_is_set_inline_with_base_url(view, tmp_path):
    page = compose_page("![pic](pic.png)", "force-light", str(tmp_path / "doc.md"), system_dark=False)
    view.show_page(page)
    assert view.url_loads == []
    (html, base), = view.inline_loads
    assert html == page.html
    assert base.toString() == page.base_uri
    assert view.current_page is page


def test_large_page_is_loaded_from_file_with_base_tag(view, tmp_path):
    page = compose_page("word " * 500_000, "force-dark", str(tmp_path / "big.md"), system_dark=False)
    assert not render.fits_inline(page.html)
    view.show_page(page)
    assert view.inline_loads == []
    (url,) = view.url_loads
    assert url.isLocalFile()
    spooled = Path(url.toLocalFile()).read_text(encoding="utf-8")
    assert f'<base href="{page.base_uri}">' in spooled
    assert "word word" in spooled
    assert view.current_page is page
