import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor

from markview.app import theme


@pytest.mark.parametrize("system_dark", [True, False])
def test_force_modes_ignore_system_signal(system_dark):
    assert theme.resolve_is_dark("force-dark", system_dark) is True
    assert theme.resolve_is_dark("force-light", system_dark) is False


@pytest.mark.parametrize("mode", ["default", "", None, "whatever", "dark"])
@pytest.mark.parametrize("system_dark", [True, False])
def test_other_modes_follow_system(mode, system_dark):
    assert theme.resolve_is_dark(mode, system_dark) is system_dark


def test_scheme_choices_prefers_known_ids_in_order():
    host = ["zenburn", "Tango", "nord", "emacs", "MONOKAI"]
    assert theme.scheme_choices(host) == ["MONOKAI", "nord", "Tango"]


def test_scheme_choices_falls_back_to_first_ten_host_ids():
    host = [f"style{i:02d}" for i in range(15)]
    assert theme.scheme_choices(host) == host[:10]


def test_scheme_choices_without_host_schemes_uses_fallback():
    assert theme.scheme_choices([]) == [theme.FALLBACK_SCHEME]


def test_resolve_scheme_matches_case_insensitively():
    host = ["monokai", "solarized-dark", "tango"]
    assert theme.resolve_scheme("Solarized-Dark", host) == "solarized-dark"


def test_resolve_scheme_unknown_id_picks_first_choice():
    assert theme.resolve_scheme("Kate", ["tango", "nord"]) == "nord"
    assert theme.resolve_scheme(None, ["zenburn"]) == "zenburn"
    assert theme.resolve_scheme("Adwaita-dark", []) == theme.FALLBACK_SCHEME


def test_installed_pygments_styles_resolve():
    available = theme.available_schemes()
    assert available
    assert theme.resolve_scheme("monokai") in theme.scheme_choices(available)


class _FakeHints:
    def __init__(self, scheme=Qt.ColorScheme.Unknown) -> None:
        self.scheme = scheme
        self.requests = []

    def colorScheme(self):
        return self.scheme

    def setColorScheme(self, scheme) -> None:
        self.requests.append(scheme)
        self.scheme = scheme

    def unsetColorScheme(self) -> None:
        self.requests.append(None)
        self.scheme = Qt.ColorScheme.Unknown


class _FakeGuiApp:
    """Stands in for QGuiApplication so the live platform scheme can be controlled."""

    def __init__(self, hints: _FakeHints, window=QColor("white"), running=True) -> None:
        self.hints = hints
        self.window = window
        self.running = running

    def instance(self):
        return self if self.running else None

    def styleHints(self):
        return self.hints

    def palette(self):
        return self

    def color(self, _role):
        return self.window


@pytest.fixture
def hints(monkeypatch) -> _FakeHints:
    fake = _FakeHints()
    monkeypatch.setattr(theme, "QGuiApplication", _FakeGuiApp(fake))
    return fake


@pytest.mark.parametrize(
    "mode, expected",
    [
        ("force-dark", Qt.ColorScheme.Dark),
        ("force-light", Qt.ColorScheme.Light),
    ],
)
def test_force_modes_are_pushed_into_style_hints(hints, mode, expected):
    theme.apply_appearance_mode(mode)
    assert hints.colorScheme() == expected
    assert theme.system_prefers_dark() is (expected == Qt.ColorScheme.Dark)


def test_default_mode_unsets_forced_scheme(hints):
    theme.apply_appearance_mode("force-dark")
    theme.apply_appearance_mode("default")
    assert hints.requests == [Qt.ColorScheme.Dark, None]
    assert hints.colorScheme() == Qt.ColorScheme.Unknown


def test_unknown_mode_is_treated_as_default(hints):
    theme.apply_appearance_mode("sepia")
    assert hints.requests == [None]


def test_system_prefers_dark_reads_style_hints(hints):
    hints.scheme = Qt.ColorScheme.Dark
    assert theme.system_prefers_dark() is True
    hints.scheme = Qt.ColorScheme.Light
    assert theme.system_prefers_dark() is False


@pytest.mark.parametrize("window, expected", [("#202020", True), ("#f0f0f0", False)])
def test_system_prefers_dark_falls_back_to_palette(monkeypatch, window, expected):
    fake = _FakeGuiApp(_FakeHints(Qt.ColorScheme.Unknown), window=QColor(window))
    monkeypatch.setattr(theme, "QGuiApplication", fake)
    assert theme.system_prefers_dark() is expected


def test_without_application_nothing_is_touched(monkeypatch):
    fake_hints = _FakeHints(Qt.ColorScheme.Dark)
    monkeypatch.setattr(theme, "QGuiApplication", _FakeGuiApp(fake_hints, running=False))
    assert theme.system_prefers_dark() is False
    theme.apply_appearance_mode("force-light")
    assert fake_hints.requests == []
