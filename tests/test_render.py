import pytest

from markview.app import render


def test_empty_text_renders_placeholder():
    fragment = render.render_fragment("")
    assert fragment == render.PLACEHOLDER_FRAGMENT
    assert "placeholder" in fragment
    assert render.PLACEHOLDER_TEXT in fragment


@pytest.mark.parametrize(
    "text",
    [
        "**unclosed bold",
        "[broken](link",
        "```\nnever closed fence",
        "<div><span>unbalanced",
        "| a | b |\n|---|\n| 1 |",
        "[^missing]",
        "\x00\x01 control chars",
        "   ",
    ],
)
def test_malformed_input_still_renders(text):
    fragment = render.render_fragment(text)
    assert isinstance(fragment, str)
    assert "<html" not in fragment


def test_tables_render():
    fragment = render.render_fragment("| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<table>" in fragment
    assert "<td>1</td>" in fragment


def test_strikethrough_renders():
    assert "<del>gone</del>" in render.render_fragment("this is ~~gone~~")


def test_footnotes_render():
    fragment = render.render_fragment("Claim[^1]\n\n[^1]: Source.\n")
    assert 'class="footnote"' in fragment
    assert "Source." in fragment


def test_task_lists_render():
    fragment = render.render_fragment("- [x] done\n- [ ] todo\n")
    assert "task-list-item" in fragment
    assert 'type="checkbox"' in fragment


def test_smart_punctuation():
    fragment = render.render_fragment('He said "hi" -- twice...')
    assert "&ldquo;" in fragment
    assert "&ndash;" in fragment
    assert "&hellip;" in fragment


def test_render_is_repeatable():
    text = "# Title\n\nSome *text* with `code`."
    assert render.render_fragment(text) == render.render_fragment(text)


def test_assemble_page_orders_parts():
    page = render.assemble_page("<p>body</p>", is_dark=True)
    assert page.startswith(render.PAGE_PREAMBLE)
    css_at = page.index(render.DARK_CSS)
    print_at = page.index(render.PRINT_CSS)
    body_at = page.index("<p>body</p>")
    assert css_at < print_at < body_at
    assert render.LIGHT_CSS not in page


def test_print_stylesheet_present_for_both_themes():
    for is_dark in (True, False):
        page = render.assemble_page("<p>x</p>", is_dark)
        assert "@media print" in page
        assert "margin: 0" in render.PRINT_CSS


def test_background_colors_match_css():
    assert render.background_color(True) == render.BACKGROUND_DARK
    assert render.background_color(False) == render.BACKGROUND_LIGHT
    assert "rgb(36, 36, 36)" in render.DARK_CSS
    assert "rgb(255, 255, 255)" in render.LIGHT_CSS


def test_ordinary_pages_fit_inline():
    page = render.assemble_page(render.render_fragment("# Notes\n\nSome text."), is_dark=False)
    assert render.fits_inline(page)
    assert render.inline_url_length(page) > len(page)


def test_inline_length_counts_percent_encoding():
    assert render.inline_url_length("abc-._~") == len(render.INLINE_URL_PREFIX) + 7
    assert render.inline_url_length("a b") == len(render.INLINE_URL_PREFIX) + 5
    # Two UTF-8 bytes, each escaped as %XX.
    assert render.inline_url_length("é") == len(render.INLINE_URL_PREFIX) + 6


def test_multi_megabyte_document_does_not_fit_inline():
    fragment = render.render_fragment("word " * 500_000)
    page = render.assemble_page(fragment, is_dark=True)
    assert not render.fits_inline(page)


def test_base_href_is_injected_into_head():
    page = render.assemble_page("<p>x</p>", is_dark=False)
    based = render.with_base_href(page, "file:///home/user/my%20notes/")
    assert based.count('<base href="file:///home/user/my%20notes/">') == 1
    assert based.index("<head>") < based.index("<base ") < based.index("<style>")
    assert based.replace('<base href="file:///home/user/my%20notes/">\n', "") == page


def test_base_href_skipped_without_base_uri():
    page = render.assemble_page("<p>x</p>", is_dark=False)
    assert render.with_base_href(page, None) == page
