from __future__ import annotations

import html
import logging
import string
from typing import Optional

import markdown

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = [
    "extra",
    "sane_lists",
    "smarty",
    "pymdownx.tilde",
    "pymdownx.tasklist",
]
MARKDOWN_EXTENSION_CONFIGS = {
    "pymdownx.tilde": {"subscript": False},
    "pymdownx.tasklist": {"custom_checkbox": False, "clickable_checkbox": False},
}

PLACEHOLDER_TEXT = "Start typing Markdown in the editor to see the preview here."
PLACEHOLDER_FRAGMENT = f'<p class="placeholder">{html.escape(PLACEHOLDER_TEXT)}</p>'

BACKGROUND_DARK = (36, 36, 36)
BACKGROUND_LIGHT = (255, 255, 255)

# QtWebEngine drops setHtml loads whose percent-encoded data: URL exceeds this.
INLINE_URL_LIMIT = 2 * 1024 * 1024
INLINE_URL_PREFIX = "data:text/html;charset=UTF-8,"
_URL_SAFE_BYTES = (string.ascii_letters + string.digits + "-._~").encode("ascii")

PAGE_PREAMBLE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
"""

_BASE_CSS = """
body {{
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
    line-height: 1.6;
    max-width: 860px;
    margin: 0 auto;
    padding: 1.5rem 2rem;
    color: {text};
    background: {background};
    word-wrap: break-word;
}}
h1, h2, h3, h4, h5, h6 {{ line-height: 1.25; margin: 1.2em 0 0.5em; }}
h1, h2 {{ border-bottom: 1px solid {border}; padding-bottom: 0.3em; }}
a {{ color: {link}; }}
code {{
    font-family: "DejaVu Sans Mono", Menlo, Consolas, monospace;
    font-size: 0.9em;
    background: {code_bg};
    padding: 0.15em 0.35em;
    border-radius: 4px;
}}
pre {{
    background: {code_bg};
    padding: 0.8em 1em;
    overflow-x: auto;
    border-radius: 6px;
}}
pre code {{ background: none; padding: 0; }}
blockquote {{
    margin: 0.8em 0;
    padding: 0 1em;
    color: {muted};
    border-left: 4px solid {border};
}}
table {{ border-collapse: collapse; margin: 1em 0; }}
th, td {{ border: 1px solid {border}; padding: 0.4em 0.7em; }}
th {{ background: {code_bg}; }}
hr {{ border: 0; border-top: 1px solid {border}; }}
img {{ max-width: 100%; }}
del {{ color: {muted}; }}
.task-list-item {{ list-style-type: none; }}
.task-list-item input {{ margin: 0 0.4em 0 -1.4em; }}
.footnote {{ font-size: 0.9em; color: {muted}; }}
.placeholder {{ color: {muted}; font-style: italic; text-align: center; margin-top: 3em; }}
"""

DARK_CSS = _BASE_CSS.format(
    text="#deddda",
    background="rgb(%d, %d, %d)" % BACKGROUND_DARK,
    border="#3d3d3d",
    link="#78aeed",
    code_bg="#303030",
    muted="#9a9996",
)
LIGHT_CSS = _BASE_CSS.format(
    text="#1e1e1e",
    background="rgb(%d, %d, %d)" % BACKGROUND_LIGHT,
    border="#d8d8d8",
    link="#1c71d8",
    code_bg="#f3f3f3",
    muted="#5e5c64",
)

PRINT_CSS = """
@media print {
    @page { margin: 0; }
    html, body { margin: 0; border: 0; max-width: none; }
    pre, table, blockquote { border: 0; }
}
"""


def render_fragment(text: str) -> str:
    """Render markdown text to an HTML fragment. Never raises."""
    if not text:
        return PLACEHOLDER_FRAGMENT
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
        output_format="html",
    )
    try:
        return md.convert(text)
    except Exception:
        logger.exception("Markdown conversion failed; showing source text")
        return f"<pre>{html.escape(text)}</pre>"


def theme_css(is_dark: bool) -> str:
    return DARK_CSS if is_dark else LIGHT_CSS


def background_color(is_dark: bool) -> tuple[int, int, int]:
    return BACKGROUND_DARK if is_dark else BACKGROUND_LIGHT


def assemble_page(fragment: str, is_dark: bool) -> str:
    """Wrap a fragment into a standalone page with inline, theme-selected CSS."""
    return (
        PAGE_PREAMBLE
        + "<style>\n"
        + theme_css(is_dark)
        + PRINT_CSS
        + "</style>\n</head>\n<body>\n"
        + fragment
        + "\n</body>\n</html>\n"
    )


def inline_url_length(page_html: str) -> int:
    """Length of the data: URL QtWebEngine builds for ``setHtml(page_html)``."""
    data = page_html.encode("utf-8")
    escaped = len(data.translate(None, _URL_SAFE_BYTES))
    return len(INLINE_URL_PREFIX) + len(data) + 2 * escaped


def fits_inline(page_html: str) -> bool:
    return inline_url_length(page_html) < INLINE_URL_LIMIT


def with_base_href(page_html: str, base_uri: Optional[str]) -> str:
    """Embed the base URI in the page head, for pages not loaded via setHtml."""
    if not base_uri:
        return page_html
    tag = f'<base href="{html.escape(base_uri, quote=True)}">'
    return page_html.replace("<head>\n", f"<head>\n{tag}\n", 1)
