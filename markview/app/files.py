from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

FILE_FILTER = "Markdown files (*.md *.markdown *.mdown);;Text files (*.txt);;All files (*)"


class DocumentAccessError(RuntimeError):
    pass


def read_document(path: Union[str, Path]) -> str:
    """Read a whole document as UTF-8 with line endings untouched.

    Malformed UTF-8 is an error, not recovered.
    """
    file_path = Path(path)
    try:
        return file_path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentAccessError(f"{file_path} is not valid UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise DocumentAccessError(f"Could not open {file_path}: {exc.strerror or exc}") from exc


def write_document(path: Union[str, Path], text: str) -> None:
    """Overwrite a document with UTF-8 text."""
    file_path = Path(path)
    try:
        file_path.write_text(text, encoding="utf-8", newline="")
    except OSError as exc:
        raise DocumentAccessError(f"Could not save {file_path}: {exc.strerror or exc}") from exc
    logger.info("Saved %s (%d chars)", file_path, len(text))

