"""Utilities for turning document locations into preview base URIs."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, os.PathLike]


def directory_uri(directory: Path) -> str:
    """Return a ``file://`` URI for a directory, always ending with ``/``."""
    uri = directory.as_uri()
    return uri if uri.endswith("/") else f"{uri}/"


def document_directory(document_path: Optional[PathLike]) -> Optional[Path]:
    """Return the folder holding a document, or None when there is no usable parent."""
    if not document_path:
        return None
    path = Path(document_path)
    if not path.name:
        return None
    if not path.is_absolute():
        path = path.absolute()
    parent = path.parent
    if parent == path:
        return None
    return parent


def resolve_base_uri(document_path: Optional[PathLike]) -> Optional[str]:
    """Base URI that relative links and images in the preview resolve against.

    Saved documents resolve against their own folder. Unsaved documents fall
    back to the canonical working directory; None only if that cannot be
    determined.
    """
    directory = document_directory(document_path)
    if directory is not None:
        return directory_uri(directory)
    try:
        cwd = Path.cwd().resolve(strict=True)
    except OSError:
        return None
    return directory_uri(cwd)
