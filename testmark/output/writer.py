"""Serialize Documents back to bytes, optionally patching them first."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from testmark.document.models import Document, Hunk
from testmark.document.parser import LINE_BREAK
from testmark.patch.engine import patch

logger = logging.getLogger(__name__)


def write(doc: Document) -> bytes:
    """Join the document's lines with LF.

    No validation is done; a line must not itself contain LF.
    """
    return LINE_BREAK.join(doc.lines)


def dumps(doc: Document) -> str:
    return write(doc).decode("utf-8")


def write_file(doc: Document, path: str | Path) -> Path:
    """Write *doc* to *path*, replacing whatever is there."""
    path = Path(path)
    data = write(doc)
    path.write_bytes(data)
    logger.info("wrote %s (%d bytes)", path, len(data))
    return path


def write_with_patches(doc: Document, patches: Iterable[Hunk]) -> bytes:
    """Patch *doc* and serialize the result. No patches means no output."""
    patches = list(patches)
    if not patches:
        return b""
    return write(patch(doc, patches))


def write_file_with_patches(doc: Document, path: str | Path, patches: Iterable[Hunk]) -> bool:
    """Patch *doc* and write it to *path*.

    Leaves the file alone when there is nothing to patch. Returns True if
    the file was written.
    """
    patches = list(patches)
    if not patches:
        logger.debug("no patches for %s, leaving it untouched", path)
        return False
    write_file(patch(doc, patches), path)
    return True
