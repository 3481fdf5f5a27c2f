"""Read-only filesystem view over a document's hunk tree."""

from testmark.fs.models import READ_ONLY_MODE, ClosedHandleError, FileStat, NotFoundError
from testmark.fs.vfs import DocumentFS, File, walk

__all__ = [
    "ClosedHandleError",
    "DocumentFS",
    "File",
    "FileStat",
    "NotFoundError",
    "READ_ONLY_MODE",
    "walk",
]
