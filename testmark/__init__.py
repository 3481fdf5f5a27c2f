"""testmark: named, byte-exact test fixtures embedded in markdown."""

from testmark.document import (
    DirEnt,
    DocHunk,
    Document,
    Hunk,
    ParseError,
    build_dir_index,
    describe,
    parse,
    read,
    read_file,
)
from testmark.fs import ClosedHandleError, DocumentFS, NotFoundError
from testmark.output import dumps, write, write_file, write_file_with_patches, write_with_patches
from testmark.patch import PatchAccumulator, ValidationError, patch

__all__ = [
    "ClosedHandleError",
    "DirEnt",
    "DocHunk",
    "Document",
    "DocumentFS",
    "Hunk",
    "NotFoundError",
    "ParseError",
    "PatchAccumulator",
    "ValidationError",
    "build_dir_index",
    "describe",
    "dumps",
    "parse",
    "patch",
    "read",
    "read_file",
    "write",
    "write_file",
    "write_file_with_patches",
    "write_with_patches",
]
