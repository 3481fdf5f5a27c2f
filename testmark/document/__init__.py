"""Document subsystem: data model, parser, and directory index."""

from testmark.document.index import PATH_SEPARATOR, build_dir_index, describe, find_dirent
from testmark.document.models import DirEnt, DocHunk, Document, Hunk, ParseError
from testmark.document.parser import CODE_BLOCK, MARKER, parse, read, read_file

__all__ = [
    "CODE_BLOCK",
    "DirEnt",
    "DocHunk",
    "Document",
    "Hunk",
    "MARKER",
    "PATH_SEPARATOR",
    "ParseError",
    "build_dir_index",
    "describe",
    "find_dirent",
    "parse",
    "read",
    "read_file",
]
