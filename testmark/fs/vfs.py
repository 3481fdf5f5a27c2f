"""Read-only filesystem view over an indexed Document.

Hunk names are treated as slash-separated paths. A hunk named
``one/two`` is a file ``two`` inside a directory ``one``, and a node can
be a file and a directory at the same time when hunks ``one`` and
``one/two`` both exist.

Unlike a real filesystem there is no path cleaning: ``.`` and ``..`` are
ordinary names, and the root is opened with the empty path rather than
``"."``.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator

from testmark.document.index import PATH_SEPARATOR, build_dir_index, find_dirent
from testmark.document.models import DirEnt, Document
from testmark.fs.models import ClosedHandleError, FileStat, NotFoundError

logger = logging.getLogger(__name__)


def _stat_for(ent: DirEnt) -> FileStat:
    return FileStat(
        name=ent.name,
        size=len(ent.hunk.body) if ent.hunk is not None else len(ent.children),
        is_dir=ent.is_dir,
        backing=ent,
    )


class File:
    """An open handle on one DirEnt.

    Each handle owns its read position and its directory-listing cursor.
    The data it reads is shared with the Document and never changes.
    """

    def __init__(self, ent: DirEnt) -> None:
        self._ent = ent
        body = ent.hunk.body if ent.hunk is not None else b""
        self._buffer: io.BytesIO | None = io.BytesIO(body)
        self._children_sorted = sorted(ent.children)
        self._child_idx = 0
        self._stat = _stat_for(ent)

    @property
    def name(self) -> str:
        return self._stat.name

    @property
    def is_dir(self) -> bool:
        return self._stat.is_dir

    @property
    def closed(self) -> bool:
        return self._buffer is None

    def stat(self) -> FileStat:
        return self._stat

    def read(self, size: int = -1) -> bytes:
        """Read up to *size* bytes of the hunk body (all if negative).

        Returns ``b""`` once the body is exhausted, or straight away for a
        pure directory.
        """
        if self._buffer is None:
            raise ClosedHandleError("read")
        return self._buffer.read(size)

    def readinto(self, buffer: bytearray | memoryview) -> int:
        if self._buffer is None:
            raise ClosedHandleError("read")
        return self._buffer.readinto(buffer)

    def list_children(self, limit: int = -1) -> list[FileStat]:
        """Return stats for the next *limit* children in name order (all if negative).

        Successive calls continue where the last one stopped. A node
        without children yields an empty list. Nothing is opened; pass
        ``FileStat.backing`` to ``File`` or open the child by path.
        """
        if self._buffer is None:
            raise ClosedHandleError("readdir")
        start = self._child_idx
        end = len(self._children_sorted)
        if limit >= 0:
            end = min(start + limit, end)
        self._child_idx = end
        return [_stat_for(self._ent.children[name]) for name in self._children_sorted[start:end]]

    def close(self) -> None:
        if self._buffer is None:
            raise ClosedHandleError("close")
        self._buffer = None

    def __enter__(self) -> File:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._buffer is not None:
            self.close()

    def __repr__(self) -> str:
        return f"File({self._ent.path!r}, is_dir={self.is_dir}, size={self._stat.size})"


class DocumentFS:
    """Opens paths within a Document's hunk tree.

    The index is built on first use if the document does not have one
    yet. It is not rebuilt afterward.
    """

    def __init__(self, doc: Document) -> None:
        self.doc = doc

    @property
    def root(self) -> DirEnt:
        if self.doc.dir_root is None:
            build_dir_index(self.doc)
        return self.doc.dir_root

    def open(self, path: str) -> File:
        """Open a hunk or implied directory. ``""`` opens the root."""
        if path == "":
            return File(self.root)
        ent = find_dirent(self.root, path.split(PATH_SEPARATOR))
        if ent is None:
            logger.debug("no hunk or directory at %r", path)
            raise NotFoundError("open", path)
        return File(ent)

    def read_bytes(self, path: str) -> bytes:
        with self.open(path) as f:
            return f.read()

    def exists(self, path: str) -> bool:
        try:
            self.open(path).close()
        except NotFoundError:
            return False
        return True


def walk(fs: DocumentFS, top: str = "") -> Iterator[tuple[str, File]]:
    """Yield ``(path, File)`` for *top* and everything beneath it.

    Depth first, children in name order, parents before their children.
    Each yielded File is closed once the walk moves past it.
    """
    yield from _walk(top, fs.open(top))


def _walk(path: str, f: File) -> Iterator[tuple[str, File]]:
    with f:
        children = f.list_children()
        yield path, f
    for child in children:
        child_path = child.name if path == "" else f"{path}{PATH_SEPARATOR}{child.name}"
        yield from _walk(child_path, File(child.backing))
