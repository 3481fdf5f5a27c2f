"""Value types and errors for the read-only document filesystem."""

from __future__ import annotations

import errno
import stat
from dataclasses import dataclass

from testmark.document.models import DirEnt

# Nothing can be written through this view.
READ_ONLY_MODE = 0o444


@dataclass(frozen=True)
class FileStat:
    """What ``File.stat()`` reports about a node.

    ``size`` is the hunk body length when the node holds a hunk, and the
    number of children otherwise. A node may be a directory and hold a
    hunk at once; ``size`` then still reports the body length.
    """

    name: str
    size: int
    is_dir: bool
    backing: DirEnt

    @property
    def mode(self) -> int:
        if self.is_dir:
            return stat.S_IFDIR | READ_ONLY_MODE
        return stat.S_IFREG | READ_ONLY_MODE

    @property
    def is_file(self) -> bool:
        return self.backing.hunk is not None


class NotFoundError(FileNotFoundError):
    """No hunk or implied directory exists at the requested path."""

    def __init__(self, op: str, path: str) -> None:
        self.op = op
        self.path = path
        super().__init__(errno.ENOENT, f"{op}: no such hunk or directory", path)


class ClosedHandleError(ValueError):
    """An operation was attempted on a File that has been closed."""

    def __init__(self, op: str) -> None:
        self.op = op
        super().__init__(f"{op}: file already closed")
