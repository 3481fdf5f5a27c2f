"""Directory index over hunk names, treating them as slash-separated paths."""

from __future__ import annotations

import logging

from testmark.document.models import DirEnt, Document, Hunk

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def _fill(root: DirEnt, segments: list[str], hunk: Hunk) -> None:
    node = root
    for depth, segment in enumerate(segments):
        child = node.children.get(segment)
        if child is None:
            child = DirEnt(
                name=segment,
                path=PATH_SEPARATOR.join(segments[: depth + 1]),
            )
            node.children[segment] = child
        node = child
    node.hunk = hunk


def build_dir_index(doc: Document) -> DirEnt:
    """Build the path index for *doc*, cache it on ``doc.dir_root``, return it.

    Directories are implied by hunk names: a hunk named ``foo/bar`` creates
    a node ``foo`` even if no hunk is called ``foo``. Child order follows
    the order names are first seen in the document.

    No path cleaning happens. ``.`` and ``..`` are ordinary names, and
    repeated slashes produce empty segments.
    """
    root = DirEnt()
    for doc_hunk in doc.hunks:
        _fill(root, doc_hunk.name.split(PATH_SEPARATOR), doc_hunk.hunk)
    doc.dir_root = root
    logger.debug("indexed %d hunk(s), %d top-level entries", len(doc.hunks), len(root.children))
    return root


def find_dirent(root: DirEnt, segments: list[str]) -> DirEnt | None:
    """Walk *segments* down from *root*; None if any step is missing."""
    node = root
    for segment in segments:
        child = node.children.get(segment)
        if child is None:
            return None
        node = child
    return node


def describe(doc: Document, ent: DirEnt | None = None) -> list[str]:
    """List every hunk at or below *ent* as ``path:line:name``, sorted.

    Lines are 1-based marker lines. *ent* defaults to the index root,
    which is built if the document has not been indexed yet.
    """
    if ent is None:
        ent = doc.dir_root if doc.dir_root is not None else build_dir_index(doc)

    result: list[str] = []
    stack = [ent]
    while stack:
        node = stack.pop()
        if node.hunk is not None:
            loc = doc.hunks_by_name[node.hunk.name].line_start + 1
            result.append(f"{doc.path or ''}:{loc}:{node.hunk.name}")
        stack.extend(node.children.values())
    return sorted(result)
