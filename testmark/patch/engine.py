"""Patch engine: produce a new Document with some hunks replaced or added."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from testmark.document.models import DocHunk, Document, Hunk
from testmark.document.parser import CODE_BLOCK, LINE_BREAK, MARKER
from testmark.patch.models import ValidationError

logger = logging.getLogger(__name__)


def _validate(hunks: list[Hunk]) -> dict[str, Hunk]:
    pool: dict[str, Hunk] = {}
    for hunk in hunks:
        if not hunk.name:
            raise ValidationError(hunk.name, "hunk name must not be empty")
        if any(ch.isspace() for ch in hunk.name):
            raise ValidationError(hunk.name, "hunk name must not contain whitespace")
        if hunk.name in pool:
            raise ValidationError(hunk.name, "hunk name given more than once in one patch")
        pool[hunk.name] = hunk
    return pool


def _body_lines(body: bytes) -> list[bytes]:
    """Split a body into lines without inventing an extra blank last line."""
    if not body:
        return []
    lines = body.split(LINE_BREAK)
    if body.endswith(LINE_BREAK):
        lines.pop()
    return lines


def _marker_line(name: str) -> bytes:
    return MARKER + b"(" + name.encode("utf-8") + b")"


def _fence_line(info_string: str) -> bytes:
    return CODE_BLOCK + info_string.encode("utf-8", "surrogateescape")


def _emit(new_doc: Document, hunk: Hunk, framing: list[bytes], body: list[bytes]) -> None:
    """Append one hunk block to *new_doc* and record where it landed.

    *framing* is ``[marker, fence_open, fence_close]``.
    """
    marker, fence_open, fence_close = framing
    line_start = len(new_doc.lines)
    new_doc.lines.append(marker)
    new_doc.lines.append(fence_open)
    new_doc.lines.extend(body)
    new_doc.lines.append(fence_close)
    new_doc.add_hunk(DocHunk(hunk=hunk, line_start=line_start, line_end=len(new_doc.lines) - 1))


def patch(old_doc: Document, hunks: Iterable[Hunk] = ()) -> Document:
    """Return a new Document with *hunks* applied to *old_doc*.

    Hunks whose name already exists in *old_doc* are replaced in place;
    the rest are appended at the end, in the order given. Prose and every
    untouched hunk are carried over byte for byte. *old_doc* is not
    modified, and its line positions are never reused.

    Raises ValidationError for an empty name, a name containing
    whitespace, or the same name given twice.
    """
    hunks = list(hunks)
    pool = _validate(hunks)

    new_doc = Document()
    left_off = 0
    for doc_hunk in old_doc.hunks:
        # Prose between the previous hunk and this one.
        new_doc.lines.extend(old_doc.lines[left_off:doc_hunk.line_start])
        left_off = doc_hunk.line_end + 1

        marker = old_doc.lines[doc_hunk.line_start]
        replacement = pool.pop(doc_hunk.name, None)
        if replacement is not None:
            hunk = Hunk(
                name=doc_hunk.name,
                body=replacement.body,
                info_string=replacement.info_string,
            )
            framing = [marker, _fence_line(hunk.info_string), CODE_BLOCK]
            body = _body_lines(hunk.body)
        else:
            hunk = doc_hunk.hunk
            framing = [
                marker,
                old_doc.lines[doc_hunk.line_start + 1],
                old_doc.lines[doc_hunk.line_end],
            ]
            body = old_doc.lines[doc_hunk.line_start + 2:doc_hunk.line_end]
        _emit(new_doc, hunk, framing, body)

    new_doc.lines.extend(old_doc.lines[left_off:])

    # Whatever is left is new; append in caller order, not pool order.
    appended = 0
    for hunk in hunks:
        if hunk.name not in pool:
            continue
        if new_doc.lines and new_doc.lines[-1]:
            new_doc.lines.append(b"")
        _emit(
            new_doc,
            hunk,
            [_marker_line(hunk.name), _fence_line(hunk.info_string), CODE_BLOCK],
            _body_lines(hunk.body),
        )
        new_doc.lines.append(b"")
        appended += 1

    logger.debug(
        "patched %d hunk(s), appended %d, document now %d line(s)",
        len(hunks) - appended,
        appended,
        len(new_doc.lines),
    )
    return new_doc


class PatchAccumulator:
    """Collects replacement hunks, typically while regenerating fixtures."""

    def __init__(self) -> None:
        self.patches: list[Hunk] = []

    def append_patch(self, hunk: Hunk) -> None:
        self.patches.append(hunk)

    def append_patch_if_body_differs(self, hunk: Hunk, new_body: bytes) -> bool:
        """Queue *hunk* with *new_body* unless that is what it already holds.

        Returns True if a patch was queued.
        """
        if hunk.body == new_body:
            return False
        self.append_patch(Hunk(name=hunk.name, body=new_body, info_string=hunk.info_string))
        return True

    def apply(self, doc: Document) -> Document:
        return patch(doc, self.patches)

    def __len__(self) -> int:
        return len(self.patches)

    def __iter__(self) -> Iterator[Hunk]:
        return iter(self.patches)
