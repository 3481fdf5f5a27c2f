"""Data models for testmark documents: hunks, positions, and the dir index."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Hunk:
    """A named data region lifted out of a fenced code block.

    ``body`` is the exact content between the fence lines. If the source
    used CRLF line breaks, the body has been flattened to LF.
    """

    name: str
    body: bytes = b""
    info_string: str = ""


@dataclass(frozen=True)
class DocHunk:
    """A Hunk plus where it sits in one particular Document's line table.

    Both indexes are zero-based: ``line_start`` is the marker line and
    ``line_end`` is the fence-close line. They belong to the Document that
    produced them and are meaningless for any other one, including a
    patched copy.
    """

    hunk: Hunk
    line_start: int
    line_end: int

    @property
    def name(self) -> str:
        return self.hunk.name

    @property
    def body(self) -> bytes:
        return self.hunk.body

    @property
    def info_string(self) -> str:
        return self.hunk.info_string


@dataclass
class DirEnt:
    """One node of the path index built over a document's hunk names.

    A node can carry a hunk and have children at the same time: hunks
    named ``a`` and ``a/b`` share the node for segment ``a``.
    """

    name: str = ""
    path: str = ""
    hunk: Hunk | None = None
    # Insertion order is first-seen order.
    children: dict[str, DirEnt] = field(default_factory=dict)

    @property
    def children_order(self) -> tuple[str, ...]:
        return tuple(self.children)

    @property
    def is_file(self) -> bool:
        return self.hunk is not None

    @property
    def is_dir(self) -> bool:
        return len(self.children) > 0


class ParseError(Exception):
    """Raised when a document cannot be parsed.

    ``document`` holds whatever was recovered before the failure point.
    """

    def __init__(
        self,
        reason: str,
        line: int,
        first_line: int | None = None,
        document: Document | None = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.first_line = first_line
        self.document = document
        super().__init__(reason)


@dataclass
class Document:
    """A parsed (or patched) testmark document.

    ``lines`` is the whole document split on LF. When the document came
    from ``parse``, ``original`` keeps the raw input; documents produced
    by ``patch`` have no original.
    """

    lines: list[bytes] = field(default_factory=list)
    original: bytes | None = None
    hunks: list[DocHunk] = field(default_factory=list)
    hunks_by_name: dict[str, DocHunk] = field(default_factory=dict)
    # Not rebuilt automatically; call build_dir_index again after edits.
    dir_root: DirEnt | None = None
    path: str | None = None

    def __post_init__(self) -> None:
        if self.hunks and not self.hunks_by_name:
            hunks, self.hunks = self.hunks, []
            for doc_hunk in hunks:
                self.add_hunk(doc_hunk)
        if len(self.hunks) != len(self.hunks_by_name):
            raise ValueError("hunks and hunks_by_name disagree")

    def add_hunk(self, doc_hunk: DocHunk) -> None:
        """Record a hunk position. Names must be unique within a document."""
        if doc_hunk.name in self.hunks_by_name:
            raise ValueError(f"duplicate hunk name {doc_hunk.name!r}")
        self.hunks.append(doc_hunk)
        self.hunks_by_name[doc_hunk.name] = doc_hunk

    def hunk(self, name: str) -> Hunk:
        """Look up a hunk by its full name. Raises KeyError if absent."""
        return self.hunks_by_name[name].hunk

    def __contains__(self, name: object) -> bool:
        return name in self.hunks_by_name
