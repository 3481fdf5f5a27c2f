"""Line-oriented parser that lifts named hunks out of markdown."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from testmark.document.models import DocHunk, Document, Hunk, ParseError

logger = logging.getLogger(__name__)

LINE_BREAK = b"\n"
CODE_BLOCK = b"```"
MARKER = b"[testmark]:# "


def _strip_cr(line: bytes) -> bytes:
    return line[:-1] if line.endswith(b"\r") else line


def _first_word(text: str) -> str:
    # str.isspace is also what the patch engine checks names against.
    for idx, ch in enumerate(text):
        if ch.isspace():
            return text[:idx]
    return text


def _parse_marker(line: bytes, lineno: int, doc: Document) -> str:
    """Pull the hunk name out of a marker line, or raise ParseError."""
    remainder = line[len(MARKER):].rstrip(b" \t")
    if len(remainder) < 2 or not remainder.startswith(b"(") or not remainder.endswith(b")"):
        raise ParseError(
            f"invalid markdown comment on line {lineno} "
            f"(should look like '[testmark]:# (data-name-here)', mind the parens)",
            line=lineno,
            document=doc,
        )
    try:
        inner = remainder[1:-1].decode("utf-8")
    except UnicodeDecodeError:
        raise ParseError(
            f"invalid markdown comment on line {lineno}, hunk name is not valid UTF-8",
            line=lineno,
            document=doc,
        ) from None
    if inner[-1:].isspace():
        raise ParseError(
            f"invalid markdown comment on line {lineno} "
            "(whitespace before the closing paren)",
            line=lineno,
            document=doc,
        )
    # Anything after the first whitespace is reserved for future use.
    name = _first_word(inner)
    if not name:
        raise ParseError(
            f"invalid markdown comment on line {lineno}, hunk name is empty",
            line=lineno,
            document=doc,
        )
    already = doc.hunks_by_name.get(name)
    if already is not None:
        raise ParseError(
            f"repeated testmark hunk name {name!r}, first seen on line "
            f"{already.line_start + 1}, and again on line {lineno}",
            line=lineno,
            first_line=already.line_start + 1,
            document=doc,
        )
    return name


def parse(data: bytes | str) -> Document:
    """Parse raw document bytes into a Document.

    Markdown can be handled line by line: fenced code blocks are the only
    construct that changes how the start of a line is read. Outside code
    blocks we look for marker lines; the code block right after a marker
    becomes that hunk's body.

    Raises ParseError on a malformed marker, a marker with no code block
    after it, a duplicate name, or a hunk whose code block never closes.
    The partially built document rides along on the exception.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    doc = Document(lines=data.split(LINE_BREAK), original=data)

    offset = 0
    in_code_block = False
    expect_code_block = False
    body_start = 0
    pending_name: str | None = None
    pending_info = ""
    pending_start = -1

    for i, raw_line in enumerate(doc.lines):
        line = _strip_cr(raw_line)

        if line.startswith(CODE_BLOCK):
            if not in_code_block:
                if expect_code_block:
                    pending_info = line[len(CODE_BLOCK):].decode("utf-8", "surrogateescape")
                    body_start = offset + len(raw_line) + 1
                expect_code_block = False
            elif pending_name is not None:
                body = data[body_start:offset].replace(b"\r\n", b"\n")
                doc.add_hunk(
                    DocHunk(
                        hunk=Hunk(name=pending_name, body=body, info_string=pending_info),
                        line_start=pending_start,
                        line_end=i,
                    )
                )
                pending_name = None
                pending_info = ""
                pending_start = -1
            in_code_block = not in_code_block
        elif not in_code_block:
            if expect_code_block:
                raise ParseError(
                    f"testmark marker on line {pending_start + 1} "
                    "is not followed by a code block",
                    line=pending_start + 1,
                    document=doc,
                )
            if line.startswith(MARKER):
                pending_name = _parse_marker(line, i + 1, doc)
                pending_start = i
                expect_code_block = True

        offset += len(raw_line) + 1

    if expect_code_block:
        raise ParseError(
            f"testmark marker on line {pending_start + 1} is not followed by a code block",
            line=pending_start + 1,
            document=doc,
        )
    if pending_name is not None:
        raise ParseError(
            f"code block for testmark hunk {pending_name!r} on line "
            f"{pending_start + 1} is never closed",
            line=pending_start + 1,
            document=doc,
        )

    logger.debug("parsed %d hunk(s) from %d line(s)", len(doc.hunks), len(doc.lines))
    return doc


def read(stream: BinaryIO) -> Document:
    """Read a binary stream to the end and parse it."""
    return parse(stream.read())


def read_file(path: str | Path) -> Document:
    """Read and parse a file, remembering where it came from."""
    path = Path(path)
    try:
        doc = parse(path.read_bytes())
    except ParseError as e:
        if e.document is not None:
            e.document.path = str(path)
        raise
    doc.path = str(path)
    return doc
