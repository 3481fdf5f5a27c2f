"""Tests for the read-only filesystem view."""

from __future__ import annotations

import stat

import pytest

from testmark.document import build_dir_index, parse
from testmark.fs import READ_ONLY_MODE, ClosedHandleError, DocumentFS, File, NotFoundError, walk


@pytest.fixture
def fs(dirs_doc):
    return DocumentFS(dirs_doc)


# ── open ─────────────────────────────────────────────────────────────


def test_open_builds_index_lazily(dirs_doc):
    assert dirs_doc.dir_root is None
    DocumentFS(dirs_doc).open("one").close()
    assert dirs_doc.dir_root is not None


def test_open_reuses_existing_index(dirs_doc):
    root = build_dir_index(dirs_doc)
    DocumentFS(dirs_doc).open("").close()
    assert dirs_doc.dir_root is root


def test_open_empty_path_is_root(fs):
    with fs.open("") as f:
        info = f.stat()
        assert info.is_dir
        assert info.name == ""
        assert info.size == 2
        assert f.read() == b""


def test_open_dot_is_not_root(example_doc):
    with pytest.raises(NotFoundError) as exc_info:
        DocumentFS(example_doc).open(".")
    assert exc_info.value.op == "open"
    assert exc_info.value.path == "."


def test_open_missing_path(fs):
    with pytest.raises(NotFoundError) as exc_info:
        fs.open("one/five")
    err = exc_info.value
    assert err.op == "open"
    assert err.path == "one/five"
    assert isinstance(err, FileNotFoundError)


def test_open_nested_hunk_reads_body():
    doc = parse(b"[testmark]:# (one/two)\n```\nthe body\n```\n")
    with DocumentFS(doc).open("one/two") as f:
        assert f.read() == b"the body\n"


def test_open_dot_segments_are_literal():
    doc = parse(b"[testmark]:# (a/../b)\n```\nx\n```\n")
    fs = DocumentFS(doc)
    assert fs.read_bytes("a/../b") == b"x\n"
    assert not fs.exists("b")


def test_exists(fs):
    assert fs.exists("really/deep")
    assert not fs.exists("really/shallow")


# ── stat ─────────────────────────────────────────────────────────────


def test_stat_plain_file(fs):
    with fs.open("one/two") as f:
        info = f.stat()
    assert info.name == "two"
    assert not info.is_dir
    assert info.is_file
    assert info.size == 4
    assert info.mode == stat.S_IFREG | READ_ONLY_MODE
    assert info.backing.hunk.name == "one/two"


def test_stat_file_and_dir_reports_body_size(fs):
    with fs.open("one") as f:
        info = f.stat()
    assert info.is_dir
    assert info.is_file
    assert info.size == len(b"baz\n")
    assert stat.S_ISDIR(info.mode)


def test_stat_pure_dir_reports_child_count(fs):
    with fs.open("really") as f:
        info = f.stat()
    assert info.is_dir
    assert not info.is_file
    assert info.size == 1


# ── read ─────────────────────────────────────────────────────────────


def test_read_in_chunks(fs):
    f = fs.open("one/four/bang")
    assert f.read(2) == b"mo"
    assert f.read(10) == b"p\n"
    assert f.read(10) == b""
    f.close()


def test_readinto(fs):
    buf = bytearray(8)
    with fs.open("one/three") as f:
        n = f.readinto(buf)
        assert f.readinto(buf) == 0
    assert buf[:n] == b"bar\n"


def test_pure_dir_reads_as_empty(fs):
    with fs.open("really/deep") as f:
        assert f.read() == b""


def test_handles_have_independent_cursors(fs):
    a = fs.open("one")
    b = fs.open("one")
    assert a.read(1) == b"b"
    assert b.read() == b"baz\n"
    assert a.read() == b"az\n"
    a.close()
    b.close()


# ── list_children ────────────────────────────────────────────────────


def test_list_children_sorted_by_name(fs):
    with fs.open("one") as f:
        assert [c.name for c in f.list_children()] == ["four", "three", "two"]


def test_list_children_with_limit_advances_cursor(fs):
    with fs.open("one") as f:
        assert [c.name for c in f.list_children(2)] == ["four", "three"]
        assert [c.name for c in f.list_children(2)] == ["two"]
        assert f.list_children(2) == []
        assert f.list_children(-1) == []


def test_list_children_of_leaf_is_empty(fs):
    with fs.open("one/two") as f:
        assert f.list_children() == []


def test_listed_children_are_stats(fs):
    with fs.open("") as root:
        one, really = root.list_children()
    assert one.name == "one"
    assert one.is_dir and one.is_file
    assert one.size == 4
    assert really.size == 1
    assert stat.S_ISDIR(really.mode)


def test_listed_child_opens_from_backing(fs):
    with fs.open("one") as parent:
        (bang_dir,) = parent.list_children(1)
    with File(bang_dir.backing) as f:
        assert f.stat() == bang_dir
        assert [c.name for c in f.list_children()] == ["bang"]


# ── close ────────────────────────────────────────────────────────────


def test_closed_handle_rejects_everything(fs):
    f = fs.open("one")
    f.close()
    assert f.closed
    with pytest.raises(ClosedHandleError):
        f.read()
    with pytest.raises(ClosedHandleError):
        f.readinto(bytearray(1))
    with pytest.raises(ClosedHandleError):
        f.list_children()
    with pytest.raises(ClosedHandleError) as exc_info:
        f.close()
    assert exc_info.value.op == "close"


def test_stat_still_works_after_close(fs):
    f = fs.open("one")
    f.close()
    assert f.stat().name == "one"


# ── walk ─────────────────────────────────────────────────────────────


def test_walk_document(fs):
    seen = [(path, f.stat().size, f.is_dir) for path, f in walk(fs)]
    assert seen == [
        ("", 2, True),
        ("one", 4, True),
        ("one/four", 1, True),
        ("one/four/bang", 4, False),
        ("one/three", 4, False),
        ("one/two", 4, False),
        ("really", 1, True),
        ("really/deep", 1, True),
        ("really/deep/dirs", 1, True),
        ("really/deep/dirs/wow", 4, False),
    ]


def test_walk_reads_contents(fs):
    contents = {path: f.read() for path, f in walk(fs) if f.stat().is_file}
    assert contents == {
        "one": b"baz\n",
        "one/four/bang": b"mop\n",
        "one/three": b"bar\n",
        "one/two": b"foo\n",
        "really/deep/dirs/wow": b"zot\n",
    }


def test_abandoned_walk_leaves_nothing_open(fs):
    it = walk(fs)
    _, root = next(it)
    _, one = next(it)
    it.close()
    assert root.closed
    assert one.closed


def test_walk_subtree(fs):
    assert [path for path, _ in walk(fs, "really/deep")] == [
        "really/deep",
        "really/deep/dirs",
        "really/deep/dirs/wow",
    ]


def test_walk_flat_document(example_doc):
    assert [path for path, _ in walk(DocumentFS(example_doc))] == [
        "",
        "cannot-describe-no-linebreak",
        "more-data",
        "this-is-the-data-name",
    ]
