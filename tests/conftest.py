"""Shared test fixtures for testmark."""

from pathlib import Path

import pytest

from testmark.document import Document, read_file

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def testdata() -> Path:
    return TESTDATA


@pytest.fixture
def example_doc() -> Document:
    """Three hunks, one info string, one empty body, and a marker-lookalike in prose."""
    return read_file(TESTDATA / "example.md")


@pytest.fixture
def dirs_doc() -> Document:
    """Hunks whose names nest: one, one/two, one/three, one/four/bang, really/deep/dirs/wow."""
    return read_file(TESTDATA / "exampleWithDirs.md")


@pytest.fixture
def simple_source() -> bytes:
    return b"[testmark]:# (simple)\n```\nHello, World!\n```\n"


@pytest.fixture
def tmp_fixture_file(tmp_path):
    """A writable copy of example.md."""
    dest = tmp_path / "example.md"
    dest.write_bytes((TESTDATA / "example.md").read_bytes())
    return dest
