"""Output subsystem: serializes documents to bytes and files."""

from testmark.output.writer import (
    dumps,
    write,
    write_file,
    write_file_with_patches,
    write_with_patches,
)

__all__ = [
    "dumps",
    "write",
    "write_file",
    "write_file_with_patches",
    "write_with_patches",
]
