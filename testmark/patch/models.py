"""Errors for the patch subsystem."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when patch input is rejected before any output is built."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"invalid patch hunk {name!r}: {reason}")
