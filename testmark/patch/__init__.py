"""Patch subsystem: replace or append hunks without disturbing prose."""

from testmark.patch.engine import PatchAccumulator, patch
from testmark.patch.models import ValidationError

__all__ = [
    "PatchAccumulator",
    "ValidationError",
    "patch",
]
