"""
Error types raised at the request boundary.

A failed placement trial is not an error (the placer returns None), and a run
where no trial succeeded just yields an all-zero probability map.
"""

from typing import Optional


class CoverageError(Exception):
    """Base class for input errors reported to the caller."""


class InvalidShapeError(CoverageError):
    """Raised when a mask exceeds the allowed size or is not rectangular."""

    def __init__(self, rows: int, cols: int, reason: str):
        self.rows = rows
        self.cols = cols
        self.reason = reason
        super().__init__(f"Invalid mask shape {rows}x{cols}: {reason}")


class MalformedInputError(CoverageError):
    """Raised when a request body cannot be decoded."""

    def __init__(self, reason: str, source: Optional[str] = None):
        self.reason = reason
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}malformed input: {reason}")
