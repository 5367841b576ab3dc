"""
Outcomes of the combine pipeline that are not plain success.

A FatalPrecondition aborts the whole run. A SkippedItem records work that was
left out with a warning while the run carried on.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class FatalPrecondition(Exception):
    """A required input (raw-data directory, translation table) is absent."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class SkippedItem:
    sample: Optional[str]
    path: Path
    reason: str

    def __str__(self):
        where = f"{self.sample}: " if self.sample else ""
        return f"{where}{self.reason} ({self.path})"
