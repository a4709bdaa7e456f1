# errors.py - Failures that must reach the caller
from typing import Optional


class PersistenceError(Exception):
    """Writing holiday rows failed. Raised to the caller, never swallowed."""

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.original = original


class SchedulingError(Exception):
    """Registering the holiday sync job failed at startup."""
