from __future__ import annotations


class FatalNavigationError(RuntimeError):
    """Raised when a required portal page or control never appeared."""


class MalformedRowError(FatalNavigationError):
    """Raised when a subject row is missing one of its expected fields."""


class PersistenceError(RuntimeError):
    """Raised when the user store cannot be read or written."""
