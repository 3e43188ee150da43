"""Exceptions raised by map loading and cache persistence.

Pathfinding failures are not exceptions: an unreachable goal is reported
through ``PathResult.reason``.
"""


class FieldPathError(Exception):
    """Base class for all fieldpath errors."""


class GridFileError(FieldPathError):
    """Map file could not be read."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class GridFormatError(FieldPathError):
    """Map bytes do not match the expected layout."""

    def __init__(self, message: str, expected: int = 0, actual: int = 0):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class CacheFileError(FieldPathError):
    """Cache file could not be read or written."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class CacheFormatError(FieldPathError):
    """Cache file contents are malformed."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key
