"""Exception hierarchy for file system operations.

Every public operation either returns a value or raises one of these. Each
error carries a human-readable message and, optionally, the underlying cause.
"""

from typing import Optional


class FileSystemError(Exception):
    """Base exception for all file system errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(FileSystemError):
    """Raised for empty or wrongly-tagged identifiers and invalid names.

    Always raised before any store access.
    """


class NodeNotFoundError(FileSystemError):
    """Raised when a well-formed identifier does not resolve to a record."""


class InternalError(FileSystemError):
    """Raised when the store is inconsistent or reports success without a usable result."""


class StoreError(FileSystemError):
    """Raised on lower-level store failures (connection lost, query rejected, aborted)."""
