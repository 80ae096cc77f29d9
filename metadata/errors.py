"""Error taxonomy for library import and lookup."""

from __future__ import annotations


class LibraryImportError(Exception):
    """Base class for failures while reading an exported library."""


class EmptyInputError(LibraryImportError):
    """Raised when a tab-delimited export has no content lines."""


class StructuralError(LibraryImportError):
    """Raised when a property-list export has no top-level dict."""


class NotFoundError(LibraryImportError, LookupError):
    """Raised when a named playlist does not exist in the decoded library."""

    def __init__(self, name: str):
        super().__init__(f'Playlist "{name}" not found')
        self.name = name


class UnreadableInputError(LibraryImportError):
    """Raised when export bytes cannot be decoded as text."""
