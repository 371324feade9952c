# regtree/errors.py
"""
Exception types.

Lookups and ordinary CRUD report "not found" and "already exists" through
None/False results. Exceptions are reserved for failures the caller has to
handle: malformed interchange files and snapshot I/O.
"""

from typing import Optional


class RegistryError(Exception):
    """Base class for all regtree errors."""


class KeyNotFoundError(RegistryError, KeyError):
    """A key path did not resolve."""

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"Key not found: {self.path}"


class ImportFormatError(RegistryError, ValueError):
    """An interchange file could not be imported."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        return self.message


class EmptyFileError(ImportFormatError):
    """The file contains no lines."""

    def __init__(self):
        super().__init__("Empty registry file")


class UnsupportedFormatError(ImportFormatError):
    """The first line is not the expected header."""

    def __init__(self, header: str):
        super().__init__(f"Unsupported registry file format: {header!r}", line_number=1)
        self.header = header


class InvalidKeyPathError(ImportFormatError):
    """A key header names a path that cannot be resolved."""

    def __init__(self, path: str, line_number: Optional[int] = None):
        super().__init__(f"Invalid registry key path: {path!r}", line_number)
        self.path = path


class MalformedValueLineError(ImportFormatError):
    """A value line is not of the form name=value."""

    def __init__(self, line: str, line_number: Optional[int] = None):
        super().__init__(f"Invalid name/value line: {line!r}", line_number)
        self.line = line


class PersistenceError(RegistryError):
    """Snapshot save or load failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message
