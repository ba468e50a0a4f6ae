"""Exception hierarchy for the library manager.

Every error raised by the core derives from :class:`LibraryError` and also
from the closest built-in, so callers can catch either ``LibraryError`` or
``ValueError``/``LookupError`` the usual way.
"""

from __future__ import annotations

from typing import Optional


class LibraryError(Exception):
    """Base class for all library manager errors."""


class DecodeError(LibraryError, ValueError):
    """A persisted line could not be parsed into an entity."""

    def __init__(self, message: str, line: str = "", lineno: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.lineno = lineno

    def __str__(self) -> str:
        base = super().__str__()
        if self.lineno is not None:
            return f"line {self.lineno}: {base}"
        return base


class EncodeError(LibraryError, ValueError):
    """A field holds a delimiter or newline and cannot be written safely."""


class StorageError(LibraryError, OSError):
    """A text resource could not be read or written."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class DuplicateKeyError(LibraryError, ValueError):
    """A key (ISBN or account id) collides with an existing entry."""


class DuplicateIsbnError(DuplicateKeyError):
    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with ISBN {isbn} already exists.")
        self.isbn = isbn


class DuplicateIdError(DuplicateKeyError):
    def __init__(self, account_id: str) -> None:
        super().__init__(f"User with ID {account_id} already exists.")
        self.account_id = account_id


class NotFoundError(LibraryError, LookupError):
    """The requested book or account does not exist."""


class IndexOutOfRangeError(NotFoundError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Index {index} is out of range for {size} item(s).")
        self.index = index
        self.size = size


class AlreadyReservedError(LibraryError):
    def __init__(self, title: str) -> None:
        super().__init__(f"The book '{title}' is already reserved.")
        self.title = title
