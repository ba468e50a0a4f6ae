"""Flat-file persistence for books, accounts, the librarian and loans.

Each collection lives in its own line-oriented text file (see ``codec``).
Loading is tolerant: a missing file is an empty collection, and a line that
fails to decode is logged, recorded on ``Store.errors`` and skipped. I/O
failures are never raised to the caller; loads return whatever was read and
saves return ``False``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from library_manager import codec
from library_manager.account import Account, Librarian
from library_manager.book import Book
from library_manager.config import Settings, settings as default_settings
from library_manager.errors import DecodeError, EncodeError, LibraryError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")
PathLike = Union[str, Path]


class Store:
    """Reads and writes the text resources named in the settings."""

    def __init__(self, books_path: PathLike, users_path: PathLike, librarian_path: PathLike,
                 loans_path: Optional[PathLike] = None) -> None:
        self.books_path = Path(books_path)
        self.users_path = Path(users_path)
        self.librarian_path = Path(librarian_path)
        self.loans_path = Path(loans_path) if loans_path else None
        # Decode and I/O problems seen since the last clear_errors().
        self.errors: List[LibraryError] = []
        self._lock = RLock()

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "Store":
        cfg = cfg or default_settings
        return cls(cfg.books_path, cfg.users_path, cfg.librarian_path,
                   cfg.loans_path if cfg.persist_loans else None)

    def clear_errors(self) -> None:
        self.errors.clear()

    # ------------------------- Low-level helpers ------------------------- #
    def _report(self, error: LibraryError) -> None:
        self.errors.append(error)
        if isinstance(error, DecodeError):
            logger.warning(f"Skipping malformed record: {error}")
        else:
            logger.error(str(error))

    def _read_lines(self, path: Path) -> List[Tuple[int, str]]:
        """Numbered text lines. A line that is not valid UTF-8 is reported and skipped."""
        if not path.exists():
            return []
        try:
            with open(path, "rb") as f:
                raw_lines = f.read().splitlines()
        except OSError as e:
            self._report(StorageError(f"Could not read {path}: {e}", path=str(path)))
            return []
        lines: List[Tuple[int, str]] = []
        for lineno, raw in enumerate(raw_lines, 1):
            try:
                lines.append((lineno, raw.decode("utf-8")))
            except UnicodeDecodeError as e:
                self._report(DecodeError(f"not valid UTF-8 ({e.reason})", line=repr(raw), lineno=lineno))
        return lines

    def _decode_lines(self, path: Path, decode: Callable[[str], T]) -> List[T]:
        items: List[T] = []
        for lineno, line in self._read_lines(path):
            if not line.strip():
                continue
            try:
                items.append(decode(line))
            except DecodeError as e:
                e.lineno = lineno
                self._report(e)
        return items

    def _save_all(self, path: Path, items: Iterable[T], encode: Callable[[T], str]) -> bool:
        """Write every encodable item; False if anything was dropped or the write failed."""
        lines: List[str] = []
        dropped = 0
        for item in items:
            try:
                lines.append(encode(item))
            except EncodeError as e:
                dropped += 1
                self._report(e)
        return self._write_lines(path, lines) and not dropped

    def _write_lines(self, path: Path, lines: List[str]) -> bool:
        """Replace the file contents atomically."""
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    for line in lines:
                        f.write(line + "\n")
                os.replace(tmp_path, path)
                return True
            except OSError as e:
                self._report(StorageError(f"Could not write {path}: {e}", path=str(path)))
                try:
                    tmp_path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.debug(f"Could not remove {tmp_path}: {cleanup_error}")
                return False

    def _append_line(self, path: Path, line: str) -> bool:
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
                return True
            except OSError as e:
                self._report(StorageError(f"Could not append to {path}: {e}", path=str(path)))
                return False

    # ------------------------- Books ------------------------- #
    def load_books(self) -> List[Book]:
        books = self._decode_lines(self.books_path, codec.decode_book)
        logger.debug(f"Loaded {len(books)} books from {self.books_path}")
        return books

    def save_books(self, books: Iterable[Book]) -> bool:
        return self._save_all(self.books_path, books, codec.encode_book)

    # ------------------------- Accounts ------------------------- #
    def load_accounts(self) -> Dict[str, Account]:
        accounts: Dict[str, Account] = {}
        for account in self._decode_lines(self.users_path, codec.decode_account):
            # Last line wins for a duplicated id.
            accounts[account.id] = account
        logger.debug(f"Loaded {len(accounts)} accounts from {self.users_path}")
        return accounts

    def save_accounts(self, accounts: Dict[str, Account]) -> bool:
        return self._save_all(self.users_path, accounts.values(), codec.encode_account)

    def append_account(self, account: Account) -> bool:
        try:
            line = codec.encode_account(account)
        except EncodeError as e:
            self._report(e)
            return False
        return self._append_line(self.users_path, line)

    # ------------------------- Librarian ------------------------- #
    def load_librarian(self) -> Optional[Librarian]:
        librarians = self._decode_lines(self.librarian_path, codec.decode_librarian)
        if len(librarians) > 1:
            logger.warning(f"{self.librarian_path} holds {len(librarians)} librarians; using the first")
        return librarians[0] if librarians else None

    def save_librarian(self, librarian: Librarian) -> bool:
        try:
            line = codec.encode_librarian(librarian)
        except EncodeError as e:
            self._report(e)
            return False
        return self._write_lines(self.librarian_path, [line])

    # ------------------------- Loans ------------------------- #
    def load_loans(self, accounts: Dict[str, Account]) -> int:
        """Attach persisted borrowed books to their accounts.

        Returns the number of books attached. Records for unknown accounts
        are skipped.
        """
        if self.loans_path is None:
            return 0
        attached = 0
        for account_id, book, borrowed_on in self._decode_lines(self.loans_path, codec.decode_loan):
            account = accounts.get(account_id)
            if account is None:
                logger.warning(f"Ignoring borrowed book {book.isbn} for unknown account {account_id!r}")
                continue
            book.is_reserved = True
            account.borrowed_books.append(book)
            if borrowed_on is not None:
                account.borrowed_on[book.isbn] = borrowed_on
            attached += 1
        return attached

    def save_loans(self, accounts: Dict[str, Account]) -> bool:
        if self.loans_path is None:
            return True
        loans = [(a.id, b, a.borrowed_on.get(b.isbn)) for a in accounts.values() for b in a.borrowed_books]
        return self._save_all(self.loans_path, loans, lambda loan: codec.encode_loan(*loan))
