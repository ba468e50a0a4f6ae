"""Borrowing engine: moves books between the catalog and accounts.

A book is either *available* (on the catalog shelf, ``is_reserved`` False) or
*borrowed* (in exactly one account's ``borrowed_books``, ``is_reserved``
True). ``borrow`` and ``return_book`` are the only transitions.

Fines are recomputed from scratch on every call. A book's ``due_date`` is a
day of the month only, so in the default ``current-month`` mode a due date of
15 always means the 15th of the month the fine is evaluated in. The
``borrow-month`` mode uses the month the book was borrowed instead, when that
is known.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional, Union

from library_manager.account import Account
from library_manager.book import Book
from library_manager.catalog import Catalog
from library_manager.config import DEFAULT_FINE_PER_DAY, FINE_MODE_BORROW_MONTH, FINE_MODES, FINE_MODE_CURRENT_MONTH
from library_manager.errors import AlreadyReservedError, IndexOutOfRangeError, NotFoundError

if TYPE_CHECKING:
    from library_manager.directory import Directory
    from library_manager.storage import Store

logger = logging.getLogger(__name__)

BookRef = Union[int, str, Book]


def due_date_in_month(day: int, year: int, month: int) -> date:
    """The given day in that month, clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(day, 1), last_day))


def _as_date(value: Union[date, datetime, None]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


class BorrowingEngine:
    """Borrow, return and fine rules for a catalog and its accounts.

    When ``store`` and ``directory`` are given, ``return_book`` eagerly
    re-saves the accounts (and loans) after a successful return.
    """

    def __init__(self, fine_per_day: float = DEFAULT_FINE_PER_DAY,
                 fine_mode: str = FINE_MODE_CURRENT_MONTH,
                 store: Optional["Store"] = None,
                 directory: Optional["Directory"] = None) -> None:
        if fine_mode not in FINE_MODES:
            raise ValueError(f"Unknown fine mode {fine_mode!r}")
        self.fine_per_day = fine_per_day
        self.fine_mode = fine_mode
        self.store = store
        self.directory = directory

    # ------------------------- Transitions ------------------------- #
    def _resolve(self, catalog: Catalog, book_ref: BookRef) -> Book:
        if isinstance(book_ref, Book):
            if book_ref not in catalog:
                raise NotFoundError(f"'{book_ref.title}' is not in the catalog.")
            return book_ref
        if isinstance(book_ref, bool):
            raise NotFoundError(f"Invalid book reference {book_ref!r}.")
        if isinstance(book_ref, int):
            if not 0 <= book_ref < len(catalog):
                raise NotFoundError(f"No book at index {book_ref}.")
            return catalog.books[book_ref]
        book = catalog.find_by_isbn(book_ref)
        if book is None:
            raise NotFoundError(f"Book with ISBN {book_ref} not found.")
        return book

    def borrow(self, account: Account, catalog: Catalog, book_ref: BookRef,
               on: Union[date, datetime, None] = None) -> Book:
        """Move a book from the catalog into the account's borrowed books."""
        book = self._resolve(catalog, book_ref)
        if book.is_reserved:
            raise AlreadyReservedError(book.title)

        catalog.remove_at(catalog.index_of(book))
        account.borrowed_books.append(book)
        account.borrowed_on[book.isbn] = _as_date(on)
        book.is_reserved = True
        logger.info(f"{account.id} borrowed '{book.title}' ({book.isbn})")
        return book

    def return_book(self, account: Account, catalog: Catalog, borrowed_index: int,
                    on: Union[date, datetime, None] = None) -> Book:
        """Give a borrowed book back to the catalog and refresh the fine."""
        if not 0 <= borrowed_index < len(account.borrowed_books):
            raise IndexOutOfRangeError(borrowed_index, len(account.borrowed_books))

        book = account.borrowed_books.pop(borrowed_index)
        account.borrowed_on.pop(book.isbn, None)
        book.is_reserved = False
        catalog.restore(book)
        self.calculate_fine(account, on)
        logger.info(f"{account.id} returned '{book.title}' ({book.isbn})")

        if self.store is not None and self.directory is not None:
            self.store.save_accounts(self.directory.accounts)
            self.store.save_loans(self.directory.accounts)
        return book

    # ------------------------- Fines ------------------------- #
    def due_date_for(self, account: Account, book: Book, reference: date) -> date:
        if self.fine_mode == FINE_MODE_BORROW_MONTH:
            borrowed = account.borrowed_on.get(book.isbn)
            if borrowed is not None:
                return due_date_in_month(book.due_date, borrowed.year, borrowed.month)
        return due_date_in_month(book.due_date, reference.year, reference.month)

    def calculate_fine(self, account: Account, reference_date: Union[date, datetime, None] = None) -> float:
        today = _as_date(reference_date)
        total = 0.0
        for book in account.borrowed_books:
            days_overdue = (today - self.due_date_for(account, book, today)).days
            total += max(0, days_overdue) * self.fine_per_day
        account.fine_amount = total
        return total
