"""Top-level application state.

``LibraryState`` owns the catalog, the directory (with its optional librarian
credential), the store and the borrowing engine. A presentation layer builds
one with ``LibraryState.load()``, calls the operations below, and finishes with
``shutdown()``. Operations that the console program wrote eagerly (adding or
deleting a book, registering or deleting a user, returning a book) save
straight away.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from library_manager.account import Account, Librarian
from library_manager.book import Book
from library_manager.borrowing import BookRef, BorrowingEngine
from library_manager.catalog import Catalog
from library_manager.config import Settings, settings as default_settings
from library_manager.directory import Directory
from library_manager.errors import DuplicateIsbnError
from library_manager.storage import Store

logger = logging.getLogger(__name__)


class LibraryState:
    def __init__(self, catalog: Catalog, directory: Directory, store: Store,
                 settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self.catalog = catalog
        self.directory = directory
        self.store = store
        self.engine = BorrowingEngine(
            fine_per_day=self.settings.fine_per_day,
            fine_mode=self.settings.fine_mode,
            store=store,
            directory=directory,
        )

    @classmethod
    def load(cls, settings: Optional[Settings] = None, store: Optional[Store] = None) -> "LibraryState":
        """Read every resource from disk. Bad lines are skipped, not fatal."""
        cfg = settings or default_settings
        store = store or Store.from_settings(cfg)

        accounts = store.load_accounts()
        store.load_loans(accounts)
        held = {b.isbn for a in accounts.values() for b in a.borrowed_books}

        catalog = Catalog()
        for book in store.load_books():
            if book.isbn in held:
                # A borrowed book belongs to its loan, not the shelf.
                store.errors.append(DuplicateIsbnError(book.isbn))
                logger.warning(f"Skipping book {book.isbn} in {store.books_path}: it is currently borrowed")
                continue
            try:
                catalog.add(book)
            except DuplicateIsbnError as e:
                logger.warning(f"Skipping duplicate book in {store.books_path}: {e}")

        directory = Directory(accounts, store.load_librarian())

        state = cls(catalog, directory, store, cfg)
        logger.info(f"Loaded {len(catalog)} books and {len(directory)} users")
        return state

    @property
    def librarian(self) -> Optional[Librarian]:
        return self.directory.librarian

    # ------------------------- Persistence ------------------------- #
    def save(self) -> bool:
        """Write every resource; True only if all writes succeeded."""
        results = [
            self.store.save_books(self.catalog.books),
            self.store.save_accounts(self.directory.accounts),
            self.store.save_loans(self.directory.accounts),
        ]
        if self.directory.librarian is not None:
            results.append(self.store.save_librarian(self.directory.librarian))
        return all(results)

    def shutdown(self) -> bool:
        ok = self.save()
        if not ok:
            for error in self.store.errors:
                logger.error(f"Shutdown save problem: {error}")
        return ok

    # ------------------------- Books ------------------------- #
    def add_book(self, book: Book) -> None:
        # A borrowed copy still owns its ISBN.
        for account in self.directory.accounts.values():
            if any(b.isbn == book.isbn for b in account.borrowed_books):
                raise DuplicateIsbnError(book.isbn)
        self.catalog.add(book)
        self.store.save_books(self.catalog.books)

    def delete_book(self, index: int) -> Book:
        book = self.catalog.remove_at(index)
        self.store.save_books(self.catalog.books)
        logger.info(f"Deleted book '{book.title}' ({book.isbn})")
        return book

    # ------------------------- Users ------------------------- #
    def register_user(self, account_id: str, name: str) -> Account:
        account = self.directory.register(account_id, name)
        self.store.append_account(account)
        return account

    def delete_user(self, account_id: str) -> Account:
        """Remove a user; any books they still hold go back on the shelf."""
        account = self.directory.delete(account_id)
        for book in account.borrowed_books:
            book.is_reserved = False
            self.catalog.restore(book)
        account.borrowed_books.clear()
        self.store.save_accounts(self.directory.accounts)
        self.store.save_loans(self.directory.accounts)
        self.store.save_books(self.catalog.books)
        return account

    def register_librarian(self, name: str, librarian_id: str, password: str) -> Librarian:
        librarian = self.directory.register_librarian(name, librarian_id, password)
        self.store.save_librarian(librarian)
        return librarian

    # ------------------------- Borrowing ------------------------- #
    def borrow(self, account_id: str, book_ref: BookRef,
               on: Union[date, datetime, None] = None) -> Book:
        account = self.directory.authenticate(account_id)
        book = self.engine.borrow(account, self.catalog, book_ref, on)
        self.store.save_books(self.catalog.books)
        self.store.save_loans(self.directory.accounts)
        return book

    def return_book(self, account_id: str, borrowed_index: int,
                    on: Union[date, datetime, None] = None) -> Book:
        account = self.directory.authenticate(account_id)
        book = self.engine.return_book(account, self.catalog, borrowed_index, on)
        self.store.save_books(self.catalog.books)
        return book

    def fine_for(self, account_id: str, reference_date: Union[date, datetime, None] = None) -> float:
        return self.engine.calculate_fine(self.directory.authenticate(account_id), reference_date)

    def search_users(self, term: Optional[str]) -> List[Account]:
        return self.directory.search_users(term)
