from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from library_manager.book import Book


class Account:
    """A registered library user together with the books they hold.

    ``fine_amount`` is the last value computed by the borrowing engine; it is
    never persisted as a source of truth.
    """

    def __init__(self, account_id: str, name: str, fine_amount: float = 0.0,
                 borrowed_books: Optional[List[Book]] = None) -> None:
        self.id = account_id
        self.name = name
        self.fine_amount = fine_amount
        self.borrowed_books: List[Book] = list(borrowed_books or [])
        # ISBN -> day the book was borrowed, when known; kept with the loan record.
        self.borrowed_on: Dict[str, date] = {}

    @property
    def borrowed_count(self) -> int:
        return len(self.borrowed_books)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} (ID: {self.id})"

    def __repr__(self) -> str:
        return f"Account(id={self.id!r}, name={self.name!r}, borrowed={self.borrowed_count})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "fine_amount": round(self.fine_amount, 2),
            "borrowed_count": self.borrowed_count,
            "borrowed_books": [b.to_dict() for b in self.borrowed_books],
        }


class Librarian:
    """The single librarian credential. The password is kept in plain text."""

    def __init__(self, name: str, librarian_id: str, password: str) -> None:
        self.name = name
        self.id = librarian_id
        self.password = password

    def verify(self, librarian_id: str, password: str) -> bool:
        return self.id == librarian_id and self.password == password

    def __repr__(self) -> str:
        return f"Librarian(name={self.name!r}, id={self.id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Librarian):
            return NotImplemented
        return (self.name, self.id, self.password) == (other.name, other.id, other.password)
