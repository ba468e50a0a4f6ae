from __future__ import annotations

from typing import Tuple

# Menu order matters: genres are chosen by 1-based position at entry time.
GENRES: Tuple[str, ...] = (
    "Fiction",
    "Non-fiction",
    "Reference books",
    "Textbooks",
    "Biographies",
    "Autobiographies and memoirs",
    "Religious books",
    "Scientific books",
    "Historical books",
    "Cookbooks, crafts, and hobbies",
    "Business and economics",
)


class Book:
    """Represents a single book item in the library."""

    def __init__(self, title: str, author: str, isbn: str, due_date: int,
                 is_reserved: bool = False, genre: str = GENRES[0]) -> None:
        self.title = title
        self.author = author
        self.isbn = isbn
        # Day of month only (1-31), not a full date.
        self.due_date = due_date
        self.is_reserved = is_reserved
        self.genre = genre

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def __repr__(self) -> str:
        return (
            f"Book(title={self.title!r}, author={self.author!r}, isbn={self.isbn!r}, "
            f"due_date={self.due_date!r}, is_reserved={self.is_reserved!r}, genre={self.genre!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "due_date": self.due_date,
            "is_reserved": self.is_reserved,
            "genre": self.genre,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            title=data["title"],
            author=data["author"],
            isbn=data["isbn"],
            due_date=int(data["due_date"]),
            is_reserved=bool(data.get("is_reserved", False)),
            genre=data.get("genre", GENRES[0]),
        )
