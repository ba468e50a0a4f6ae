import logging
from typing import Iterable, Iterator, List, Optional

from library_manager.book import Book
from library_manager.errors import DuplicateIsbnError, IndexOutOfRangeError

logger = logging.getLogger(__name__)


class Catalog:
    """The books currently on the shelf, in insertion order."""

    def __init__(self, books: Optional[Iterable[Book]] = None) -> None:
        self.books: List[Book] = []
        for book in books or []:
            self.add(book)

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self.books)

    def __contains__(self, book: object) -> bool:
        return any(b is book for b in self.books)

    # ------------------------- Core operations ------------------------- #
    def add(self, book: Book) -> None:
        """Add a book. Prevent duplicates by ISBN."""
        if self.find_by_isbn(book.isbn) is not None:
            raise DuplicateIsbnError(book.isbn)
        self.books.append(book)
        logger.debug(f"Added {book.isbn} to catalog")

    def restore(self, book: Book) -> None:
        """Put a returned book back on the shelf without the duplicate check."""
        self.books.append(book)

    def remove_at(self, index: int) -> Book:
        if not 0 <= index < len(self.books):
            raise IndexOutOfRangeError(index, len(self.books))
        return self.books.pop(index)

    def list_books(self) -> List[Book]:
        return list(self.books)

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        for book in self.books:
            if book.isbn == isbn:
                return book
        return None

    def index_of(self, book: Book) -> Optional[int]:
        for i, b in enumerate(self.books):
            if b is book:
                return i
        return None

    # ------------------------- Queries ------------------------- #
    def find_by_genre(self, genre: str) -> List[Book]:
        wanted = genre.lower()
        return [b for b in self.books if b.genre.lower() == wanted]

    def search(self, term: str) -> List[Book]:
        """Title substring or exact genre, both case-insensitive."""
        term = (term or "").strip().lower()
        if not term:
            return []
        return [b for b in self.books if term in b.title.lower() or b.genre.lower() == term]

    def list_genres(self) -> List[str]:
        """Distinct genres on the shelf, in first-seen order."""
        return list(dict.fromkeys(b.genre for b in self.books))
