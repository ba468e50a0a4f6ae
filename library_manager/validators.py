from typing import Optional, Sequence

from library_manager.book import GENRES
from library_manager.codec import ACCOUNT_SEP, FIELD_SEP


class TextValidator:
    """Entry-time checks for free-text fields written to the flat files."""

    BOOK_FORBIDDEN = (FIELD_SEP, "\n", "\r")
    ACCOUNT_FORBIDDEN = (ACCOUNT_SEP, "\n", "\r")

    @staticmethod
    def validate_field(text: Optional[str], forbidden: Sequence[str] = BOOK_FORBIDDEN) -> bool:
        if text is None:
            return False
        t = text.strip()
        if not t:
            return False
        return not any(ch in t for ch in forbidden)

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        if not TextValidator.validate_field(title):
            return False
        return any(c.isalnum() for c in title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        # must not be digits only
        if not TextValidator.validate_field(author):
            return False
        return not author.strip().isdigit()

    @staticmethod
    def validate_account_field(text: Optional[str]) -> bool:
        return TextValidator.validate_field(text, TextValidator.ACCOUNT_FORBIDDEN)


class BookValidator:
    """Checks for the numeric and enumerated book fields."""

    @staticmethod
    def validate_due_day(day: Optional[int]) -> bool:
        return isinstance(day, int) and not isinstance(day, bool) and 1 <= day <= 31

    @staticmethod
    def genre_for_choice(choice: int) -> Optional[str]:
        """Map a 1-based menu choice to a genre, or None when out of range."""
        if 1 <= choice <= len(GENRES):
            return GENRES[choice - 1]
        return None

    @staticmethod
    def validate_isbn(isbn: Optional[str]) -> bool:
        return TextValidator.validate_field(isbn)
