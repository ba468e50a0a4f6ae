"""Line codec for the flat-file resources.

Each entity is written as a single line of delimited text:

- books:      ``title|author|isbn|dueDate|isReserved|genre``
- accounts:   ``id,name``
- librarian:  ``name|id|password``
- loans:      ``id,<book line>|borrowDate`` (one line per borrowed book;
              the trailing borrow date is optional)

There is no escaping. A value that contains its delimiter (or a line break)
is refused by the encoder instead of being written as a corrupt record.
These functions do no I/O.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from library_manager.account import Account, Librarian
from library_manager.book import Book
from library_manager.errors import DecodeError, EncodeError

FIELD_SEP = "|"
ACCOUNT_SEP = ","
BOOK_FIELDS = 6
ACCOUNT_FIELDS = 2
LIBRARIAN_FIELDS = 3

_LINE_BREAKS = ("\n", "\r")


def _check_fields(fields: Sequence[str], sep: str, entity: str) -> None:
    for value in fields:
        if sep in value or any(ch in value for ch in _LINE_BREAKS):
            raise EncodeError(f"{entity} field {value!r} contains {sep!r} or a line break")


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _parse_bool(raw: str, line: str) -> bool:
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise DecodeError(f"isReserved {raw!r} is not a boolean", line=line)


# ------------------------- Books ------------------------- #
def encode_book(book: Book) -> str:
    fields = [book.title, book.author, book.isbn, str(book.due_date),
              "True" if book.is_reserved else "False", book.genre]
    _check_fields(fields, FIELD_SEP, "Book")
    return FIELD_SEP.join(fields)


def decode_book(line: str) -> Book:
    line = _strip_eol(line)
    parts = line.split(FIELD_SEP)
    if len(parts) != BOOK_FIELDS:
        raise DecodeError(f"expected {BOOK_FIELDS} book fields, got {len(parts)}", line=line)
    try:
        due_date = int(parts[3])
    except ValueError as e:
        raise DecodeError(f"dueDate {parts[3]!r} is not an integer", line=line) from e
    return Book(
        title=parts[0],
        author=parts[1],
        isbn=parts[2],
        due_date=due_date,
        is_reserved=_parse_bool(parts[4], line),
        genre=parts[5],
    )


# ------------------------- Accounts ------------------------- #
def encode_account(account: Account) -> str:
    fields = [account.id, account.name]
    _check_fields(fields, ACCOUNT_SEP, "Account")
    return ACCOUNT_SEP.join(fields)


def decode_account(line: str) -> Account:
    line = _strip_eol(line)
    parts = line.split(ACCOUNT_SEP)
    if len(parts) != ACCOUNT_FIELDS:
        raise DecodeError(f"expected {ACCOUNT_FIELDS} account fields, got {len(parts)}", line=line)
    return Account(account_id=parts[0], name=parts[1])


# ------------------------- Librarian ------------------------- #
def encode_librarian(librarian: Librarian) -> str:
    fields = [librarian.name, librarian.id, librarian.password]
    _check_fields(fields, FIELD_SEP, "Librarian")
    return FIELD_SEP.join(fields)


def decode_librarian(line: str) -> Librarian:
    line = _strip_eol(line)
    parts = line.split(FIELD_SEP)
    if len(parts) != LIBRARIAN_FIELDS:
        raise DecodeError(f"expected {LIBRARIAN_FIELDS} librarian fields, got {len(parts)}", line=line)
    return Librarian(name=parts[0], librarian_id=parts[1], password=parts[2])


# ------------------------- Borrowed books ------------------------- #
def encode_loan(account_id: str, book: Book, borrowed_on: Optional[date] = None) -> str:
    """One borrowed book as ``id,<book line>`` with an optional ``|YYYY-MM-DD``.

    Only the first ``,`` splits, since a genre may itself contain commas.
    """
    _check_fields([account_id], ACCOUNT_SEP, "Account")
    line = f"{account_id}{ACCOUNT_SEP}{encode_book(book)}"
    if borrowed_on is not None:
        line += f"{FIELD_SEP}{borrowed_on.isoformat()}"
    return line


def decode_loan(line: str) -> Tuple[str, Book, Optional[date]]:
    line = _strip_eol(line)
    account_id, sep, book_line = line.partition(ACCOUNT_SEP)
    if not sep or not account_id:
        raise DecodeError("borrowed-book record has no account id", line=line)
    borrowed_on = None
    if book_line.count(FIELD_SEP) == BOOK_FIELDS:
        book_line, _, raw_date = book_line.rpartition(FIELD_SEP)
        try:
            borrowed_on = date.fromisoformat(raw_date.strip())
        except ValueError as e:
            raise DecodeError(f"borrow date {raw_date!r} is not YYYY-MM-DD", line=line) from e
    return account_id, decode_book(book_line), borrowed_on


def encode_borrowed(account: Account) -> List[str]:
    return [encode_loan(account.id, book, account.borrowed_on.get(book.isbn))
            for book in account.borrowed_books]
