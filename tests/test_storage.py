import os
from datetime import date

from library_manager.account import Account, Librarian
from library_manager.book import Book
from library_manager.errors import DecodeError, StorageError
from library_manager.storage import Store


def test_missing_files_are_empty_collections(store):
    assert store.load_books() == []
    assert store.load_accounts() == {}
    assert store.load_librarian() is None
    assert store.errors == []


def test_books_save_and_load_preserve_order(store):
    books = [
        Book("Zebra", "Z", "9", 3, False, "Fiction"),
        Book("Apple", "A", "1", 4, False, "Textbooks"),
    ]
    assert store.save_books(books) is True
    assert store.load_books() == books
    assert store.books_path.read_text(encoding="utf-8") == (
        "Zebra|Z|9|3|False|Fiction\nApple|A|1|4|False|Textbooks\n"
    )


def test_save_books_overwrites(store):
    store.save_books([Book("Old", "A", "1", 1, False, "Fiction")])
    store.save_books([Book("New", "B", "2", 2, False, "Fiction")])
    assert [b.title for b in store.load_books()] == ["New"]


def test_malformed_book_line_is_skipped(store):
    store.books_path.write_text(
        "Dune|Frank Herbert|111|15|False|Fiction\n"
        "broken line\n"
        "\n"
        "Emma|Jane Austen|222|x|False|Fiction\n"
        "Ulysses|James Joyce|333|2|False|Fiction\n",
        encoding="utf-8",
    )
    books = store.load_books()
    assert [b.isbn for b in books] == ["111", "333"]
    assert len(store.errors) == 2
    assert all(isinstance(e, DecodeError) for e in store.errors)
    assert [e.lineno for e in store.errors] == [2, 4]


def test_accounts_file_with_one_bad_line(store):
    store.users_path.write_text("u1,Alice\nlonely\n", encoding="utf-8")
    accounts = store.load_accounts()
    assert list(accounts) == ["u1"]
    assert accounts["u1"].name == "Alice"
    assert len(store.errors) == 1


def test_duplicate_account_id_last_line_wins(store):
    store.users_path.write_text("u1,Alice\nu1,Alicia\n", encoding="utf-8")
    assert store.load_accounts()["u1"].name == "Alicia"


def test_append_account_does_not_rewrite(store):
    store.save_accounts({"u1": Account("u1", "Alice")})
    assert store.append_account(Account("u2", "Bob")) is True
    assert store.users_path.read_text(encoding="utf-8") == "u1,Alice\nu2,Bob\n"
    assert list(store.load_accounts()) == ["u1", "u2"]


def test_append_account_rejects_unencodable(store):
    assert store.append_account(Account("u3", "Smith, Jo")) is False
    assert not store.users_path.exists()
    assert len(store.errors) == 1


def test_librarian_single_record(store):
    assert store.save_librarian(Librarian("Marian", "lib1", "pw")) is True
    assert store.save_librarian(Librarian("Rupert", "lib2", "pw2")) is True
    assert store.librarian_path.read_text(encoding="utf-8") == "Rupert|lib2|pw2\n"
    assert store.load_librarian() == Librarian("Rupert", "lib2", "pw2")


def test_loans_round_trip(store):
    alice = Account("u1", "Alice")
    book = Book("Dune", "Frank Herbert", "111", 15, True, "Fiction")
    alice.borrowed_books.append(book)
    assert store.save_loans({"u1": alice, "u2": Account("u2", "Bob")}) is True

    fresh = {"u1": Account("u1", "Alice")}
    assert store.load_loans(fresh) == 1
    assert fresh["u1"].borrowed_books == [book]
    assert fresh["u1"].borrowed_books[0].is_reserved is True


def test_loans_keep_borrow_date(store):
    alice = Account("u1", "Alice")
    alice.borrowed_books.append(Book("Dune", "Frank Herbert", "111", 15, True, "Fiction"))
    alice.borrowed_on["111"] = date(2026, 9, 1)
    store.save_loans({"u1": alice})

    fresh = {"u1": Account("u1", "Alice")}
    store.load_loans(fresh)
    assert fresh["u1"].borrowed_on == {"111": date(2026, 9, 1)}


def test_invalid_utf8_line_is_skipped_not_repaired(store):
    store.books_path.write_bytes(
        b"Du\xffne|Frank Herbert|111|15|False|Fiction\n"
        b"Emma|Jane Austen|222|3|False|Fiction\n"
    )
    books = store.load_books()
    assert [b.isbn for b in books] == ["222"]
    assert len(store.errors) == 1
    assert isinstance(store.errors[0], DecodeError)
    assert store.errors[0].lineno == 1


def test_loans_for_unknown_account_are_ignored(store):
    store.loans_path.write_text("ghost,Dune|Frank Herbert|111|15|True|Fiction\n", encoding="utf-8")
    accounts = {"u1": Account("u1", "Alice")}
    assert store.load_loans(accounts) == 0
    assert accounts["u1"].borrowed_books == []


def test_loans_disabled_without_path(tmp_path):
    store = Store(tmp_path / "b.txt", tmp_path / "u.txt", tmp_path / "l.txt")
    alice = Account("u1", "Alice", borrowed_books=[Book("Dune", "F", "1", 1, True, "Fiction")])
    assert store.save_loans({"u1": alice}) is True
    assert store.load_loans({"u1": alice}) == 0
    assert sorted(os.listdir(tmp_path)) == []


def test_write_failure_is_reported_not_raised(tmp_path):
    # A directory where the file should be makes the final replace fail.
    blocked = tmp_path / "books.txt"
    blocked.mkdir()
    store = Store(blocked, tmp_path / "users.txt", tmp_path / "lib.txt")
    assert store.save_books([Book("Dune", "F", "1", 1, False, "Fiction")]) is False
    assert len(store.errors) == 1
    assert isinstance(store.errors[0], StorageError)
    assert not (tmp_path / "books.txt.tmp").exists()


def test_read_failure_is_reported_not_raised(tmp_path):
    users_dir = tmp_path / "users.txt"
    users_dir.mkdir()
    store = Store(tmp_path / "books.txt", users_dir, tmp_path / "lib.txt")
    assert store.load_accounts() == {}
    assert isinstance(store.errors[0], StorageError)


def test_clear_errors(store):
    store.users_path.write_text("bad\n", encoding="utf-8")
    store.load_accounts()
    assert store.errors
    store.clear_errors()
    assert store.errors == []
