import json

from typer.testing import CliRunner

from library_manager.book import Book
from library_manager.main import app
from library_manager.state import LibraryState

runner = CliRunner()


def _seed(data_settings):
    state = LibraryState.load(data_settings)
    state.add_book(Book("Dune", "Frank Herbert", "111", 15, False, "Fiction"))
    state.add_book(Book("Emma", "Jane Austen", "222", 3, False, "Fiction"))
    state.register_user("u1", "Alice")
    return state


def test_list_no_books(data_settings):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books in library." in result.stdout


def test_add_book_success(data_settings):
    result = runner.invoke(app, ["add", "Dune", "Frank Herbert", "111", "15", "1"])
    assert result.exit_code == 0
    assert "Successfully added: Dune by Frank Herbert" in result.stdout
    assert data_settings.books_path.read_text(encoding="utf-8") == "Dune|Frank Herbert|111|15|False|Fiction\n"


def test_add_book_duplicate(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["add", "Dune", "Frank Herbert", "111", "15", "1"])
    assert result.exit_code == 0
    assert "Error: Book with ISBN 111 already exists." in result.stdout


def test_add_book_bad_genre(data_settings):
    result = runner.invoke(app, ["add", "Dune", "Frank Herbert", "111", "15", "12"])
    assert "genre must be between 1 and 11" in result.stdout
    assert not data_settings.books_path.exists()


def test_list_plain_and_json(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["list"])
    assert "1. 111 - Dune by Frank Herbert [Fiction]" in result.stdout
    assert "2. 222 - Emma by Jane Austen [Fiction]" in result.stdout

    result = runner.invoke(app, ["--output", "json", "list"])
    payload = json.loads(result.stdout)
    assert [b["isbn"] for b in payload] == ["111", "222"]


def test_remove_book_with_confirmation(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["remove", "1"], input="y\n")
    assert result.exit_code == 0
    assert "Book 'Dune' has been deleted." in result.stdout
    assert [b.isbn for b in LibraryState.load(data_settings).catalog] == ["222"]


def test_remove_book_canceled(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["remove", "1"], input="n\n")
    assert "Deletion canceled." in result.stdout
    assert len(LibraryState.load(data_settings).catalog) == 2


def test_remove_book_not_found(data_settings):
    result = runner.invoke(app, ["remove", "5", "--yes"])
    assert "Book number 5 not found." in result.stdout


def test_search_and_genres(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["search", "emm"])
    assert "Emma" in result.stdout
    assert "Dune" not in result.stdout

    result = runner.invoke(app, ["genres"])
    assert "(1) Fiction" in result.stdout

    result = runner.invoke(app, ["genre", "FICTION"])
    assert "Dune" in result.stdout and "Emma" in result.stdout


def test_register_and_duplicate(data_settings):
    result = runner.invoke(app, ["register", "u1", "Alice"])
    assert "Welcome, Alice! Your ID is u1." in result.stdout
    result = runner.invoke(app, ["register", "u1", "Bob"])
    assert "Error: User with ID u1 already exists." in result.stdout
    assert data_settings.users_path.read_text(encoding="utf-8") == "u1,Alice\n"


def test_borrow_account_and_return(data_settings):
    _seed(data_settings)

    result = runner.invoke(app, ["borrow", "u1", "1"])
    assert "You have successfully borrowed 'Dune'. Enjoy reading!" in result.stdout

    result = runner.invoke(app, ["account", "u1"])
    assert "Number of Borrowed Books: 1" in result.stdout
    assert "Dune" in result.stdout

    result = runner.invoke(app, ["return", "u1", "1"])
    assert "Dune returned." in result.stdout
    assert sorted(b.isbn for b in LibraryState.load(data_settings).catalog) == ["111", "222"]


def test_borrow_invalid_index(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["borrow", "u1", "9"])
    assert "Sorry: No book at index 8." in result.stdout


def test_users_search(data_settings):
    state = _seed(data_settings)
    state.register_user("u2", "Bob")
    result = runner.invoke(app, ["users", "--search", "bo"])
    assert "u2 - Bob" in result.stdout
    assert "Alice" not in result.stdout


def test_delete_user(data_settings):
    _seed(data_settings)
    result = runner.invoke(app, ["delete-user", "u1", "--yes"])
    assert "User u1 has been deleted." in result.stdout
    result = runner.invoke(app, ["delete-user", "u1", "--yes"])
    assert "User with ID u1 not found." in result.stdout


def test_librarian_register_and_login(data_settings):
    result = runner.invoke(app, ["librarian-login", "lib1", "--password", "pw"])
    assert "No librarian registered." in result.stdout

    result = runner.invoke(app, ["librarian-register", "Marian", "lib1", "--password", "pw"])
    assert "Librarian Marian registered." in result.stdout

    result = runner.invoke(app, ["librarian-login", "lib1", "--password", "pw"])
    assert "Welcome, Marian." in result.stdout
    result = runner.invoke(app, ["librarian-login", "lib1", "--password", "nope"])
    assert "Invalid ID or password." in result.stdout


def test_malformed_lines_are_reported(data_settings):
    data_settings.books_path.write_text("Dune|Frank Herbert|111|15|False|Fiction\ngarbage\n", encoding="utf-8")
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Dune" in result.stdout
