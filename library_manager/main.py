import logging
from typing import Optional

import typer

from library_manager.book import Book, GENRES
from library_manager.config import Settings
from library_manager.errors import LibraryError
from library_manager.state import LibraryState
from library_manager.ui_helpers import (
    print_account_result,
    print_book_list,
    print_genres,
    print_message,
    print_user_list,
    set_output_mode,
)
from library_manager.validators import BookValidator, TextValidator

app = typer.Typer(help="Library Manager CLI")


def _load_state() -> LibraryState:
    """Read the library from the files named in the current environment."""
    return LibraryState.load(Settings.from_env())


def _finish(state: LibraryState) -> None:
    if state.store.errors:
        for error in state.store.errors:
            print(f"Warning: {error}")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


# ------------------------- Books ------------------------- #
@app.command("list")
def cli_list():
    """List every available book."""
    state = _load_state()
    print_book_list(state.catalog.list_books())


@app.command("add")
def cli_add(
    title: str,
    author: str,
    isbn: str,
    due_day: int = typer.Argument(..., help="Day of the month the book is due (1-31)"),
    genre: int = typer.Argument(..., help=f"Genre number (1-{len(GENRES)}), see 'genres --all'"),
):
    """Add a book to the catalog."""
    if not TextValidator.validate_title(title):
        print("Error: invalid title.")
        return
    if not TextValidator.validate_author(author):
        print("Error: invalid author.")
        return
    if not BookValidator.validate_isbn(isbn):
        print("Error: invalid ISBN.")
        return
    if not BookValidator.validate_due_day(due_day):
        print("Error: due day must be between 1 and 31.")
        return
    genre_name = BookValidator.genre_for_choice(genre)
    if genre_name is None:
        print(f"Error: genre must be between 1 and {len(GENRES)}.")
        return

    state = _load_state()
    book = Book(title.strip(), author.strip(), isbn.strip(), due_day, False, genre_name)
    try:
        state.add_book(book)
    except LibraryError as e:
        print(f"Error: {e}")
        return
    print_message(book.to_dict(), f"Successfully added: {book.title} by {book.author}")
    _finish(state)


@app.command("remove")
def cli_remove(
    index: int = typer.Argument(..., help="Book number as shown by 'list'"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a book from the catalog."""
    state = _load_state()
    if not 1 <= index <= len(state.catalog):
        print(f"Book number {index} not found.")
        return
    book = state.catalog.books[index - 1]
    if not yes and not typer.confirm(f"Delete '{book.title}'?"):
        print("Deletion canceled.")
        return
    state.delete_book(index - 1)
    print_message(book.to_dict(), f"Book '{book.title}' has been deleted.")
    _finish(state)


@app.command("search")
def cli_search(term: str):
    """Search books by title, or by exact genre name."""
    state = _load_state()
    print_book_list(state.catalog.search(term), empty_message="No books found matching your search.")


@app.command("genres")
def cli_genres(all_genres: bool = typer.Option(False, "--all", help="Show every genre, not only those on the shelf")):
    """List the genres of available books."""
    if all_genres:
        print_genres(list(GENRES))
        return
    print_genres(_load_state().catalog.list_genres())


@app.command("genre")
def cli_genre(name: str):
    """List available books in a genre."""
    state = _load_state()
    print_book_list(state.catalog.find_by_genre(name), empty_message=f"No books found in the genre: {name}")


# ------------------------- Users ------------------------- #
@app.command("register")
def cli_register(user_id: str, name: str):
    """Sign up a new user."""
    if not TextValidator.validate_account_field(user_id) or not TextValidator.validate_account_field(name):
        print("Error: user ID and name must be non-empty and must not contain ','.")
        return
    state = _load_state()
    try:
        account = state.register_user(user_id.strip(), name.strip())
    except LibraryError as e:
        print(f"Error: {e}")
        return
    print_message({"id": account.id, "name": account.name}, f"Welcome, {account.name}! Your ID is {account.id}.")
    _finish(state)


@app.command("users")
def cli_users(search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name or ID")):
    """List registered users with their current fines."""
    state = _load_state()
    accounts = state.search_users(search)
    for account in accounts:
        state.engine.calculate_fine(account)
    print_user_list(accounts)


@app.command("delete-user")
def cli_delete_user(
    user_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a user. Books they still hold go back on the shelf."""
    state = _load_state()
    account = state.directory.get(user_id)
    if account is None:
        print(f"User with ID {user_id} not found.")
        return
    if not yes and not typer.confirm(f"Delete user '{account.name}'?"):
        print("Deletion canceled.")
        return
    state.delete_user(user_id)
    print_message({"id": account.id, "name": account.name}, f"User {user_id} has been deleted.")
    _finish(state)


@app.command("account")
def cli_account(user_id: str):
    """Show a user's borrowed books and fine."""
    state = _load_state()
    try:
        account = state.directory.authenticate(user_id)
    except LibraryError as e:
        print(str(e))
        return
    state.engine.calculate_fine(account)
    print_account_result(account)


# ------------------------- Borrowing ------------------------- #
@app.command("borrow")
def cli_borrow(user_id: str, index: int = typer.Argument(..., help="Book number as shown by 'list'")):
    """Borrow an available book."""
    state = _load_state()
    try:
        book = state.borrow(user_id, index - 1)
    except LibraryError as e:
        print(f"Sorry: {e}")
        return
    print_message(book.to_dict(), f"You have successfully borrowed '{book.title}'. Enjoy reading!")
    _finish(state)


@app.command("return")
def cli_return(user_id: str, index: int = typer.Argument(..., help="Book number as shown by 'account'")):
    """Return a borrowed book."""
    state = _load_state()
    try:
        book = state.return_book(user_id, index - 1)
    except LibraryError as e:
        print(f"Invalid choice: {e}")
        return
    print_message(book.to_dict(), f"{book.title} returned.")
    _finish(state)


# ------------------------- Librarian ------------------------- #
@app.command("librarian-register")
def cli_librarian_register(
    name: str,
    librarian_id: str,
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Register the librarian, replacing any existing one."""
    fields = (name, librarian_id, password)
    if not all(TextValidator.validate_field(f) for f in fields):
        print("Error: name, ID and password must be non-empty and must not contain '|'.")
        return
    state = _load_state()
    librarian = state.register_librarian(name.strip(), librarian_id.strip(), password)
    print_message({"name": librarian.name, "id": librarian.id}, f"Librarian {librarian.name} registered.")
    _finish(state)


@app.command("librarian-login")
def cli_librarian_login(
    librarian_id: str,
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Check the librarian credential."""
    state = _load_state()
    if state.librarian is None:
        print("No librarian registered. Please register first.")
        return
    if state.directory.verify_librarian(librarian_id, password):
        print(f"Welcome, {state.librarian.name}.")
    else:
        print("Invalid ID or password.")


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    app(prog_name="library-manager")


if __name__ == "__main__":
    main()
