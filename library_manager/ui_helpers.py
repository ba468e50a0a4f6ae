import json
import os
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_book_list(books: List[Any], empty_message: str = "No books in library.") -> None:
    """Print books numbered from 1 in the current output mode.
    - plain: 'N. ISBN - Title by Author [Genre]' lines
    - json: array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("#", style="dim", no_wrap=True)
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Genre", style="green")
        table.add_column("Due", justify="right")
        for i, b in enumerate(books, 1):
            table.add_row(str(i), b.isbn, b.title, b.author, b.genre, str(b.due_date))
        _console.print(table)
    else:
        for i, b in enumerate(books, 1):
            print(f"{i}. {b.isbn} - {b.title} by {b.author} [{b.genre}]")


def print_user_list(accounts: List[Any]) -> None:
    mode = get_output_mode()

    if not accounts:
        print("No users found.")
        return

    if mode == "json":
        print(json.dumps([
            {"id": a.id, "name": a.name, "fine_amount": round(a.fine_amount, 2), "borrowed_count": a.borrowed_count}
            for a in accounts
        ], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="👥 Users", header_style="bold cyan")
        table.add_column("Name")
        table.add_column("ID", style="magenta")
        table.add_column("Fine", justify="right")
        table.add_column("Books Borrowed", justify="right")
        for a in accounts:
            fine = f"{a.fine_amount:.2f}" if a.fine_amount > 0 else "N/A"
            table.add_row(a.name, a.id, fine, str(a.borrowed_count))
        _console.print(table)
    else:
        for a in accounts:
            fine = f"{a.fine_amount:.2f}" if a.fine_amount > 0 else "N/A"
            print(f"{a.id} - {a.name} (fine: {fine}, borrowed: {a.borrowed_count})")


def print_account_result(account: Any) -> None:
    """Show one account with its borrowed books and current fine."""
    mode = get_output_mode()
    fine = f"{account.fine_amount:.2f}" if account.fine_amount > 0 else "No fine"

    if mode == "json":
        print(json.dumps(account.to_dict(), ensure_ascii=False))
        return

    if mode == "rich":
        content = (
            f"[bold]Name:[/] {account.name}\n"
            f"[bold]User ID:[/] {account.id}\n"
            f"[bold]Number of Borrowed Books:[/] {account.borrowed_count}\n"
            f"[bold]Total Fine:[/] {fine}"
        )
        _console.print(Panel.fit(content, title="👤 Account", border_style="blue"))
    else:
        print(f"Name: {account.name}")
        print(f"User ID: {account.id}")
        print(f"Number of Borrowed Books: {account.borrowed_count}")
        print(f"Total Fine: {fine}")
    print_book_list(account.borrowed_books, empty_message="No borrowed books.")


def print_genres(genres: List[str]) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(genres, ensure_ascii=False))
        return
    if not genres:
        print("No books are available in the library.")
        return
    for i, genre in enumerate(genres, 1):
        print(f"({i}) {genre}")


def print_message(data: Dict[str, Any], text: str) -> None:
    """Print a one-line outcome, or its data as JSON in json mode."""
    if get_output_mode() == "json":
        print(json.dumps(data, ensure_ascii=False))
    else:
        print(text)
