import pytest

from library_manager.book import Book
from library_manager.catalog import Catalog
from library_manager.config import Settings
from library_manager.directory import Directory
from library_manager.state import LibraryState
from library_manager.storage import Store


@pytest.fixture
def data_settings(tmp_path, monkeypatch):
    # Every test gets its own data directory
    monkeypatch.setenv("LIBRARY_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LIBRARY_PERSIST_LOANS", "true")
    monkeypatch.setenv("LIBRARY_FINE_MODE", "current-month")
    monkeypatch.setenv("LIBRARY_FINE_PER_DAY", "0.50")
    monkeypatch.delenv("LIB_CLI_OUTPUT", raising=False)
    return Settings.from_env()


@pytest.fixture
def store(data_settings):
    return Store.from_settings(data_settings)


@pytest.fixture
def lib(data_settings, store):
    state = LibraryState.load(data_settings, store)
    yield state
    state.shutdown()


@pytest.fixture
def sample_book():
    return Book("Dune", "Frank Herbert", "111", 15, False, "Fiction")


@pytest.fixture
def catalog(sample_book):
    cat = Catalog()
    cat.add(sample_book)
    cat.add(Book("A Brief History of Time", "Stephen Hawking", "222", 10, False, "Scientific books"))
    cat.add(Book("The Joy of Cooking", "Irma Rombauer", "333", 28, False, "Cookbooks, crafts, and hobbies"))
    return cat


@pytest.fixture
def directory():
    d = Directory()
    d.register("u1", "Alice")
    d.register("u2", "Bob")
    return d
