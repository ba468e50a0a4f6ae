import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

FINE_MODE_CURRENT_MONTH = "current-month"
FINE_MODE_BORROW_MONTH = "borrow-month"
FINE_MODES = (FINE_MODE_CURRENT_MONTH, FINE_MODE_BORROW_MONTH)
DEFAULT_FINE_PER_DAY = 0.50
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number; using {default:.2f}")
        return default


@dataclass
class Settings:
    # Data files
    data_dir: str = field(default_factory=lambda: os.getenv("LIBRARY_DATA_DIR", "."))
    books_file: str = field(default_factory=lambda: os.getenv("LIBRARY_BOOKS_FILE", "books.txt"))
    users_file: str = field(default_factory=lambda: os.getenv("LIBRARY_USERS_FILE", "users.txt"))
    librarian_file: str = field(default_factory=lambda: os.getenv("LIBRARY_LIBRARIAN_FILE", "librarians.txt"))
    loans_file: str = field(default_factory=lambda: os.getenv("LIBRARY_LOANS_FILE", "loans.txt"))
    # Borrowed books are kept in their own file; accounts stay "id,name".
    persist_loans: bool = field(default_factory=lambda: _env_flag("LIBRARY_PERSIST_LOANS", "True"))

    # Fines
    fine_per_day: float = field(default_factory=lambda: _env_float("LIBRARY_FINE_PER_DAY", DEFAULT_FINE_PER_DAY))
    fine_mode: str = field(default_factory=lambda: os.getenv("LIBRARY_FINE_MODE", FINE_MODE_CURRENT_MONTH))

    # Application
    app_name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Library Manager"))
    log_level: str = field(default_factory=lambda: os.getenv("LIBRARY_LOG_LEVEL", "INFO").upper())

    def __post_init__(self) -> None:
        # Bad values fall back to the defaults with a warning.
        if self.fine_mode not in FINE_MODES:
            logger.warning(f"Unknown fine mode {self.fine_mode!r}; expected one of {', '.join(FINE_MODES)}. "
                           f"Using {FINE_MODE_CURRENT_MONTH}")
            self.fine_mode = FINE_MODE_CURRENT_MONTH
        if self.fine_per_day < 0:
            logger.warning(f"Negative fine per day {self.fine_per_day}; using {DEFAULT_FINE_PER_DAY:.2f}")
            self.fine_per_day = DEFAULT_FINE_PER_DAY
        if self.log_level not in LOG_LEVELS:
            logger.warning(f"Unknown log level {self.log_level!r}; using INFO")
            self.log_level = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build a fresh Settings from the current environment."""
        return cls()

    def path_for(self, filename: str) -> Path:
        return Path(self.data_dir) / filename

    @property
    def books_path(self) -> Path:
        return self.path_for(self.books_file)

    @property
    def users_path(self) -> Path:
        return self.path_for(self.users_file)

    @property
    def librarian_path(self) -> Path:
        return self.path_for(self.librarian_file)

    @property
    def loans_path(self) -> Path:
        return self.path_for(self.loans_file)


settings = Settings()
