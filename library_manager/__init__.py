"""Library Manager - Core Application Package

This package contains the core application modules including:
- Data models (book.py, account.py)
- Line-oriented record codec (codec.py)
- Flat-file persistence layer (storage.py)
- Catalog, borrowing and directory logic (catalog.py, borrowing.py, directory.py)
- Application state and configuration (state.py, config.py)
- CLI interface (main.py)
"""

__version__ = "1.0.0"
