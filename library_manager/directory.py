import logging
from typing import Dict, List, Optional

from library_manager.account import Account, Librarian
from library_manager.errors import DuplicateIdError, NotFoundError

logger = logging.getLogger(__name__)


class Directory:
    """Registered accounts keyed by id, plus the single librarian slot."""

    def __init__(self, accounts: Optional[Dict[str, Account]] = None,
                 librarian: Optional[Librarian] = None) -> None:
        self.accounts: Dict[str, Account] = dict(accounts or {})
        self.librarian = librarian

    def __len__(self) -> int:
        return len(self.accounts)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self.accounts

    # ------------------------- Accounts ------------------------- #
    def register(self, account_id: str, name: str) -> Account:
        if not account_id or not account_id.strip():
            raise ValueError("User ID cannot be empty.")
        if account_id in self.accounts:
            raise DuplicateIdError(account_id)
        account = Account(account_id, name)
        self.accounts[account_id] = account
        logger.info(f"Registered user {account_id}")
        return account

    def authenticate(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"User with ID {account_id} not found.")
        return account

    def get(self, account_id: str) -> Optional[Account]:
        return self.accounts.get(account_id)

    def delete(self, account_id: str) -> Account:
        try:
            account = self.accounts.pop(account_id)
        except KeyError:
            raise NotFoundError(f"User with ID {account_id} not found.") from None
        logger.info(f"Deleted user {account_id}")
        return account

    def rename(self, account_id: str, name: str) -> Account:
        account = self.authenticate(account_id)
        account.name = name
        return account

    def change_id(self, old_id: str, new_id: str) -> Account:
        """Re-key an account, keeping its position and borrowed books."""
        account = self.authenticate(old_id)
        if new_id == old_id:
            return account
        if not new_id or not new_id.strip():
            raise ValueError("User ID cannot be empty.")
        if new_id in self.accounts:
            raise DuplicateIdError(new_id)
        account.id = new_id
        self.accounts = {(new_id if k == old_id else k): v for k, v in self.accounts.items()}
        return account

    def list_accounts(self) -> List[Account]:
        return list(self.accounts.values())

    def search_users(self, term: Optional[str]) -> List[Account]:
        """Case-insensitive substring match on name or id; empty term lists everyone."""
        term = (term or "").strip().lower()
        if not term:
            return self.list_accounts()
        return [a for a in self.accounts.values() if term in a.name.lower() or term in a.id.lower()]

    # ------------------------- Librarian ------------------------- #
    def register_librarian(self, name: str, librarian_id: str, password: str) -> Librarian:
        """Replace the librarian credential."""
        if self.librarian is not None:
            logger.info(f"Replacing librarian {self.librarian.id}")
        self.librarian = Librarian(name, librarian_id, password)
        return self.librarian

    def verify_librarian(self, librarian_id: str, password: str) -> bool:
        if self.librarian is None:
            return False
        return self.librarian.verify(librarian_id, password)
