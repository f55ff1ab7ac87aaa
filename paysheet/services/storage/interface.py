"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces at two levels.

1. SheetsClientInterface: the range-based contract the backing store
   must honour (read / append / write / clear a cell range of a named
   table). Google Sheets implements it for real; an in-memory version
   serves local runs and tests.
2. UserStorageInterface / TransactionStorageInterface: typed CRUD that
   the rest of the application talks to. Nothing above this layer ever
   sees a raw row.

The interface is intentionally simple - we're not building a full ORM.
Just the operations the payment tracker needs.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from paysheet.models.transaction import Transaction
from paysheet.models.user import User


class SheetsClientInterface(ABC):
    """
    Range-based access to a tabular store.

    ``table`` is a sheet name, ``range_spec`` an A1 range without the
    sheet prefix (e.g. ``"A:G"`` or ``"A5:G5"``).
    """

    @abstractmethod
    def read_range(self, table: str, range_spec: str) -> list[list[str]]:
        """
        Return every row of the range, header included.

        Rows are lists of cell strings. Trailing empty cells may be
        omitted and a cleared row may come back as an empty list.
        An empty table yields ``[]``.

        Raises:
            BackendUnavailableError: If the store cannot be reached
        """

    @abstractmethod
    def append_row(self, table: str, range_spec: str, row: list[str]) -> None:
        """Add one row after the last non-empty row of the table."""

    @abstractmethod
    def write_range(self, table: str, range_spec: str, rows: list[list[str]]) -> None:
        """Overwrite exactly the addressed cells."""

    @abstractmethod
    def clear_range(self, table: str, range_spec: str) -> None:
        """Blank the addressed cells without shifting later rows."""

    @abstractmethod
    def ensure_table(self, table: str, header: list[str]) -> None:
        """Create the table if missing and write ``header`` when it is empty."""


class UserStorageInterface(ABC):
    """Typed CRUD for users."""

    @abstractmethod
    def list_users(self) -> list[User]:
        """All live users with their current row positions."""

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[User]:
        """Exact-match lookup. Returns None when absent."""

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Returns None when absent."""

    @abstractmethod
    def create_user(self, user: User) -> User:
        """
        Append a user row.

        No uniqueness check happens here; callers pre-check with
        find_user_by_email.
        """

    @abstractmethod
    def update_user(self, user_id: str, updates: dict[str, Any]) -> User:
        """
        Merge ``updates`` onto the current record and overwrite its row.

        Raises:
            NotFoundError: If no user has that id at call time
        """

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """
        Clear the user's row.

        Raises:
            NotFoundError: If no user has that id at call time
        """


class TransactionStorageInterface(ABC):
    """Typed CRUD for transactions."""

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """All live transactions in sheet order with their row positions."""

    @abstractmethod
    def get_transaction_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Returns None when absent."""

    @abstractmethod
    def create_transaction(self, transaction: Transaction) -> Transaction:
        """Append a transaction row."""

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: str,
        updates: dict[str, Any],
    ) -> Transaction:
        """
        Merge ``updates`` onto the current record and overwrite its row.

        Raises:
            NotFoundError: If no transaction has that id at call time
        """

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None:
        """
        Clear the transaction's row.

        Raises:
            NotFoundError: If no transaction has that id at call time
        """


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class BackendUnavailableError(StorageError):
    """Could not reach the storage backend, or it answered with garbage."""
    pass
