"""
Spreadsheet-backed Persistence

The only code that reads or writes the Users and Transactions sheets.
Everything above this module works with typed records.

Every mutation is preceded by a fresh full-table scan to find the
record's current row (see keyed_table.py). That makes each write O(n)
in table size and non-atomic, which is acceptable for the small tables
this service is built for.
"""

from typing import Any, Optional

import structlog

from paysheet.models.transaction import Transaction
from paysheet.models.user import User
from paysheet.services.storage.interface import (
    NotFoundError,
    SheetsClientInterface,
    TransactionStorageInterface,
    UserStorageInterface,
)
from paysheet.services.storage.keyed_table import KeyedTable
from paysheet.services.storage.rows import (
    TRANSACTION_COLUMNS,
    USER_COLUMNS,
    row_to_transaction,
    row_to_user,
    transaction_to_row,
    user_to_row,
)


logger = structlog.get_logger(__name__)


def _merge(record, updates: dict[str, Any], immutable: set[str]):
    """Validated copy of ``record`` with ``updates`` applied."""
    unknown = set(updates) - set(type(record).model_fields)
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

    data = record.model_dump()
    data.update(
        {
            field: value
            for field, value in updates.items()
            if field not in immutable
        }
    )
    return type(record)(**data)


class SheetUserStorage(UserStorageInterface):
    """Users sheet: one user per row, columns id/email/password_hash/name/role."""

    def __init__(
        self,
        client: SheetsClientInterface,
        sheet_name: str = "Users",
    ):
        self._table: KeyedTable[User] = KeyedTable(
            client,
            sheet_name,
            USER_COLUMNS,
            to_row=user_to_row,
            from_row=row_to_user,
            key=lambda user: user.id,
        )

    @property
    def table(self) -> KeyedTable[User]:
        return self._table

    def _locate(self, user_id: str) -> tuple[User, int]:
        found = self._table.find(user_id)
        if found is None:
            raise NotFoundError(f"User not found: {user_id}")
        return found

    def list_users(self) -> list[User]:
        return self._table.records()

    def find_user_by_email(self, email: str) -> Optional[User]:
        found = self._table.find_where(lambda user: user.email == email)
        return found[0] if found else None

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        found = self._table.find(user_id)
        return found[0] if found else None

    def create_user(self, user: User) -> User:
        self._table.append(user)
        logger.debug("user_row_appended", user_id=user.id)
        return user

    def update_user(self, user_id: str, updates: dict[str, Any]) -> User:
        current, position = self._locate(user_id)
        merged = _merge(current, updates, immutable={"id", "row_position"})
        self._table.update(position, merged)
        merged.row_position = position
        return merged

    def delete_user(self, user_id: str) -> None:
        _, position = self._locate(user_id)
        self._table.delete(position)


class SheetTransactionStorage(TransactionStorageInterface):
    """
    Transactions sheet: one transaction per row, columns
    id/date/type/category/description/amount/created_by.
    """

    def __init__(
        self,
        client: SheetsClientInterface,
        sheet_name: str = "Transactions",
    ):
        self._table: KeyedTable[Transaction] = KeyedTable(
            client,
            sheet_name,
            TRANSACTION_COLUMNS,
            to_row=transaction_to_row,
            from_row=row_to_transaction,
            key=lambda transaction: transaction.id,
        )

    @property
    def table(self) -> KeyedTable[Transaction]:
        return self._table

    def _locate(self, transaction_id: str) -> tuple[Transaction, int]:
        found = self._table.find(transaction_id)
        if found is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return found

    def list_transactions(self) -> list[Transaction]:
        return self._table.records()

    def get_transaction_by_id(self, transaction_id: str) -> Optional[Transaction]:
        found = self._table.find(transaction_id)
        return found[0] if found else None

    def create_transaction(self, transaction: Transaction) -> Transaction:
        self._table.append(transaction)
        logger.debug("transaction_row_appended", transaction_id=transaction.id)
        return transaction

    def update_transaction(
        self,
        transaction_id: str,
        updates: dict[str, Any],
    ) -> Transaction:
        current, position = self._locate(transaction_id)
        merged = _merge(
            current,
            updates,
            immutable={"id", "created_by", "row_position"},
        )
        self._table.update(position, merged)
        merged.row_position = position
        return merged

    def delete_transaction(self, transaction_id: str) -> None:
        _, position = self._locate(transaction_id)
        self._table.delete(position)


def ensure_tables(
    users: SheetUserStorage,
    transactions: SheetTransactionStorage,
) -> None:
    """Create missing sheets and header rows. Run once at startup."""
    users.table.ensure()
    transactions.table.ensure()
