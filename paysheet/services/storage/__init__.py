"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the production backend; an in-memory client backs local
runs and tests. Both sit behind the same range contract.
"""

from paysheet.services.storage.interface import (
    BackendUnavailableError,
    DuplicateError,
    NotFoundError,
    SheetsClientInterface,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)
from paysheet.services.storage.keyed_table import KeyedTable
from paysheet.services.storage.memory import InMemorySheetsClient
from paysheet.services.storage.google_sheets import (
    GoogleSheetsClient,
    get_sheets_client,
)
from paysheet.services.storage.spreadsheet import (
    SheetTransactionStorage,
    SheetUserStorage,
    ensure_tables,
)

__all__ = [
    # Interfaces
    "SheetsClientInterface",
    "TransactionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "BackendUnavailableError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Clients
    "GoogleSheetsClient",
    "InMemorySheetsClient",
    "get_sheets_client",
    # Tables
    "KeyedTable",
    "SheetTransactionStorage",
    "SheetUserStorage",
    "ensure_tables",
]
