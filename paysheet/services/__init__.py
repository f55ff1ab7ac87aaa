"""Services package."""

from paysheet.services.storage import (
    BackendUnavailableError,
    DuplicateError,
    GoogleSheetsClient,
    InMemorySheetsClient,
    NotFoundError,
    SheetTransactionStorage,
    SheetUserStorage,
    StorageError,
)

__all__ = [
    "BackendUnavailableError",
    "DuplicateError",
    "GoogleSheetsClient",
    "InMemorySheetsClient",
    "NotFoundError",
    "SheetTransactionStorage",
    "SheetUserStorage",
    "StorageError",
]
