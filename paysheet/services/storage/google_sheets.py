"""
Google Sheets Storage Adapter

DESIGN DECISION: Google Sheets is the backing store because:
1. Non-technical staff can view and correct data directly in Sheets
2. No database setup required
3. Built-in backup and sharing (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for a small office ledger)
- No transactions and no row locking (see keyed_table.py)
- Limited query capabilities (we filter in Python)

This module only speaks ranges. Typed records live one layer up.
"""

import threading
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from gspread.utils import absolute_range_name
from tenacity import Retrying, stop_after_attempt, wait_exponential

from paysheet.config import GoogleSheetsSettings, get_settings
from paysheet.services.storage.interface import (
    BackendUnavailableError,
    SheetsClientInterface,
)
from paysheet.services.storage.rows import column_letter


logger = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

RAW = {"valueInputOption": "RAW"}


class GoogleSheetsClient(SheetsClientInterface):
    """
    Low-level Google Sheets client wrapper.

    Handles authentication lazily and maps every remote failure to
    BackendUnavailableError. Opening the spreadsheet is retried; data
    calls are not, so a failed read or write fails the request.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings or get_settings().google_sheets
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._lock = threading.Lock()

    def _credentials(self) -> Credentials:
        if self._settings.credentials_path:
            return Credentials.from_service_account_file(
                self._settings.credentials_path,
                scopes=SCOPES,
            )
        return Credentials.from_service_account_info(
            self._settings.service_account_info,
            scopes=SCOPES,
        )

    def _open(self) -> gspread.Spreadsheet:
        try:
            client = gspread.authorize(self._credentials())
            client.set_timeout(self._settings.request_timeout)
            spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
        except FileNotFoundError:
            raise BackendUnavailableError(
                f"Google credentials file not found: {self._settings.credentials_path}"
            )
        except gspread.SpreadsheetNotFound:
            raise BackendUnavailableError(
                f"Spreadsheet not found: {self._settings.spreadsheet_id}"
            )
        except Exception as e:
            raise BackendUnavailableError(f"Failed to connect to Google Sheets: {e}") from e

        logger.info(
            "google_sheets_connected",
            spreadsheet_id=self._settings.spreadsheet_id,
            title=spreadsheet.title,
        )
        return spreadsheet

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the configured spreadsheet once; later calls reuse it."""
        if self._spreadsheet is not None:
            return self._spreadsheet

        with self._lock:
            if self._spreadsheet is None:
                retrying = Retrying(
                    stop=stop_after_attempt(self._settings.connect_attempts),
                    wait=wait_exponential(multiplier=1, min=2, max=10),
                    reraise=True,
                )
                for attempt in retrying:
                    with attempt:
                        self._spreadsheet = self._open()
        return self._spreadsheet

    def _failed(self, operation: str, table: str, error: Exception) -> BackendUnavailableError:
        logger.error(
            "google_sheets_call_failed",
            operation=operation,
            table=table,
            error=str(error),
        )
        return BackendUnavailableError(f"Failed to {operation} '{table}': {error}")

    def read_range(self, table: str, range_spec: str) -> list[list[str]]:
        spreadsheet = self.get_spreadsheet()
        try:
            response = spreadsheet.values_get(absolute_range_name(table, range_spec))
        except Exception as e:
            raise self._failed("read", table, e) from e

        values = response.get("values", []) if isinstance(response, dict) else None
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise BackendUnavailableError(f"Malformed response reading '{table}'")
        return values

    def append_row(self, table: str, range_spec: str, row: list[str]) -> None:
        spreadsheet = self.get_spreadsheet()
        try:
            spreadsheet.values_append(
                absolute_range_name(table, range_spec),
                params=RAW,
                body={"values": [row]},
            )
        except Exception as e:
            raise self._failed("append to", table, e) from e

    def write_range(self, table: str, range_spec: str, rows: list[list[str]]) -> None:
        spreadsheet = self.get_spreadsheet()
        try:
            spreadsheet.values_update(
                absolute_range_name(table, range_spec),
                params=RAW,
                body={"values": rows},
            )
        except Exception as e:
            raise self._failed("write", table, e) from e

    def clear_range(self, table: str, range_spec: str) -> None:
        spreadsheet = self.get_spreadsheet()
        try:
            spreadsheet.values_clear(absolute_range_name(table, range_spec))
        except Exception as e:
            raise self._failed("clear", table, e) from e

    def ensure_table(self, table: str, header: list[str]) -> None:
        """Get or create the worksheet and give it a header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            try:
                spreadsheet.worksheet(table)
            except gspread.WorksheetNotFound:
                spreadsheet.add_worksheet(title=table, rows=1000, cols=len(header))
                logger.info("worksheet_created", table=table)
        except Exception as e:
            raise self._failed("create", table, e) from e

        header_range = f"A1:{column_letter(len(header))}1"
        if not self.read_range(table, header_range):
            self.write_range(table, header_range, [header])
            logger.info("worksheet_header_written", table=table)


_shared_client: Optional[GoogleSheetsClient] = None
_shared_lock = threading.Lock()


def get_sheets_client() -> GoogleSheetsClient:
    """
    Process-wide client, constructed on first use.

    The underlying HTTP session is shared by every request thread.
    """
    global _shared_client
    if _shared_client is None:
        with _shared_lock:
            if _shared_client is None:
                _shared_client = GoogleSheetsClient()
    return _shared_client
