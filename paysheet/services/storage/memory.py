"""
In-Memory Sheets Client

Implements the range contract against plain Python lists so the
application can run without Google credentials (STORAGE_BACKEND=memory)
and tests never touch the network.

It mimics what the Sheets values API returns: trailing empty cells are
dropped, cleared rows come back as empty lists, and trailing empty rows
are not returned at all.
"""

import re
import threading
from typing import Optional

from paysheet.services.storage.interface import (
    BackendUnavailableError,
    SheetsClientInterface,
)


_RANGE_RE = re.compile(r"^([A-Z]+)(\d*)(?::([A-Z]+)(\d*))?$")


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def _parse_range(range_spec: str) -> tuple[int, int, Optional[int], Optional[int]]:
    """``A5:G5`` -> (first_col, last_col, first_row, last_row); rows None = unbounded."""
    match = _RANGE_RE.match(range_spec.upper())
    if not match:
        raise ValueError(f"Unsupported range: {range_spec}")
    start_col, start_row, end_col, end_row = match.groups()
    if end_col is None:
        end_col, end_row = start_col, start_row
    return (
        _column_index(start_col),
        _column_index(end_col),
        int(start_row) if start_row else None,
        int(end_row) if end_row else None,
    )


def _trim(row: list[str]) -> list[str]:
    trimmed = list(row)
    while trimmed and trimmed[-1] == "":
        trimmed.pop()
    return trimmed


class InMemorySheetsClient(SheetsClientInterface):
    """Thread-safe in-process tables keyed by sheet name."""

    def __init__(self, tables: Optional[dict[str, list[list[str]]]] = None):
        self._tables: dict[str, list[list[str]]] = {
            name: [list(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._lock = threading.Lock()
        self.available = True

    def _table(self, table: str) -> list[list[str]]:
        if not self.available:
            raise BackendUnavailableError(f"Store unavailable reading '{table}'")
        if table not in self._tables:
            raise BackendUnavailableError(f"Unable to parse range: {table}")
        return self._tables[table]

    def rows(self, table: str) -> list[list[str]]:
        """Raw physical rows, for inspection."""
        with self._lock:
            return [list(row) for row in self._tables.get(table, [])]

    def read_range(self, table: str, range_spec: str) -> list[list[str]]:
        first_col, last_col, first_row, last_row = _parse_range(range_spec)
        with self._lock:
            rows = self._table(table)
            start = (first_row or 1) - 1
            end = last_row if last_row is not None else len(rows)
            selected = [_trim(row[first_col - 1:last_col]) for row in rows[start:end]]

        while selected and not selected[-1]:
            selected.pop()
        return selected

    def append_row(self, table: str, range_spec: str, row: list[str]) -> None:
        first_col, _, _, _ = _parse_range(range_spec)
        with self._lock:
            rows = self._table(table)
            last_used = len(rows)
            while last_used > 0 and not _trim(rows[last_used - 1]):
                last_used -= 1
            new_row = [""] * (first_col - 1) + [str(cell) for cell in row]
            if last_used < len(rows):
                rows[last_used] = new_row
            else:
                rows.append(new_row)

    def write_range(self, table: str, range_spec: str, values: list[list[str]]) -> None:
        first_col, _, first_row, _ = _parse_range(range_spec)
        with self._lock:
            rows = self._table(table)
            start = (first_row or 1) - 1
            for offset, new_cells in enumerate(values):
                index = start + offset
                while len(rows) <= index:
                    rows.append([])
                row = rows[index]
                needed = first_col - 1 + len(new_cells)
                row.extend([""] * (needed - len(row)))
                for col, cell in enumerate(new_cells, start=first_col - 1):
                    row[col] = str(cell)

    def clear_range(self, table: str, range_spec: str) -> None:
        first_col, last_col, first_row, last_row = _parse_range(range_spec)
        with self._lock:
            rows = self._table(table)
            start = (first_row or 1) - 1
            end = last_row if last_row is not None else len(rows)
            for row in rows[start:end]:
                for col in range(first_col - 1, min(last_col, len(row))):
                    row[col] = ""

    def ensure_table(self, table: str, header: list[str]) -> None:
        with self._lock:
            if not self.available:
                raise BackendUnavailableError(f"Store unavailable creating '{table}'")
            rows = self._tables.setdefault(table, [])
            if not rows or not _trim(rows[0]):
                if rows:
                    rows[0] = list(header)
                else:
                    rows.append(list(header))
