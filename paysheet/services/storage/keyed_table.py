"""
Keyed Table

DESIGN DECISION: A spreadsheet has no primary-key index and no real
row deletion. Every keyed mutation therefore happens in two explicit
steps:

    record, position = table.find(key)     # full scan, fresh
    table.update(position, new_record)     # targeted write

The steps are NOT atomic. A concurrent writer can append, clear or
overwrite rows between the scan and the write, which can lose an
update or let a duplicate slip past a pre-check. That is an accepted
limitation for small tables with rare concurrent writers; callers must
never cache a position across requests.

Deletion clears the row's cells instead of removing the row, so the
physical range only grows and cleared rows are skipped on every scan.
"""

from typing import Callable, Generic, Optional, Sequence, TypeVar

from paysheet.services.storage.interface import SheetsClientInterface
from paysheet.services.storage.rows import full_range, row_range


RecordT = TypeVar("RecordT")

HEADER_ROWS = 1


class KeyedTable(Generic[RecordT]):
    """
    One sheet viewed as a table of typed records.

    Positions are 1-based sheet row numbers within the full fetched
    range, so the first data row (below the header) is position 2.
    """

    def __init__(
        self,
        client: SheetsClientInterface,
        name: str,
        columns: Sequence[str],
        to_row: Callable[[RecordT], list[str]],
        from_row: Callable[[Sequence, Optional[int]], Optional[RecordT]],
        key: Callable[[RecordT], str],
    ):
        self._client = client
        self.name = name
        self.columns = list(columns)
        self._to_row = to_row
        self._from_row = from_row
        self._key = key

    @property
    def range(self) -> str:
        return full_range(self.columns)

    def scan(self) -> list[tuple[int, RecordT]]:
        """Read the whole table and map every live row."""
        rows = self._client.read_range(self.name, self.range)

        records = []
        for offset, row in enumerate(rows[HEADER_ROWS:], start=HEADER_ROWS + 1):
            record = self._from_row(row, offset)
            if record is not None:
                records.append((offset, record))
        return records

    def records(self) -> list[RecordT]:
        return [record for _, record in self.scan()]

    def find(self, key: str) -> Optional[tuple[RecordT, int]]:
        """Fresh scan for the record with ``key``; None when absent."""
        return self.find_where(lambda record: self._key(record) == key)

    def find_where(
        self,
        predicate: Callable[[RecordT], bool],
    ) -> Optional[tuple[RecordT, int]]:
        for position, record in self.scan():
            if predicate(record):
                return record, position
        return None

    def append(self, record: RecordT) -> None:
        self._client.append_row(self.name, self.range, self._to_row(record))

    def update(self, position: int, record: RecordT) -> None:
        """Overwrite exactly the row at ``position``."""
        self._check_position(position)
        self._client.write_range(
            self.name,
            row_range(self.columns, position),
            [self._to_row(record)],
        )

    def delete(self, position: int) -> None:
        """Clear the row at ``position``; later rows do not move."""
        self._check_position(position)
        self._client.clear_range(self.name, row_range(self.columns, position))

    def ensure(self) -> None:
        self._client.ensure_table(self.name, self.columns)

    @staticmethod
    def _check_position(position: int) -> None:
        if position <= HEADER_ROWS:
            raise ValueError(f"Row {position} is a header row, not a record")
