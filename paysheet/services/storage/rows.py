"""
Row Mapper

Converts between flat sheet rows (ordered lists of cell strings) and
typed records. Column order is fixed and positional.

Rules:
- Missing trailing cells read as empty strings.
- A row with no non-blank cell is what a clear-based delete leaves
  behind; it maps to None ("no record"), never to a zeroed record.
- Unparseable or out-of-range amounts read as 0.
- Header skipping is the reader's job, not the mapper's.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

import structlog

from paysheet.models.transaction import Transaction, TransactionType, is_storable_amount
from paysheet.models.user import Role, User


logger = structlog.get_logger(__name__)


# Column mappings for the Users sheet
USER_COLUMNS = [
    "id",
    "email",
    "password_hash",
    "name",
    "role",
]

# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "type",
    "category",
    "description",
    "amount",
    "created_by",
]


def column_letter(index: int) -> str:
    """1-based column index to A1 letters (1 -> A, 27 -> AA)."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def full_range(columns: Sequence[str]) -> str:
    """Whole-column range covering ``columns``, e.g. ``A:G``."""
    return f"A:{column_letter(len(columns))}"


def row_range(columns: Sequence[str], position: int) -> str:
    """Single-row range, e.g. ``A5:G5``."""
    return f"A{position}:{column_letter(len(columns))}{position}"


def is_blank_row(row: Optional[Sequence]) -> bool:
    if not row:
        return True
    return all(cell is None or str(cell).strip() == "" for cell in row)


def _cell(row: Sequence, index: int, default: str = "") -> str:
    try:
        value = row[index]
    except IndexError:
        return default
    if value is None:
        return default
    return str(value)


def parse_amount(value: str) -> Decimal:
    """Parse a stored amount; anything unparseable or out of range is zero."""
    cleaned = value.strip().replace(",", "")
    if not cleaned:
        return Decimal("0")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    if not is_storable_amount(amount):
        logger.warning("out_of_range_amount_read_as_zero", amount=cleaned)
        return Decimal("0")
    return amount


def format_amount(amount: Decimal) -> str:
    return str(amount)


# =============================================================================
# USERS
# =============================================================================

def user_to_row(user: User) -> list[str]:
    """Convert a User to a sheet row."""
    return [
        user.id,
        user.email,
        user.password_hash,
        user.name,
        user.role.value,
    ]


def row_to_user(row: Sequence, position: Optional[int] = None) -> Optional[User]:
    """Convert a sheet row to a User, or None for a cleared row."""
    if is_blank_row(row):
        return None
    if not _cell(row, 0).strip():
        logger.warning("user_row_without_id_skipped", row_position=position)
        return None

    raw_role = _cell(row, 4)
    try:
        role = Role.parse(raw_role)
    except ValueError:
        logger.warning("unknown_role_in_sheet", role=raw_role, row_position=position)
        role = Role.USER

    return User(
        id=_cell(row, 0),
        email=_cell(row, 1),
        password_hash=_cell(row, 2),
        name=_cell(row, 3),
        role=role,
        row_position=position,
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

def transaction_to_row(transaction: Transaction) -> list[str]:
    """Convert a Transaction to a sheet row."""
    return [
        transaction.id,
        transaction.date,
        transaction.type.value,
        transaction.category,
        transaction.description,
        format_amount(transaction.amount),
        transaction.created_by,
    ]


def row_to_transaction(
    row: Sequence,
    position: Optional[int] = None,
) -> Optional[Transaction]:
    """
    Convert a sheet row to a Transaction, or None.

    None covers cleared rows and rows whose type column is neither
    income nor expense (those cannot be typed, so they are skipped
    with a warning rather than failing the whole fetch).
    """
    if is_blank_row(row):
        return None
    if not _cell(row, 0).strip():
        logger.warning("transaction_row_without_id_skipped", row_position=position)
        return None

    raw_type = _cell(row, 2).strip().lower()
    try:
        tx_type = TransactionType(raw_type)
    except ValueError:
        logger.warning(
            "untyped_transaction_row_skipped",
            transaction_id=_cell(row, 0),
            type=raw_type,
            row_position=position,
        )
        return None

    return Transaction(
        id=_cell(row, 0),
        date=_cell(row, 1),
        type=tx_type,
        category=_cell(row, 3),
        description=_cell(row, 4),
        amount=parse_amount(_cell(row, 5)),
        created_by=_cell(row, 6),
        row_position=position,
    )
