"""
Transaction Models

DESIGN DECISION: Amounts are Decimal end to end. The sheet stores them
as plain text and reports add them with Decimal arithmetic, so no
rounding happens anywhere in the data layer. JSON responses render
them as numbers for the browser.

The stored ``date`` is a string, not a ``date``: rows edited by hand in
the spreadsheet can hold anything, and a malformed date must only drop
the row from date-range results, never break a listing.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from paysheet.models.user import generate_id


Amount = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Largest magnitude a single amount may have. Totals over a whole sheet
# of such amounts still convert to finite JSON numbers.
MAX_AMOUNT = Decimal("1e15")


def is_storable_amount(amount: Decimal) -> bool:
    """True if ``amount`` is finite and below MAX_AMOUNT in magnitude."""
    return amount.is_finite() and abs(amount) < MAX_AMOUNT


def generate_transaction_id() -> str:
    return generate_id("TXN")


class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(BaseModel):
    """
    A stored transaction row.

    row_position has the same transient caveat as on User.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=generate_transaction_id,
        min_length=1,
        description="Opaque unique id, immutable"
    )
    date: str = Field(
        ...,
        description="Canonical YYYY-MM-DD (as stored)"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    category: str = Field(
        default="",
        description="Free-text label"
    )
    description: str = Field(
        default="",
        description="Optional free text"
    )
    amount: Amount = Field(
        default=Decimal("0"),
        description="Currency-agnostic amount"
    )
    created_by: str = Field(
        default="",
        serialization_alias="createdBy",
        description="Display name of the creator, captured once"
    )
    row_position: Optional[int] = Field(
        default=None,
        exclude=True,
        description="Transient sheet row number"
    )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    def to_api(self) -> dict:
        """JSON-ready dict in the shape the frontend expects."""
        return self.model_dump(mode="json", by_alias=True)
