"""
Data Models Package

This package contains all Pydantic models used by Paysheet.
All data flowing through the system must conform to these schemas.
"""

from paysheet.models.user import (
    Role,
    TokenUser,
    User,
    UserPublic,
    generate_user_id,
)
from paysheet.models.transaction import (
    Amount,
    MAX_AMOUNT,
    Transaction,
    TransactionType,
    generate_transaction_id,
    is_storable_amount,
)
from paysheet.models.report import (
    Aggregate,
    Balance,
    DailyTotals,
    Period,
    Report,
    ReportSummary,
    Summary,
)

__all__ = [
    # User models
    "Role",
    "TokenUser",
    "User",
    "UserPublic",
    "generate_user_id",
    # Transaction models
    "Amount",
    "Transaction",
    "TransactionType",
    "generate_transaction_id",
    "is_storable_amount",
    "MAX_AMOUNT",
    # Report models
    "Aggregate",
    "Balance",
    "DailyTotals",
    "Period",
    "Report",
    "ReportSummary",
    "Summary",
]
