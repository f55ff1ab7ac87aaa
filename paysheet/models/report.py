"""
Report Models

Output shapes of the reporting engine. Field aliases follow the
camelCase keys the dashboard charts read.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from paysheet.models.transaction import Amount, Transaction


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Balance(_CamelModel):
    """Income/expense totals. balance is always income minus expense."""
    total_income: Amount = Field(default=Decimal("0"), alias="totalIncome")
    total_expense: Amount = Field(default=Decimal("0"), alias="totalExpense")
    balance: Amount = Field(default=Decimal("0"))


class ReportSummary(Balance):
    transaction_count: int = Field(default=0, alias="transactionCount")


class DailyTotals(_CamelModel):
    income: Amount = Decimal("0")
    expense: Amount = Decimal("0")


class Aggregate(_CamelModel):
    """Single-pass aggregation over a transaction list."""
    summary: ReportSummary = Field(default_factory=ReportSummary)
    category_breakdown: dict[str, Amount] = Field(
        default_factory=dict,
        alias="categoryBreakdown",
    )
    daily_data: dict[str, DailyTotals] = Field(
        default_factory=dict,
        alias="dailyData",
    )


class Period(_CamelModel):
    """A resolved reporting window (inclusive on both ends)."""
    slug: str
    start: date
    end: date


class Report(Aggregate):
    period: str
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    transactions: list[Transaction] = Field(default_factory=list)


class Summary(ReportSummary):
    recent_transactions: list[Transaction] = Field(
        default_factory=list,
        alias="recentTransactions",
    )
    category_breakdown: dict[str, Amount] = Field(
        default_factory=dict,
        alias="categoryBreakdown",
    )
