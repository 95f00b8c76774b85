"""Report data models for P&L statements, breakdowns, and rankings.

None of these are persisted; every report is recomputed from the stores
on request.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from pos_pnl.utils.decimal_utils import ZERO, percentage


class Granularity(Enum):
    """Calendar bucket size used to partition a date range."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass
class OperatingExpenses:
    """Operating expenses rolled up into statement buckets.

    Marketing, supplies, and insurance are folded into ``other``, so
    ``total`` always equals the sum of the four buckets.
    """

    labor: Decimal = ZERO
    rent: Decimal = ZERO
    utilities: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        """Sum of all buckets."""
        return self.labor + self.rent + self.utilities + self.other

    def add(self, bucket: str, amount: Decimal) -> None:
        """Add an amount to a named bucket."""
        setattr(self, bucket, getattr(self, bucket) + amount)

    def to_dict(self) -> dict[str, str]:
        return {
            "labor": str(self.labor),
            "rent": str(self.rent),
            "utilities": str(self.utilities),
            "other": str(self.other),
            "total": str(self.total),
        }


@dataclass
class PeriodStatement:
    """P&L statement for one inclusive date range.

    Attributes:
        start_date: First day of the period.
        end_date: Last day of the period.
        revenue: Sum of transaction totals.
        cost_of_goods_sold: Sum of quantity x current unit cost.
        operating_expenses: Expense rollup for the period.
        transactions: Number of transactions in the period.
        units_sold: Sum of line-item quantities.
        skipped_transactions: IDs of transactions whose line items were
            malformed and therefore excluded from COGS and units.
    """

    start_date: date
    end_date: date
    revenue: Decimal
    cost_of_goods_sold: Decimal
    operating_expenses: OperatingExpenses
    transactions: int
    units_sold: int
    skipped_transactions: list[int] = field(default_factory=list)

    @property
    def gross_profit(self) -> Decimal:
        """Revenue minus cost of goods sold."""
        return self.revenue - self.cost_of_goods_sold

    @property
    def gross_margin(self) -> Decimal:
        """Gross profit as a percentage of revenue (0 without revenue)."""
        if self.revenue <= 0:
            return ZERO
        return percentage(self.gross_profit, self.revenue)

    @property
    def net_income(self) -> Decimal:
        """Gross profit minus total operating expenses."""
        return self.gross_profit - self.operating_expenses.total

    @property
    def net_margin(self) -> Decimal:
        """Net income as a percentage of revenue (0 without revenue)."""
        if self.revenue <= 0:
            return ZERO
        return percentage(self.net_income, self.revenue)

    @property
    def average_transaction_value(self) -> Decimal:
        """Revenue per transaction (0 without transactions)."""
        if self.transactions <= 0:
            return ZERO
        return self.revenue / self.transactions

    @property
    def is_complete(self) -> bool:
        """False when some transactions were skipped as malformed."""
        return not self.skipped_transactions

    @property
    def period_display(self) -> str:
        """Formatted date range string."""
        return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON output (money as strings to keep precision)."""
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "revenue": str(self.revenue),
            "cost_of_goods_sold": str(self.cost_of_goods_sold),
            "gross_profit": str(self.gross_profit),
            "gross_margin": str(self.gross_margin),
            "operating_expenses": self.operating_expenses.to_dict(),
            "net_income": str(self.net_income),
            "net_margin": str(self.net_margin),
            "transactions": self.transactions,
            "units_sold": self.units_sold,
            "average_transaction_value": str(self.average_transaction_value),
            "skipped_transactions": list(self.skipped_transactions),
        }


@dataclass
class PnLBreakdown:
    """Statements for the same range at every granularity.

    Attributes:
        daily: One statement per day.
        weekly: One statement per Sunday-anchored week.
        monthly: One statement per month.
        quarterly: One statement per quarter.
        yearly: One statement per year.
        custom: One statement over the whole unpartitioned range.
    """

    daily: list[PeriodStatement]
    weekly: list[PeriodStatement]
    monthly: list[PeriodStatement]
    quarterly: list[PeriodStatement]
    yearly: list[PeriodStatement]
    custom: PeriodStatement

    def by_granularity(self) -> dict[Granularity, list[PeriodStatement]]:
        """Partitioned statements keyed by granularity, in display order."""
        return {
            Granularity.DAILY: self.daily,
            Granularity.WEEKLY: self.weekly,
            Granularity.MONTHLY: self.monthly,
            Granularity.QUARTERLY: self.quarterly,
            Granularity.YEARLY: self.yearly,
        }


@dataclass
class CategoryPerformance:
    """Sales performance of one product category."""

    category: str
    revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    units_sold: int = 0
    transactions: int = 0

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.cost_of_goods_sold

    @property
    def gross_margin(self) -> Decimal:
        if self.revenue <= 0:
            return ZERO
        return percentage(self.gross_profit, self.revenue)


@dataclass
class ProductPerformance:
    """Sales performance of one product.

    Attributes:
        upc: Product identifier.
        description: Receipt description of the product.
        category: Catalog category ("" if the product is not in the catalog).
        revenue: Sum of price x quantity.
        cost_of_goods_sold: Sum of quantity x current unit cost.
        units_sold: Units sold in the range.
        average_on_hand: Current average on-hand quantity, the stand-in
            for historical average inventory.
    """

    upc: str
    description: str
    category: str = ""
    revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    units_sold: int = 0
    average_on_hand: Decimal | None = None

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.cost_of_goods_sold

    @property
    def gross_margin(self) -> Decimal:
        if self.revenue <= 0:
            return ZERO
        return percentage(self.gross_profit, self.revenue)

    @property
    def average_selling_price(self) -> Decimal:
        if self.units_sold <= 0:
            return ZERO
        return self.revenue / self.units_sold

    @property
    def inventory_turnover(self) -> Decimal:
        """Units sold per unit of average inventory (0 without stock data)."""
        if self.average_on_hand is None or self.average_on_hand <= 0:
            return ZERO
        return Decimal(self.units_sold) / self.average_on_hand


@dataclass(frozen=True)
class Change:
    """Absolute and relative change of one metric."""

    amount: Decimal
    percentage: Decimal

    def to_dict(self) -> dict[str, str]:
        return {"amount": str(self.amount), "percentage": str(self.percentage)}


@dataclass(frozen=True)
class ComparisonDeltas:
    """Period-over-period deltas between two statements.

    Margin changes are point differences, not percentages of percentages.
    """

    revenue_change: Change
    gross_profit_change: Change
    net_income_change: Change
    gross_margin_change: Decimal
    net_margin_change: Decimal

    def to_dict(self) -> dict[str, object]:
        return {
            "revenue_change": self.revenue_change.to_dict(),
            "gross_profit_change": self.gross_profit_change.to_dict(),
            "net_income_change": self.net_income_change.to_dict(),
            "margin_change": {
                "gross": str(self.gross_margin_change),
                "net": str(self.net_margin_change),
            },
        }


@dataclass(frozen=True)
class PeriodComparison:
    """Two statements and the deltas between them."""

    current: PeriodStatement
    previous: PeriodStatement
    deltas: ComparisonDeltas
