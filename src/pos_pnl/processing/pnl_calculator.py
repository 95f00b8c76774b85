"""P&L statement calculation for a single period."""

from datetime import date
from typing import Optional

from pos_pnl.models.report import PeriodStatement
from pos_pnl.processing.aggregators import CostLookup, ExpenseAggregator, RevenueCogsAggregator
from pos_pnl.utils.date_utils import parse_date_range
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)


class PnLCalculator:
    """Combines sales and expense aggregates into a PeriodStatement.

    Derived figures (gross profit, margins, net income, average
    transaction value) are properties of the statement, so a statement
    can never disagree with its own inputs.
    """

    def __init__(self, sales: RevenueCogsAggregator, expenses: ExpenseAggregator):
        """Initialize the calculator.

        Args:
            sales: Revenue/COGS aggregator.
            expenses: Operating expense aggregator.
        """
        self.sales = sales
        self.expenses = expenses

    def calculate(
        self,
        start: str | date,
        end: str | date,
        costs: Optional[CostLookup] = None,
    ) -> PeriodStatement:
        """Calculate the statement for [start, end].

        Args:
            start: First day (inclusive), date or YYYY-MM-DD.
            end: Last day (inclusive), date or YYYY-MM-DD.
            costs: Cost lookup shared across the periods of one report.

        Returns:
            PeriodStatement for the period. With no transactions, margins
            and the average transaction value are 0.

        Raises:
            InvalidDateRange: If either date is malformed.
            StoreUnavailable: If a store cannot be read.
        """
        start_date, end_date = parse_date_range(start, end)
        totals = self.sales.aggregate(start_date, end_date, costs)
        operating_expenses = self.expenses.aggregate(start_date, end_date)

        statement = PeriodStatement(
            start_date=start_date,
            end_date=end_date,
            revenue=totals.revenue,
            cost_of_goods_sold=totals.cost_of_goods_sold,
            operating_expenses=operating_expenses,
            transactions=totals.transactions,
            units_sold=totals.units_sold,
            skipped_transactions=totals.skipped_transactions,
        )
        if not statement.is_complete:
            logger.warning(
                f"P&L {statement.period_display} excludes line items of "
                f"{len(statement.skipped_transactions)} transaction(s)"
            )
        return statement
