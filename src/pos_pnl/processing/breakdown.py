"""Multi-granularity P&L breakdown."""

from datetime import date

from pos_pnl.models.report import Granularity, PeriodStatement, PnLBreakdown
from pos_pnl.processing.aggregators import CostLookup
from pos_pnl.processing.periods import partition
from pos_pnl.processing.pnl_calculator import PnLCalculator
from pos_pnl.utils.date_utils import parse_date_range
from pos_pnl.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class BreakdownOrchestrator:
    """Builds a PnLBreakdown by calculating every sub-period independently.

    Each sub-period re-reads the transaction store, so the cost is
    proportional to (number of periods x transactions in range). Callers
    are expected to keep the range reasonable.
    """

    def __init__(self, calculator: PnLCalculator):
        self.calculator = calculator

    def statements_for(
        self,
        start: date,
        end: date,
        granularity: Granularity,
        costs: CostLookup | None = None,
    ) -> list[PeriodStatement]:
        """Statements for each period of one granularity, in chronological order."""
        return [
            self.calculator.calculate(period_start, period_end, costs)
            for period_start, period_end in partition(start, end, granularity)
        ]

    def generate_breakdown(self, start: str | date, end: str | date) -> PnLBreakdown:
        """Generate statements for [start, end] at every granularity.

        Args:
            start: First day (inclusive).
            end: Last day (inclusive).

        Returns:
            PnLBreakdown; ``custom`` covers the unpartitioned range.

        Raises:
            InvalidDateRange: If either date is malformed.
            StoreUnavailable: If a store cannot be read.
        """
        start_date, end_date = parse_date_range(start, end)
        costs = CostLookup(self.calculator.sales.inventory)

        with LogContext(logger, "P&L breakdown", start=start_date, end=end_date):
            statements = {
                granularity: self.statements_for(start_date, end_date, granularity, costs)
                for granularity in Granularity
            }
            return PnLBreakdown(
                daily=statements[Granularity.DAILY],
                weekly=statements[Granularity.WEEKLY],
                monthly=statements[Granularity.MONTHLY],
                quarterly=statements[Granularity.QUARTERLY],
                yearly=statements[Granularity.YEARLY],
                custom=self.calculator.calculate(start_date, end_date, costs),
            )
