"""P&L engine facade: the operations exposed to the reporting layer."""

from datetime import date
from typing import Optional

from pos_pnl.models.expense import ExpenseEntry
from pos_pnl.models.report import (
    CategoryPerformance,
    ComparisonDeltas,
    PeriodComparison,
    PeriodStatement,
    PnLBreakdown,
    ProductPerformance,
)
from pos_pnl.processing.aggregators import ExpenseAggregator, RevenueCogsAggregator
from pos_pnl.processing.breakdown import BreakdownOrchestrator
from pos_pnl.processing.comparator import compare
from pos_pnl.processing.performance import DEFAULT_PRODUCT_LIMIT, PerformanceAggregator
from pos_pnl.processing.pnl_calculator import PnLCalculator
from pos_pnl.stores.base import ExpenseStore, InventoryStore, ProductCatalog, StoreSet, TransactionStore
from pos_pnl.utils.date_utils import parse_date_range, previous_period
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)


class PnLEngine:
    """Computes P&L statements, breakdowns, rankings, and comparisons.

    The engine only reads transactions and inventory; recording an
    expense is its single write. Nothing is cached between calls.
    """

    def __init__(
        self,
        transactions: TransactionStore,
        inventory: InventoryStore,
        catalog: ProductCatalog,
        expenses: ExpenseStore,
        product_limit: int = DEFAULT_PRODUCT_LIMIT,
    ):
        """Initialize the engine.

        Args:
            transactions: Completed sales.
            inventory: Current unit costs and stock.
            catalog: Product categories.
            expenses: Operating expenses.
            product_limit: Default size of the product ranking.
        """
        self.expense_store = expenses
        self.product_limit = product_limit

        self.calculator = PnLCalculator(
            RevenueCogsAggregator(transactions, inventory),
            ExpenseAggregator(expenses),
        )
        self.breakdown = BreakdownOrchestrator(self.calculator)
        self.performance = PerformanceAggregator(transactions, inventory, catalog)

    @classmethod
    def from_stores(cls, stores: StoreSet, product_limit: int = DEFAULT_PRODUCT_LIMIT) -> "PnLEngine":
        """Create an engine over an opened StoreSet."""
        return cls(
            transactions=stores.transactions,
            inventory=stores.inventory,
            catalog=stores.catalog,
            expenses=stores.expenses,
            product_limit=product_limit,
        )

    def calculate_pnl(self, start: str | date, end: str | date) -> PeriodStatement:
        """P&L statement for [start, end]."""
        return self.calculator.calculate(start, end)

    def generate_pnl_breakdown(self, start: str | date, end: str | date) -> PnLBreakdown:
        """Statements for [start, end] at every granularity plus the whole range."""
        return self.breakdown.generate_breakdown(start, end)

    def get_category_performance(self, start: str | date, end: str | date) -> list[CategoryPerformance]:
        """Categories ranked by revenue."""
        return self.performance.category_performance(start, end)

    def get_product_performance(
        self,
        start: str | date,
        end: str | date,
        limit: Optional[int] = None,
    ) -> list[ProductPerformance]:
        """Top products by revenue (``limit`` defaults to the engine's product_limit)."""
        return self.performance.product_performance(
            start, end, self.product_limit if limit is None else limit
        )

    def add_expense(self, entry: ExpenseEntry | dict[str, object]) -> ExpenseEntry:
        """Record an operating expense.

        Args:
            entry: ExpenseEntry, or a dict with category, amount,
                description, date/expense_date, and optional subcategory,
                recurring, created_by.

        Returns:
            The stored entry.

        Raises:
            InvalidExpense: If the entry fails validation.
            StoreUnavailable: If the expense store cannot be written.
        """
        if isinstance(entry, dict):
            entry = ExpenseEntry.from_dict(entry)
        return self.expense_store.add(entry)

    def get_expenses(self, start: str | date, end: str | date) -> list[ExpenseEntry]:
        """Expenses dated within [start, end], newest first."""
        start_date, end_date = parse_date_range(start, end)
        return self.expense_store.expenses_between(start_date, end_date)

    def compare_performance(self, current: PeriodStatement, previous: PeriodStatement) -> ComparisonDeltas:
        """Deltas between two already computed statements."""
        return compare(current, previous)

    def compare_periods(
        self,
        current: tuple[str | date, str | date],
        previous: tuple[str | date, str | date],
    ) -> PeriodComparison:
        """Calculate two ranges and compare them.

        Args:
            current: (start, end) of the reported range.
            previous: (start, end) of the comparison range.

        Returns:
            PeriodComparison with both statements and their deltas.
        """
        current_statement = self.calculate_pnl(*current)
        previous_statement = self.calculate_pnl(*previous)
        return PeriodComparison(
            current=current_statement,
            previous=previous_statement,
            deltas=compare(current_statement, previous_statement),
        )

    def compare_with_previous(self, start: str | date, end: str | date) -> PeriodComparison:
        """Compare [start, end] with the equal-length range just before it."""
        start_date, end_date = parse_date_range(start, end)
        previous_start, previous_end = previous_period(start_date, end_date)
        logger.debug(f"Comparing {start_date}..{end_date} with {previous_start}..{previous_end}")
        return self.compare_periods((start_date, end_date), (previous_start, previous_end))
