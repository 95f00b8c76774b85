"""Revenue, COGS, and operating expense aggregation over a date range."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pos_pnl.models.expense import ExpenseCategory
from pos_pnl.models.report import OperatingExpenses
from pos_pnl.models.transaction import LineItemScan, MalformedLineItems, TransactionRecord
from pos_pnl.stores.base import ExpenseStore, InventoryStore, TransactionStore
from pos_pnl.utils.decimal_utils import ZERO
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)


def scan_line_items(transactions: Iterable[TransactionRecord]) -> LineItemScan:
    """Decode line items for each transaction, setting aside malformed ones.

    A malformed payload excludes only that transaction; the scan goes on.

    Args:
        transactions: Transactions to decode.

    Returns:
        LineItemScan with parsed pairs and skipped transaction IDs.
    """
    scan = LineItemScan()
    for txn in transactions:
        try:
            scan.parsed.append((txn, txn.line_items()))
        except MalformedLineItems as e:
            logger.warning(f"Skipping line items of transaction {txn.id}: {e}")
            scan.skipped.append(txn.id)
    return scan


class CostLookup:
    """Current unit cost per product, memoized for the length of one report.

    Products without an inventory record cost nothing.
    """

    def __init__(self, inventory: InventoryStore):
        self.inventory = inventory
        self._costs: dict[str, Decimal] = {}

    def unit_cost(self, upc: str) -> Decimal:
        if upc not in self._costs:
            record = self.inventory.cost_record(upc)
            self._costs[upc] = record.cost if record is not None else ZERO
        return self._costs[upc]


@dataclass
class SalesTotals:
    """Sales-side totals for one period.

    Attributes:
        revenue: Sum of transaction totals (every transaction in range).
        cost_of_goods_sold: Sum of quantity x current unit cost.
        transactions: Number of transactions in range.
        units_sold: Sum of line-item quantities.
        skipped_transactions: IDs excluded from COGS and units.
    """

    revenue: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    transactions: int = 0
    units_sold: int = 0
    skipped_transactions: list[int] = field(default_factory=list)


class RevenueCogsAggregator:
    """Sums revenue, COGS, and transaction metrics for a period.

    Revenue comes from each transaction's stored total, so a transaction
    with malformed line items still counts toward revenue and the
    transaction count; it contributes nothing to COGS or units sold.
    """

    def __init__(self, transactions: TransactionStore, inventory: InventoryStore):
        """Initialize the aggregator.

        Args:
            transactions: Source of completed sales.
            inventory: Source of current unit costs.
        """
        self.transactions = transactions
        self.inventory = inventory

    def aggregate(
        self,
        start: date,
        end: date,
        costs: Optional[CostLookup] = None,
    ) -> SalesTotals:
        """Aggregate sales for [start, end].

        Args:
            start: First day (inclusive).
            end: Last day (inclusive).
            costs: Cost lookup to share across several periods of one report.

        Returns:
            SalesTotals for the period.

        Raises:
            StoreUnavailable: If a store cannot be read.
        """
        costs = costs or CostLookup(self.inventory)
        records = self.transactions.transactions_between(start, end)
        scan = scan_line_items(records)

        totals = SalesTotals(
            revenue=sum((txn.total for txn in records), ZERO),
            transactions=len(records),
            skipped_transactions=list(scan.skipped),
        )
        for _, items in scan.parsed:
            for item in items:
                totals.cost_of_goods_sold += costs.unit_cost(item.upc) * item.quantity
                totals.units_sold += item.quantity

        logger.debug(
            f"Sales {start}..{end}: {totals.transactions} transactions, "
            f"revenue={totals.revenue}, cogs={totals.cost_of_goods_sold}, "
            f"skipped={len(totals.skipped_transactions)}"
        )
        return totals


class ExpenseAggregator:
    """Rolls operating expenses for a period into statement buckets."""

    def __init__(self, expenses: ExpenseStore):
        self.expenses = expenses

    def aggregate(self, start: date, end: date) -> OperatingExpenses:
        """Sum expenses dated within [start, end] by rollup bucket.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        rollup = OperatingExpenses()
        for entry in self.expenses.expenses_between(start, end):
            rollup.add(ExpenseCategory.parse(entry.category).rollup_bucket, entry.amount)
        return rollup
