"""Category and product performance rankings."""

from datetime import date

from pos_pnl.models.report import CategoryPerformance, ProductPerformance
from pos_pnl.processing.aggregators import CostLookup, scan_line_items
from pos_pnl.stores.base import InventoryStore, ProductCatalog, TransactionStore
from pos_pnl.utils.date_utils import parse_date_range
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"
UNKNOWN_PRODUCT = "Unknown Product"
DEFAULT_PRODUCT_LIMIT = 50


class PerformanceAggregator:
    """Groups line items by category or product and ranks them by revenue.

    Revenue here is line-level (unit price x quantity), not the
    transaction total, so tax is excluded.
    """

    def __init__(
        self,
        transactions: TransactionStore,
        inventory: InventoryStore,
        catalog: ProductCatalog,
    ):
        """Initialize the aggregator.

        Args:
            transactions: Source of completed sales.
            inventory: Source of current unit costs and stock levels.
            catalog: Source of product categories.
        """
        self.transactions = transactions
        self.inventory = inventory
        self.catalog = catalog

    def category_performance(self, start: str | date, end: str | date) -> list[CategoryPerformance]:
        """Per-category revenue, COGS, units, and transactions, highest revenue first.

        Items whose UPC is not in the catalog (payouts, open-price lines)
        are left out. Catalog products with a blank category are grouped
        under "Uncategorized". A transaction counts once per category it
        contains.

        Raises:
            InvalidDateRange: If either date is malformed.
            StoreUnavailable: If a store cannot be read.
        """
        start_date, end_date = parse_date_range(start, end)
        scan = scan_line_items(self.transactions.transactions_between(start_date, end_date))
        costs = CostLookup(self.inventory)
        category_names: dict[str, str | None] = {}
        unlisted = 0
        by_category: dict[str, CategoryPerformance] = {}

        for txn, items in scan.parsed:
            seen: set[str] = set()
            for item in items:
                if item.upc not in category_names:
                    category = self.catalog.category_for(item.upc)
                    category_names[item.upc] = None if category is None else category or UNCATEGORIZED
                name = category_names[item.upc]
                if name is None:
                    unlisted += 1
                    continue

                perf = by_category.setdefault(name, CategoryPerformance(category=name))
                perf.revenue += item.revenue
                perf.cost_of_goods_sold += costs.unit_cost(item.upc) * item.quantity
                perf.units_sold += item.quantity
                if name not in seen:
                    perf.transactions += 1
                    seen.add(name)

        logger.debug(
            f"Category performance {start_date}..{end_date}: {len(by_category)} categories, "
            f"{unlisted} items not in catalog"
        )
        return sorted(by_category.values(), key=lambda p: p.revenue, reverse=True)

    def product_performance(
        self,
        start: str | date,
        end: str | date,
        limit: int = DEFAULT_PRODUCT_LIMIT,
    ) -> list[ProductPerformance]:
        """Top products by revenue.

        Args:
            start: First day (inclusive).
            end: Last day (inclusive).
            limit: Maximum number of products returned.

        Returns:
            Products sorted by revenue descending, truncated to ``limit``.

        Raises:
            InvalidDateRange: If either date is malformed.
            StoreUnavailable: If a store cannot be read.
            ValueError: If ``limit`` is negative.
        """
        if limit < 0:
            raise ValueError(f"limit must not be negative: {limit}")

        start_date, end_date = parse_date_range(start, end)
        scan = scan_line_items(self.transactions.transactions_between(start_date, end_date))
        costs = CostLookup(self.inventory)
        by_product: dict[str, ProductPerformance] = {}

        for _, items in scan.parsed:
            for item in items:
                perf = by_product.get(item.upc)
                if perf is None:
                    perf = ProductPerformance(
                        upc=item.upc,
                        description=item.description or UNKNOWN_PRODUCT,
                        category=self.catalog.category_for(item.upc) or "",
                    )
                    by_product[item.upc] = perf
                perf.revenue += item.revenue
                perf.cost_of_goods_sold += costs.unit_cost(item.upc) * item.quantity
                perf.units_sold += item.quantity

        ranked = sorted(by_product.values(), key=lambda p: p.revenue, reverse=True)[:limit]
        # Stock averages only for products that made the cut
        for perf in ranked:
            perf.average_on_hand = self.inventory.average_on_hand(perf.upc)
        return ranked
