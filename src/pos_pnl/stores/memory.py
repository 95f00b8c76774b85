"""In-memory store implementations.

Useful as test doubles and for embedding the engine where records are
already loaded (e.g. from the web deployment's JSON API).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from pos_pnl.models.expense import ExpenseEntry
from pos_pnl.models.inventory import CatalogProduct, CostRecord
from pos_pnl.models.transaction import TransactionRecord
from pos_pnl.stores.base import ExpenseStore, InventoryStore, ProductCatalog, TransactionStore
from pos_pnl.utils.date_utils import InvalidDateRange, is_date_in_range
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)


class InMemoryTransactionStore(TransactionStore):
    """Transactions held in a list."""

    def __init__(self, transactions: Iterable[TransactionRecord] = ()):
        self._transactions: list[TransactionRecord] = list(transactions)

    def append(self, transaction: TransactionRecord) -> None:
        self._transactions.append(transaction)

    def clear(self) -> None:
        """Drop every transaction (mirrors the POS data-reset tool)."""
        self._transactions.clear()

    def transactions_between(self, start: date, end: date) -> list[TransactionRecord]:
        dated: list[tuple[date, TransactionRecord]] = []
        for txn in self._transactions:
            # Unparsable timestamps match no range, as in SQLite where DATE() is NULL
            try:
                sale_date = txn.sale_date
            except InvalidDateRange as e:
                logger.warning(f"Transaction {txn.id} ignored: {e}")
                continue
            if is_date_in_range(sale_date, start, end):
                dated.append((sale_date, txn))
        return [txn for _, txn in sorted(dated, key=lambda pair: (pair[0], pair[1].id))]


class InMemoryInventoryStore(InventoryStore):
    """Inventory records keyed by UPC."""

    def __init__(self, records: Iterable[CostRecord] = ()):
        self._records: dict[str, CostRecord] = {r.upc: r for r in records}

    def put(self, record: CostRecord) -> None:
        """Insert or replace the record for a product (restock, price change)."""
        self._records[record.upc] = record

    def cost_record(self, upc: str) -> Optional[CostRecord]:
        return self._records.get(upc)

    def average_on_hand(self, upc: str) -> Optional[Decimal]:
        # One row per UPC, so the average is the row's quantity
        record = self._records.get(upc)
        if record is None:
            return None
        return Decimal(record.quantity)


class InMemoryProductCatalog(ProductCatalog):
    """Catalog entries keyed by UPC."""

    def __init__(self, products: Iterable[CatalogProduct] = ()):
        self._products: dict[str, CatalogProduct] = {p.upc: p for p in products}

    def category_for(self, upc: str) -> Optional[str]:
        product = self._products.get(upc)
        if product is None:
            return None
        return product.category or ""


class InMemoryExpenseStore(ExpenseStore):
    """Expenses held in a list with sequential ids."""

    def __init__(self, expenses: Iterable[ExpenseEntry] = ()):
        self._expenses: list[ExpenseEntry] = []
        self._next_id = 1
        for entry in expenses:
            self.add(entry)

    def add(self, entry: ExpenseEntry) -> ExpenseEntry:
        entry.id = self._next_id
        if entry.created_at is None:
            entry.created_at = datetime.now()
        self._next_id += 1
        self._expenses.append(entry)
        return entry

    def expenses_between(self, start: date, end: date) -> list[ExpenseEntry]:
        matching = [e for e in self._expenses if is_date_in_range(e.expense_date, start, end)]
        return sorted(matching, key=lambda e: (e.expense_date, e.id or 0), reverse=True)
