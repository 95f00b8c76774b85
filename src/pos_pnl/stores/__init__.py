"""Store interfaces and implementations (in-memory and SQLite)."""

from pos_pnl.stores.base import (
    ExpenseStore,
    InventoryStore,
    ProductCatalog,
    StoreSet,
    StoreUnavailable,
    TransactionStore,
)
from pos_pnl.stores.memory import (
    InMemoryExpenseStore,
    InMemoryInventoryStore,
    InMemoryProductCatalog,
    InMemoryTransactionStore,
)

__all__ = [
    "ExpenseStore",
    "InMemoryExpenseStore",
    "InMemoryInventoryStore",
    "InMemoryProductCatalog",
    "InMemoryTransactionStore",
    "InventoryStore",
    "ProductCatalog",
    "StoreSet",
    "StoreUnavailable",
    "TransactionStore",
]
