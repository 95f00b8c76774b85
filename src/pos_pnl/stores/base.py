"""Abstract store interfaces consumed by the P&L engine.

The engine never opens a database itself; concrete stores are passed to
its constructor. Every store method that touches a backend must raise
``StoreUnavailable`` on I/O failure instead of leaking backend-specific
exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from pos_pnl.models.expense import ExpenseEntry
from pos_pnl.models.inventory import CostRecord
from pos_pnl.models.transaction import TransactionRecord


class StoreUnavailable(Exception):
    """Raised when a backing store cannot be read or written."""

    def __init__(self, message: str, store: Optional[str] = None):
        """Initialize StoreUnavailable.

        Args:
            message: Error message.
            store: Name of the store that failed.
        """
        self.store = store
        super().__init__(message)


class TransactionStore(ABC):
    """Read access to completed sales."""

    @abstractmethod
    def transactions_between(self, start: date, end: date) -> list[TransactionRecord]:
        """Return transactions whose sale date is within [start, end].

        Args:
            start: First day (inclusive).
            end: Last day (inclusive).

        Returns:
            Transactions ordered oldest first. Empty if ``start > end``.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        pass


class InventoryStore(ABC):
    """Read access to current unit costs and stock levels."""

    @abstractmethod
    def cost_record(self, upc: str) -> Optional[CostRecord]:
        """Return the current inventory record for a product, if any.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        pass

    @abstractmethod
    def average_on_hand(self, upc: str) -> Optional[Decimal]:
        """Return the average on-hand quantity recorded for a product.

        Returns:
            Average quantity, or None if the product has no inventory rows.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        pass


class ProductCatalog(ABC):
    """Read access to product categories."""

    @abstractmethod
    def category_for(self, upc: str) -> Optional[str]:
        """Return the catalog category name for a product.

        Returns:
            Category name ("" when the catalog row has none), or None if
            the product is not in the catalog.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        pass


class ExpenseStore(ABC):
    """Read/write access to operating expenses."""

    @abstractmethod
    def add(self, entry: ExpenseEntry) -> ExpenseEntry:
        """Insert an expense entry.

        Returns:
            The stored entry with its id and created_at assigned.

        Raises:
            StoreUnavailable: If the store cannot be written.
        """
        pass

    @abstractmethod
    def expenses_between(self, start: date, end: date) -> list[ExpenseEntry]:
        """Return expenses dated within [start, end], newest date first.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        pass


@dataclass
class StoreSet:
    """The four stores the engine reads from, opened together."""

    transactions: TransactionStore
    inventory: InventoryStore
    catalog: ProductCatalog
    expenses: ExpenseStore
