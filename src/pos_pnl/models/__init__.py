"""Data models for transactions, inventory, expenses, and reports."""

from pos_pnl.models.expense import ExpenseCategory, ExpenseEntry, InvalidExpense
from pos_pnl.models.inventory import CatalogProduct, CostRecord
from pos_pnl.models.report import (
    CategoryPerformance,
    Change,
    ComparisonDeltas,
    Granularity,
    OperatingExpenses,
    PeriodComparison,
    PeriodStatement,
    PnLBreakdown,
    ProductPerformance,
)
from pos_pnl.models.transaction import (
    LineItem,
    LineItemScan,
    MalformedLineItems,
    PaymentType,
    TransactionRecord,
    parse_line_items,
)

__all__ = [
    "CatalogProduct",
    "CategoryPerformance",
    "Change",
    "ComparisonDeltas",
    "CostRecord",
    "ExpenseCategory",
    "ExpenseEntry",
    "Granularity",
    "InvalidExpense",
    "LineItem",
    "LineItemScan",
    "MalformedLineItems",
    "OperatingExpenses",
    "PaymentType",
    "PeriodComparison",
    "PeriodStatement",
    "PnLBreakdown",
    "ProductPerformance",
    "TransactionRecord",
    "parse_line_items",
]
