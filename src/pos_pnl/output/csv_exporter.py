"""CSV exporter for P&L breakdowns and performance rankings."""

import csv
from pathlib import Path
from typing import Optional

from pos_pnl.config import OutputConfig
from pos_pnl.models.report import CategoryPerformance, PeriodStatement, PnLBreakdown, ProductPerformance
from pos_pnl.utils.decimal_utils import round_money
from pos_pnl.utils.logging_config import get_logger
from pos_pnl.utils.sanitize import sanitize_cell

logger = get_logger(__name__)

STATEMENT_HEADERS = [
    "Period Start",
    "Period End",
    "Revenue",
    "COGS",
    "Gross Profit",
    "Gross Margin %",
    "Labor",
    "Rent",
    "Utilities",
    "Other Expenses",
    "Total Expenses",
    "Net Income",
    "Net Margin %",
    "Transactions",
    "Units Sold",
    "Avg Transaction",
    "Skipped Transactions",
]

CATEGORY_HEADERS = [
    "Category", "Revenue", "COGS", "Gross Profit", "Gross Margin %", "Units Sold", "Transactions",
]

PRODUCT_HEADERS = [
    "UPC", "Description", "Category", "Revenue", "COGS", "Gross Profit", "Gross Margin %",
    "Units Sold", "Avg Selling Price", "Inventory Turnover",
]


def statement_row(statement: PeriodStatement, decimal_places: int = 2) -> list[object]:
    """Flatten a statement into one export row (shared with the Excel writer)."""
    expenses = statement.operating_expenses

    def money(value):
        return round_money(value, decimal_places)

    return [
        statement.start_date.isoformat(),
        statement.end_date.isoformat(),
        money(statement.revenue),
        money(statement.cost_of_goods_sold),
        money(statement.gross_profit),
        money(statement.gross_margin),
        money(expenses.labor),
        money(expenses.rent),
        money(expenses.utilities),
        money(expenses.other),
        money(expenses.total),
        money(statement.net_income),
        money(statement.net_margin),
        statement.transactions,
        statement.units_sold,
        money(statement.average_transaction_value),
        len(statement.skipped_transactions),
    ]


def category_row(perf: CategoryPerformance, decimal_places: int = 2) -> list[object]:
    return [
        sanitize_cell(perf.category),
        round_money(perf.revenue, decimal_places),
        round_money(perf.cost_of_goods_sold, decimal_places),
        round_money(perf.gross_profit, decimal_places),
        round_money(perf.gross_margin, decimal_places),
        perf.units_sold,
        perf.transactions,
    ]


def product_row(perf: ProductPerformance, decimal_places: int = 2) -> list[object]:
    return [
        sanitize_cell(perf.upc),
        sanitize_cell(perf.description),
        sanitize_cell(perf.category),
        round_money(perf.revenue, decimal_places),
        round_money(perf.cost_of_goods_sold, decimal_places),
        round_money(perf.gross_profit, decimal_places),
        round_money(perf.gross_margin, decimal_places),
        perf.units_sold,
        round_money(perf.average_selling_price, decimal_places),
        round_money(perf.inventory_turnover, decimal_places),
    ]


class CSVExporter:
    """Exports P&L reports to CSV files for spreadsheet import.

    Creates in the output directory:
    - pnl_daily.csv, pnl_weekly.csv, pnl_monthly.csv, pnl_quarterly.csv,
      pnl_yearly.csv
    - pnl_custom.csv (whole range)
    - category_performance.csv and product_performance.csv, when given
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize CSV exporter.

        Args:
            output_config: Output settings (decimal places).
        """
        self.output_config = output_config or OutputConfig()

    def export(
        self,
        output_dir: Path,
        breakdown: PnLBreakdown,
        categories: Optional[list[CategoryPerformance]] = None,
        products: Optional[list[ProductPerformance]] = None,
    ) -> list[Path]:
        """Export a breakdown (and optional rankings) to CSV files.

        Args:
            output_dir: Directory for the CSV files (created if missing).
            breakdown: Breakdown to export.
            categories: Optional category ranking.
            products: Optional product ranking.

        Returns:
            List of paths to created CSV files.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        places = self.output_config.decimal_places
        created_files: list[Path] = []

        for granularity, statements in breakdown.by_granularity().items():
            path = output_dir / f"pnl_{granularity.value}.csv"
            self._write(path, STATEMENT_HEADERS, [statement_row(s, places) for s in statements])
            created_files.append(path)

        custom_path = output_dir / "pnl_custom.csv"
        self._write(custom_path, STATEMENT_HEADERS, [statement_row(breakdown.custom, places)])
        created_files.append(custom_path)

        if categories is not None:
            path = output_dir / "category_performance.csv"
            self._write(path, CATEGORY_HEADERS, [category_row(c, places) for c in categories])
            created_files.append(path)

        if products is not None:
            path = output_dir / "product_performance.csv"
            self._write(path, PRODUCT_HEADERS, [product_row(p, places) for p in products])
            created_files.append(path)

        logger.info(f"Exported {len(created_files)} CSV files to {output_dir}")
        return created_files

    @staticmethod
    def _write(path: Path, headers: list[str], rows: list[list[object]]) -> None:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            writer.writerows(rows)
