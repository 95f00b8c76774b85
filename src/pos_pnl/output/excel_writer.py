"""Excel workbook writer for P&L breakdowns."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from pos_pnl.config import OutputConfig
from pos_pnl.models.report import CategoryPerformance, PeriodStatement, PnLBreakdown, ProductPerformance
from pos_pnl.output.csv_exporter import (
    CATEGORY_HEADERS,
    PRODUCT_HEADERS,
    STATEMENT_HEADERS,
    category_row,
    product_row,
    statement_row,
)
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)

# Statement columns (1-based) holding percentages rather than money
STATEMENT_PERCENT_COLUMNS = {6, 13}
STATEMENT_COUNT_COLUMNS = {14, 15, 17}

CATEGORY_PERCENT_COLUMNS = {5}
CATEGORY_COUNT_COLUMNS = {6, 7}

PRODUCT_PERCENT_COLUMNS = {7}
PRODUCT_COUNT_COLUMNS = {8}
PRODUCT_RATIO_COLUMNS = {10}


class ExcelWriter:
    """Writes a P&L breakdown to a multi-sheet Excel workbook.

    Generates sheets:
    - Summary (whole range, one statement laid out vertically)
    - Daily, Weekly, Monthly, Quarterly, Yearly
    - Categories and Products, when rankings are given
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize Excel writer.

        Args:
            output_config: Output settings (currency symbol, decimal places).
        """
        self.output_config = output_config or OutputConfig()

        # Style definitions
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        self.money_negative = Font(color="CC0000")  # Dark red
        self.centered = Alignment(horizontal="center")
        self.thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )

    def write(
        self,
        output_path: Path,
        breakdown: PnLBreakdown,
        categories: Optional[list[CategoryPerformance]] = None,
        products: Optional[list[ProductPerformance]] = None,
    ) -> None:
        """Write a breakdown (and optional rankings) to an Excel workbook.

        Args:
            output_path: Path for output file.
            breakdown: Breakdown to write.
            categories: Optional category ranking.
            products: Optional product ranking.
        """
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, breakdown.custom)
        places = self.output_config.decimal_places
        for granularity, statements in breakdown.by_granularity().items():
            self._create_table(
                wb,
                granularity.value.title(),
                STATEMENT_HEADERS,
                [statement_row(s, places) for s in statements],
                percent_columns=STATEMENT_PERCENT_COLUMNS,
                count_columns=STATEMENT_COUNT_COLUMNS,
            )

        if categories is not None:
            self._create_table(
                wb,
                "Categories",
                CATEGORY_HEADERS,
                [category_row(c, places) for c in categories],
                percent_columns=CATEGORY_PERCENT_COLUMNS,
                count_columns=CATEGORY_COUNT_COLUMNS,
            )

        if products is not None:
            self._create_table(
                wb,
                "Products",
                PRODUCT_HEADERS,
                [product_row(p, places) for p in products],
                percent_columns=PRODUCT_PERCENT_COLUMNS,
                count_columns=PRODUCT_COUNT_COLUMNS | PRODUCT_RATIO_COLUMNS,
                text_columns={1, 2, 3},
            )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")

    def _create_summary(self, wb: Workbook, statement: PeriodStatement) -> None:
        """Create the Summary sheet: one statement as a vertical P&L."""
        ws = wb.create_sheet("Summary")
        expenses = statement.operating_expenses

        ws.cell(row=1, column=1, value="PROFIT & LOSS")
        ws.cell(row=1, column=1).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value="Period")
        ws.cell(row=2, column=2, value=statement.period_display)

        lines: list[tuple[str, Decimal, str]] = [
            ("Revenue", statement.revenue, "money"),
            ("Cost of Goods Sold", statement.cost_of_goods_sold, "money"),
            ("Gross Profit", statement.gross_profit, "money"),
            ("Gross Margin", statement.gross_margin, "percent"),
            ("Labor", expenses.labor, "money"),
            ("Rent", expenses.rent, "money"),
            ("Utilities", expenses.utilities, "money"),
            ("Other Expenses", expenses.other, "money"),
            ("Total Operating Expenses", expenses.total, "money"),
            ("Net Income", statement.net_income, "money"),
            ("Net Margin", statement.net_margin, "percent"),
            ("Transactions", Decimal(statement.transactions), "count"),
            ("Units Sold", Decimal(statement.units_sold), "count"),
            ("Average Transaction", statement.average_transaction_value, "money"),
        ]

        row = 4
        for label, value, kind in lines:
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=float(value))
            if kind == "money":
                cell.number_format = self._money_format()
                if value < 0:
                    cell.font = self.money_negative
            elif kind == "percent":
                cell.number_format = self._percent_format()
            if label in ("Gross Profit", "Net Income"):
                ws.cell(row=row, column=1).font = Font(bold=True)
            row += 1

        if statement.skipped_transactions:
            row += 1
            ws.cell(row=row, column=1, value="Transactions skipped (malformed items)")
            ws.cell(row=row, column=2, value=", ".join(str(i) for i in statement.skipped_transactions))
            ws.cell(row=row, column=1).font = self.money_negative

        ws.column_dimensions["A"].width = 34
        ws.column_dimensions["B"].width = 24

    def _create_table(
        self,
        wb: Workbook,
        title: str,
        headers: list[str],
        rows: list[list[object]],
        percent_columns: set[int],
        count_columns: set[int],
        text_columns: Optional[set[int]] = None,
    ) -> Worksheet:
        """Create a sheet with a styled header row and one row per record."""
        ws = wb.create_sheet(title)
        text_columns = text_columns or {1, 2}

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.centered
            cell.border = self.thin_border

        for row_index, values in enumerate(rows, 2):
            for col, value in enumerate(values, 1):
                if isinstance(value, Decimal):
                    value = float(value)
                cell = ws.cell(row=row_index, column=col, value=value)
                if col in text_columns:
                    continue
                if col in percent_columns:
                    cell.number_format = self._percent_format()
                elif col in count_columns:
                    cell.number_format = "0.00" if isinstance(value, float) else "0"
                else:
                    cell.number_format = self._money_format()
                    if isinstance(value, float) and value < 0:
                        cell.font = self.money_negative

        for col in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = max(12, len(headers[col - 1]) + 2)

        # Freeze header row
        ws.freeze_panes = "A2"
        logger.debug(f"Created {title} sheet with {len(rows)} rows")
        return ws

    def _money_format(self) -> str:
        """Get number format for money values.

        Returns:
            Excel number format string.
        """
        symbol = self.output_config.currency_symbol
        places = self.output_config.decimal_places
        number = "#,##0." + "0" * places if places > 0 else "#,##0"
        return f'{symbol}{number}_);[Red]({symbol}{number})'

    @staticmethod
    def _percent_format() -> str:
        """Percent values are stored as numbers like 62.62, not 0.6262."""
        return '0.00"%"'
