"""Command-line interface for the P&L engine."""

import argparse
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pos_pnl import __version__
from pos_pnl.config import Config, ConfigError, load_config
from pos_pnl.models.report import PeriodComparison, PeriodStatement, PnLBreakdown
from pos_pnl.output.csv_exporter import CSVExporter
from pos_pnl.output.excel_writer import ExcelWriter
from pos_pnl.processing.engine import PnLEngine
from pos_pnl.stores.base import StoreUnavailable
from pos_pnl.stores.sqlite_store import open_stores
from pos_pnl.utils.decimal_utils import format_currency, format_percentage, sum_amounts
from pos_pnl.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="pos-pnl",
        description="Profit & Loss reports from the liquor store POS database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s pnl 2024-01-01 2024-01-31 --compare-previous
  %(prog)s breakdown 2024-01-01 2024-12-31 -o reports/2024.xlsx --csv
  %(prog)s products 2024-01-01 2024-03-31 --limit 20
  %(prog)s add-expense rent 2500 "January rent" --date 2024-01-01 --recurring
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=None,
        help="POS SQLite database (overrides database.path)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    pnl = subparsers.add_parser("pnl", help="P&L statement for a date range")
    _add_range(pnl)
    pnl.add_argument(
        "--compare-previous",
        action="store_true",
        help="Also compare with the equal-length range just before START",
    )

    breakdown = subparsers.add_parser("breakdown", help="Daily through yearly P&L for a date range")
    _add_range(breakdown)
    breakdown.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Export to this path (.xlsx workbook or .csv directory marker)",
    )
    breakdown.add_argument(
        "--csv",
        action="store_true",
        help="Also export CSV files (when using .xlsx output)",
    )
    breakdown.add_argument(
        "--xlsx",
        action="store_true",
        help="Also export Excel workbook (when using CSV output)",
    )

    categories = subparsers.add_parser("categories", help="Category performance ranked by revenue")
    _add_range(categories)

    products = subparsers.add_parser("products", help="Top products ranked by revenue")
    _add_range(products)
    products.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of products to show (default: reports.product_limit)",
    )

    expenses = subparsers.add_parser("expenses", help="List operating expenses in a date range")
    _add_range(expenses)

    add_expense = subparsers.add_parser("add-expense", help="Record an operating expense")
    add_expense.add_argument("category", help="labor, rent, utilities, marketing, supplies, insurance or other")
    add_expense.add_argument("amount", help="Amount spent")
    add_expense.add_argument("description", help="What the expense was for")
    add_expense.add_argument(
        "--date",
        default=None,
        help="Expense date (YYYY-MM-DD, default: today)",
    )
    add_expense.add_argument("--subcategory", default=None, help="Finer classification, e.g. electric")
    add_expense.add_argument("--recurring", action="store_true", help="Mark as a recurring expense")
    add_expense.add_argument("--created-by", default="system", help="Who entered the expense")

    compare = subparsers.add_parser("compare", help="Compare two date ranges")
    compare.add_argument("current_start", help="Current range start (YYYY-MM-DD)")
    compare.add_argument("current_end", help="Current range end (YYYY-MM-DD)")
    compare.add_argument("previous_start", help="Previous range start (YYYY-MM-DD)")
    compare.add_argument("previous_end", help="Previous range end (YYYY-MM-DD)")

    return parser


def _add_range(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("start", help="Start date (YYYY-MM-DD)")
    subparser.add_argument("end", help="End date (YYYY-MM-DD)")


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


class Formatter:
    """Money and percentage formatting per the output settings."""

    def __init__(self, config: Config):
        self.symbol = config.output.currency_symbol
        self.places = config.output.decimal_places

    def money(self, value: Decimal) -> str:
        return format_currency(value, self.places, self.symbol)

    def pct(self, value: Decimal) -> str:
        return format_percentage(value, self.places)


def statement_table(statement: PeriodStatement, fmt: Formatter, title: Optional[str] = None) -> Table:
    """Render one statement as a two-column P&L table."""
    expenses = statement.operating_expenses
    table = Table(title=title or f"P&L {statement.period_display}")
    table.add_column("Line")
    table.add_column("Amount", justify="right")

    table.add_row("Revenue", fmt.money(statement.revenue))
    table.add_row("Cost of Goods Sold", fmt.money(statement.cost_of_goods_sold))
    table.add_row("[bold]Gross Profit[/bold]", fmt.money(statement.gross_profit))
    table.add_row("Gross Margin", fmt.pct(statement.gross_margin))
    table.add_row("  Labor", fmt.money(expenses.labor))
    table.add_row("  Rent", fmt.money(expenses.rent))
    table.add_row("  Utilities", fmt.money(expenses.utilities))
    table.add_row("  Other", fmt.money(expenses.other))
    table.add_row("Operating Expenses", fmt.money(expenses.total))
    table.add_row("[bold]Net Income[/bold]", fmt.money(statement.net_income))
    table.add_row("Net Margin", fmt.pct(statement.net_margin))
    table.add_row("Transactions", str(statement.transactions))
    table.add_row("Units Sold", str(statement.units_sold))
    table.add_row("Avg Transaction", fmt.money(statement.average_transaction_value))
    return table


def comparison_table(comparison: PeriodComparison, fmt: Formatter) -> Table:
    """Render a period comparison with change columns."""
    current, previous, deltas = comparison.current, comparison.previous, comparison.deltas
    table = Table(title=f"{current.period_display} vs {previous.period_display}")
    table.add_column("Metric")
    table.add_column("Current", justify="right")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Change %", justify="right")

    for label, cur, prev, change in (
        ("Revenue", current.revenue, previous.revenue, deltas.revenue_change),
        ("Gross Profit", current.gross_profit, previous.gross_profit, deltas.gross_profit_change),
        ("Net Income", current.net_income, previous.net_income, deltas.net_income_change),
    ):
        table.add_row(label, fmt.money(cur), fmt.money(prev), fmt.money(change.amount), fmt.pct(change.percentage))

    table.add_row(
        "Gross Margin",
        fmt.pct(current.gross_margin),
        fmt.pct(previous.gross_margin),
        f"{deltas.gross_margin_change:+.{fmt.places}f} pts",
        "",
    )
    table.add_row(
        "Net Margin",
        fmt.pct(current.net_margin),
        fmt.pct(previous.net_margin),
        f"{deltas.net_margin_change:+.{fmt.places}f} pts",
        "",
    )
    return table


def warn_skipped(statement: PeriodStatement) -> None:
    """Tell the user when malformed transactions were left out of COGS."""
    if statement.skipped_transactions:
        ids = ", ".join(str(i) for i in statement.skipped_transactions[:10])
        more = len(statement.skipped_transactions) - 10
        suffix = f" and {more} more" if more > 0 else ""
        console.print(
            f"[yellow]Warning: {len(statement.skipped_transactions)} transaction(s) with "
            f"malformed line items excluded from COGS: {ids}{suffix}[/yellow]"
        )


def cmd_pnl(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Print the statement for a range, optionally against the previous range."""
    fmt = Formatter(config)
    if args.compare_previous:
        comparison = engine.compare_with_previous(args.start, args.end)
        console.print(statement_table(comparison.current, fmt))
        console.print(comparison_table(comparison, fmt))
        warn_skipped(comparison.current)
    else:
        statement = engine.calculate_pnl(args.start, args.end)
        console.print(statement_table(statement, fmt))
        warn_skipped(statement)
    return 0


def breakdown_table(breakdown: PnLBreakdown, fmt: Formatter) -> Table:
    """Render the monthly rows of a breakdown plus the whole-range total."""
    table = Table(title=f"Monthly P&L {breakdown.custom.period_display}")
    for column in ("Month", "Revenue", "COGS", "Gross Profit", "Expenses", "Net Income", "Net Margin"):
        table.add_column(column, justify="left" if column == "Month" else "right")

    rows = [(s.start_date.strftime("%Y-%m"), s) for s in breakdown.monthly]
    rows.append(("[bold]Total[/bold]", breakdown.custom))
    for label, s in rows:
        table.add_row(
            label,
            fmt.money(s.revenue),
            fmt.money(s.cost_of_goods_sold),
            fmt.money(s.gross_profit),
            fmt.money(s.operating_expenses.total),
            fmt.money(s.net_income),
            fmt.pct(s.net_margin),
        )
    return table


def export_breakdown(args: argparse.Namespace, engine: PnLEngine, config: Config, breakdown: PnLBreakdown) -> None:
    """Write the breakdown and rankings to the requested output files."""
    output: Path = args.output
    if not output.suffix:
        output = output.with_suffix(f".{config.output.format}")
    is_csv_output = output.suffix.lower() == ".csv"

    with console.status("[bold green]Ranking categories and products..."):
        categories = engine.get_category_performance(args.start, args.end)
        products = engine.get_product_performance(args.start, args.end)

    write_csv = is_csv_output or args.csv
    write_xlsx = not is_csv_output or args.xlsx

    if write_csv:
        CSVExporter(config.output).export(output.parent, breakdown, categories, products)
        console.print(f"[green]CSV files written to {output.parent}[/green]")
    if write_xlsx:
        xlsx_path = output.with_suffix(".xlsx")
        ExcelWriter(config.output).write(xlsx_path, breakdown, categories, products)
        console.print(f"[green]Excel file written to {xlsx_path}[/green]")


def cmd_breakdown(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Print the monthly breakdown and optionally export every granularity."""
    with console.status("[bold green]Calculating breakdown..."):
        breakdown = engine.generate_pnl_breakdown(args.start, args.end)

    console.print(breakdown_table(breakdown, Formatter(config)))
    warn_skipped(breakdown.custom)

    if args.output is not None:
        export_breakdown(args, engine, config, breakdown)
    return 0


def cmd_categories(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Print categories ranked by revenue."""
    fmt = Formatter(config)
    ranking = engine.get_category_performance(args.start, args.end)
    if not ranking:
        console.print("[yellow]No sales in range.[/yellow]")
        return 0

    table = Table(title="Category Performance")
    for column in ("Category", "Revenue", "COGS", "Gross Profit", "Margin", "Units", "Transactions"):
        table.add_column(column, justify="left" if column == "Category" else "right")
    for perf in ranking:
        table.add_row(
            escape(perf.category),
            fmt.money(perf.revenue),
            fmt.money(perf.cost_of_goods_sold),
            fmt.money(perf.gross_profit),
            fmt.pct(perf.gross_margin),
            str(perf.units_sold),
            str(perf.transactions),
        )
    console.print(table)
    return 0


def cmd_products(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Print the top products ranked by revenue."""
    fmt = Formatter(config)
    ranking = engine.get_product_performance(args.start, args.end, args.limit)
    if not ranking:
        console.print("[yellow]No sales in range.[/yellow]")
        return 0

    table = Table(title=f"Top {len(ranking)} Products")
    for column in ("UPC", "Description", "Category", "Revenue", "Gross Profit", "Margin", "Units", "Avg Price", "Turnover"):
        table.add_column(column, justify="left" if column in ("UPC", "Description", "Category") else "right")
    for perf in ranking:
        table.add_row(
            perf.upc,
            escape(perf.description),
            escape(perf.category),
            fmt.money(perf.revenue),
            fmt.money(perf.gross_profit),
            fmt.pct(perf.gross_margin),
            str(perf.units_sold),
            fmt.money(perf.average_selling_price),
            f"{perf.inventory_turnover:.2f}",
        )
    console.print(table)
    return 0


def cmd_expenses(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """List expenses in a range, newest first."""
    fmt = Formatter(config)
    entries = engine.get_expenses(args.start, args.end)
    if not entries:
        console.print("[yellow]No expenses in range.[/yellow]")
        return 0

    table = Table(title="Operating Expenses")
    for column in ("Date", "Category", "Subcategory", "Amount", "Description", "Recurring"):
        table.add_column(column, justify="right" if column == "Amount" else "left")
    for entry in entries:
        table.add_row(
            entry.expense_date.isoformat(),
            entry.category.value,
            entry.subcategory or "",
            fmt.money(entry.amount),
            escape(entry.description),
            "yes" if entry.recurring else "",
        )
    console.print(table)
    console.print(f"Total: {fmt.money(sum_amounts([e.amount for e in entries]))}")
    return 0


def cmd_add_expense(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Record one expense."""
    entry = engine.add_expense(
        {
            "category": args.category,
            "amount": args.amount,
            "description": args.description,
            "date": args.date or date.today().isoformat(),
            "subcategory": args.subcategory,
            "recurring": args.recurring,
            "created_by": args.created_by,
        }
    )
    console.print(
        f"[green]Recorded {entry.category.value} expense #{entry.id}: "
        f"{Formatter(config).money(entry.amount)} on {entry.expense_date.isoformat()}[/green]"
    )
    return 0


def cmd_compare(args: argparse.Namespace, engine: PnLEngine, config: Config) -> int:
    """Compare two explicit ranges."""
    comparison = engine.compare_periods(
        (args.current_start, args.current_end),
        (args.previous_start, args.previous_end),
    )
    console.print(comparison_table(comparison, Formatter(config)))
    warn_skipped(comparison.current)
    return 0


COMMANDS: dict[str, Callable[[argparse.Namespace, PnLEngine, Config], int]] = {
    "pnl": cmd_pnl,
    "breakdown": cmd_breakdown,
    "categories": cmd_categories,
    "products": cmd_products,
    "expenses": cmd_expenses,
    "add-expense": cmd_add_expense,
    "compare": cmd_compare,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = load_config(settings_path=args.config)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        return 1

    # Set up logging
    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file, console_output=args.verbose > 0)

    if args.database is not None:
        config.database.path = str(args.database)

    try:
        stores = open_stores(config.database.path, config.database.catalog_path)
        engine = PnLEngine.from_stores(stores, product_limit=config.reports.product_limit)
        return COMMANDS[args.command](args, engine, config)
    except StoreUnavailable as e:
        console.print(f"[red]Database error: {escape(str(e))}[/red]")
        logger.error(f"Store unavailable during '{args.command}': {e}")
        return 1
    except ValueError as e:
        # InvalidDateRange, InvalidExpense, and bad --limit values
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
