"""Period-over-period comparison of P&L statements."""

from decimal import Decimal

from pos_pnl.models.report import Change, ComparisonDeltas, PeriodStatement
from pos_pnl.utils.decimal_utils import ZERO, percentage


def _change_over_positive(current: Decimal, previous: Decimal) -> Change:
    """Change whose percentage is only defined against a positive base."""
    amount = current - previous
    return Change(amount=amount, percentage=percentage(amount, previous) if previous > 0 else ZERO)


def _change_over_magnitude(current: Decimal, previous: Decimal) -> Change:
    """Change relative to the magnitude of a base that may be negative."""
    amount = current - previous
    return Change(amount=amount, percentage=percentage(amount, abs(previous)))


def compare(current: PeriodStatement, previous: PeriodStatement) -> ComparisonDeltas:
    """Compute deltas from ``previous`` to ``current``.

    Revenue and gross profit percentages are 0 unless the previous value
    is positive. Net income may be negative, so its percentage uses
    ``abs(previous)`` and is 0 only when the previous value is 0.
    Margin changes are point differences.

    Args:
        current: Statement for the period being reported.
        previous: Statement for the comparison period.

    Returns:
        ComparisonDeltas.
    """
    return ComparisonDeltas(
        revenue_change=_change_over_positive(current.revenue, previous.revenue),
        gross_profit_change=_change_over_positive(current.gross_profit, previous.gross_profit),
        net_income_change=_change_over_magnitude(current.net_income, previous.net_income),
        gross_margin_change=current.gross_margin - previous.gross_margin,
        net_margin_change=current.net_margin - previous.net_margin,
    )
