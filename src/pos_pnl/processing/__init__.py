"""P&L processing pipeline components."""

from pos_pnl.processing.aggregators import (
    ExpenseAggregator,
    RevenueCogsAggregator,
    scan_line_items,
)
from pos_pnl.processing.breakdown import BreakdownOrchestrator
from pos_pnl.processing.comparator import compare
from pos_pnl.processing.engine import PnLEngine
from pos_pnl.processing.performance import PerformanceAggregator
from pos_pnl.processing.periods import (
    generate_daily_periods,
    generate_monthly_periods,
    generate_quarterly_periods,
    generate_weekly_periods,
    generate_yearly_periods,
    partition,
)
from pos_pnl.processing.pnl_calculator import PnLCalculator

__all__ = [
    "BreakdownOrchestrator",
    "ExpenseAggregator",
    "PerformanceAggregator",
    "PnLCalculator",
    "PnLEngine",
    "RevenueCogsAggregator",
    "compare",
    "generate_daily_periods",
    "generate_monthly_periods",
    "generate_quarterly_periods",
    "generate_weekly_periods",
    "generate_yearly_periods",
    "partition",
    "scan_line_items",
]
