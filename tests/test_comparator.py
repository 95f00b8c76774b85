"""Tests for period-over-period comparison."""

import json
from datetime import date
from decimal import Decimal

from pos_pnl.models.report import OperatingExpenses, PeriodStatement
from pos_pnl.models.transaction import PaymentType, TransactionRecord
from pos_pnl.processing.comparator import compare
from pos_pnl.processing.engine import PnLEngine
from pos_pnl.stores.memory import (
    InMemoryExpenseStore,
    InMemoryInventoryStore,
    InMemoryProductCatalog,
    InMemoryTransactionStore,
)


def create_statement(revenue: str, cogs: str = "0", expenses: str = "0") -> PeriodStatement:
    """Helper to create a statement with the given headline figures."""
    return PeriodStatement(
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
        revenue=Decimal(revenue),
        cost_of_goods_sold=Decimal(cogs),
        operating_expenses=OperatingExpenses(other=Decimal(expenses)),
        transactions=1 if Decimal(revenue) else 0,
        units_sold=0,
    )


class TestCompare:
    """Tests for compare()."""

    def test_growth(self) -> None:
        """Test amount and percentage changes against a positive base."""
        deltas = compare(create_statement("150", "60"), create_statement("100", "50"))

        assert deltas.revenue_change.amount == Decimal("50")
        assert deltas.revenue_change.percentage == Decimal("50")
        assert deltas.gross_profit_change.amount == Decimal("40")
        assert deltas.gross_profit_change.percentage == Decimal("80")

    def test_zero_previous_revenue(self) -> None:
        """Test percentages are 0 when the previous base is zero."""
        deltas = compare(create_statement("100", "40"), create_statement("0"))

        assert deltas.revenue_change.amount == Decimal("100")
        assert deltas.revenue_change.percentage == Decimal("0")
        assert deltas.gross_profit_change.percentage == Decimal("0")
        assert deltas.net_income_change.percentage == Decimal("0")

    def test_negative_previous_gross_profit(self) -> None:
        """Test gross profit percentage is 0 against a negative base."""
        deltas = compare(create_statement("100", "50"), create_statement("100", "120"))

        assert deltas.gross_profit_change.amount == Decimal("70")
        assert deltas.gross_profit_change.percentage == Decimal("0")

    def test_net_income_change_against_loss(self) -> None:
        """Test net income change is relative to the size of a prior loss."""
        current = create_statement("100", "40", expenses="10")  # net 50
        previous = create_statement("100", "40", expenses="110")  # net -50

        deltas = compare(current, previous)

        assert deltas.net_income_change.amount == Decimal("100")
        assert deltas.net_income_change.percentage == Decimal("200")

    def test_margin_changes_are_points(self) -> None:
        """Test margin changes are differences of percentages."""
        deltas = compare(create_statement("100", "40"), create_statement("100", "50"))

        assert deltas.gross_margin_change == Decimal("10")
        assert deltas.net_margin_change == Decimal("10")

    def test_swapping_periods_negates_amounts(self) -> None:
        """Test both directions against a loss-making, zero-revenue period."""
        slow = create_statement("0", expenses="30")  # net -30
        busy = create_statement("200", "80", expenses="20")  # gross 120, net 100

        down = compare(slow, busy)
        up = compare(busy, slow)

        for forward, backward in (
            (down.revenue_change, up.revenue_change),
            (down.gross_profit_change, up.gross_profit_change),
            (down.net_income_change, up.net_income_change),
        ):
            assert forward.amount == -backward.amount
        assert down.gross_margin_change == -up.gross_margin_change
        assert down.net_margin_change == -up.net_margin_change

        # Positive base: amount / previous
        assert down.revenue_change.percentage == Decimal("-100")
        assert down.gross_profit_change.percentage == Decimal("-100")
        assert down.net_income_change.percentage == Decimal("-130")
        # Zero base for revenue and gross profit, negative base for net income
        assert up.revenue_change.percentage == Decimal("0")
        assert up.gross_profit_change.percentage == Decimal("0")
        assert up.net_income_change.percentage == Decimal("130") / Decimal("30") * 100

    def test_to_dict_shape(self) -> None:
        """Test the serialized form nests margin changes."""
        data = compare(create_statement("10"), create_statement("10")).to_dict()

        assert set(data) == {"revenue_change", "gross_profit_change", "net_income_change", "margin_change"}
        assert set(data["margin_change"]) == {"gross", "net"}  # type: ignore[arg-type]


class TestEngineComparisons:
    """Tests for the engine's comparison entry points."""

    def _engine(self) -> PnLEngine:
        sales = [
            TransactionRecord(
                id=i,
                items=json.dumps([]),
                subtotal=Decimal(amount),
                tax=Decimal("0"),
                total=Decimal(amount),
                payment_type=PaymentType.CASH,
                created_at=f"{day} 12:00:00",
            )
            for i, (day, amount) in enumerate(
                [("2024-03-03", "100"), ("2024-03-09", "150"), ("2024-03-14", "50")], start=1
            )
        ]
        return PnLEngine(
            transactions=InMemoryTransactionStore(sales),
            inventory=InMemoryInventoryStore(),
            catalog=InMemoryProductCatalog(),
            expenses=InMemoryExpenseStore(),
        )

    def test_compare_with_previous(self) -> None:
        """Test the previous range is the equal-length range just before."""
        comparison = self._engine().compare_with_previous("2024-03-08", "2024-03-14")

        assert comparison.previous.start_date == date(2024, 3, 1)
        assert comparison.previous.end_date == date(2024, 3, 7)
        assert comparison.current.revenue == Decimal("200")
        assert comparison.previous.revenue == Decimal("100")
        assert comparison.deltas.revenue_change.percentage == Decimal("100")

    def test_compare_periods(self) -> None:
        """Test explicit ranges are calculated and compared."""
        comparison = self._engine().compare_periods(
            ("2024-03-09", "2024-03-09"), ("2024-03-03", "2024-03-03")
        )

        assert comparison.deltas.revenue_change.amount == Decimal("50")

    def test_compare_performance(self) -> None:
        """Test comparing two already computed statements."""
        engine = self._engine()
        deltas = engine.compare_performance(create_statement("120"), create_statement("100"))

        assert deltas.revenue_change.percentage == Decimal("20")
