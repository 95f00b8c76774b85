"""Tests for revenue/COGS/expense aggregation and P&L statements."""

import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from pos_pnl.models.expense import ExpenseCategory, ExpenseEntry
from pos_pnl.models.inventory import CostRecord
from pos_pnl.models.transaction import PaymentType, TransactionRecord
from pos_pnl.processing.aggregators import CostLookup, ExpenseAggregator, RevenueCogsAggregator
from pos_pnl.processing.engine import PnLEngine
from pos_pnl.processing.pnl_calculator import PnLCalculator
from pos_pnl.stores.memory import (
    InMemoryExpenseStore,
    InMemoryInventoryStore,
    InMemoryProductCatalog,
    InMemoryTransactionStore,
)
from pos_pnl.utils.date_utils import InvalidDateRange
from pos_pnl.utils.decimal_utils import round_money


def create_transaction(
    txn_id: int,
    items: object,
    total: str,
    created_at: str = "2024-03-15 12:00:00",
    tax: str = "0",
) -> TransactionRecord:
    """Helper to create a TransactionRecord."""
    return TransactionRecord(
        id=txn_id,
        items=items if isinstance(items, str) else json.dumps(items),
        subtotal=Decimal(total) - Decimal(tax),
        tax=Decimal(tax),
        total=Decimal(total),
        payment_type=PaymentType.CASH,
        created_at=created_at,
    )


def create_expense(category: str, amount: str, expense_date: str = "2024-03-15") -> ExpenseEntry:
    """Helper to create an ExpenseEntry."""
    return ExpenseEntry(
        category=ExpenseCategory.parse(category),
        amount=Decimal(amount),
        description=f"{category} expense",
        expense_date=date.fromisoformat(expense_date),
    )


def create_engine(
    transactions: list[TransactionRecord] = (),  # type: ignore[assignment]
    costs: dict[str, str] | None = None,
    expenses: list[ExpenseEntry] = (),  # type: ignore[assignment]
) -> PnLEngine:
    """Helper to build an engine over in-memory stores."""
    inventory = InMemoryInventoryStore(
        CostRecord(upc=upc, cost=Decimal(cost), price=Decimal("0"), quantity=10)
        for upc, cost in (costs or {}).items()
    )
    return PnLEngine(
        transactions=InMemoryTransactionStore(transactions),
        inventory=inventory,
        catalog=InMemoryProductCatalog(),
        expenses=InMemoryExpenseStore(expenses),
    )


class TestCalculatePnL:
    """Tests for single-period statements."""

    def test_single_sale(self) -> None:
        """Test revenue from totals, COGS from current cost, and margins."""
        engine = create_engine(
            transactions=[
                create_transaction(1, [{"upc": "X", "quantity": 2, "price": 50.00}], "107.00", tax="7.00")
            ],
            costs={"X": "20.00"},
        )

        statement = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert statement.revenue == Decimal("107.00")
        assert statement.cost_of_goods_sold == Decimal("40.00")
        assert statement.gross_profit == Decimal("67.00")
        assert round_money(statement.gross_margin) == Decimal("62.62")
        assert statement.transactions == 1
        assert statement.units_sold == 2
        assert statement.average_transaction_value == Decimal("107.00")
        assert statement.is_complete

    def test_zero_revenue_has_zero_margins(self) -> None:
        """Test an empty period reports zeros instead of dividing by zero."""
        engine = create_engine(expenses=[create_expense("rent", "500")])

        statement = engine.calculate_pnl("2024-03-01", "2024-03-31")

        assert statement.revenue == Decimal("0")
        assert statement.gross_margin == Decimal("0")
        assert statement.net_margin == Decimal("0")
        assert statement.average_transaction_value == Decimal("0")
        assert statement.net_income == Decimal("-500")

    def test_unknown_product_costs_nothing(self) -> None:
        """Test products with no inventory record add no COGS."""
        engine = create_engine(
            transactions=[create_transaction(1, [{"upc": "GONE", "quantity": 3, "price": 10}], "30")],
        )

        statement = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert statement.cost_of_goods_sold == Decimal("0")
        assert statement.units_sold == 3

    def test_range_is_inclusive_by_calendar_date(self) -> None:
        """Test sales late on the end date are included and the next day is not."""
        engine = create_engine(
            transactions=[
                create_transaction(1, [], "10", created_at="2024-03-01 00:00:00"),
                create_transaction(2, [], "20", created_at="2024-03-31T23:59:59.000Z"),
                create_transaction(3, [], "40", created_at="2024-04-01 00:00:01"),
            ],
        )

        statement = engine.calculate_pnl("2024-03-01", "2024-03-31")

        assert statement.revenue == Decimal("30")
        assert statement.transactions == 2

    def test_unparsable_timestamp_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a sale with a garbled timestamp drops out instead of failing the read."""
        engine = create_engine(
            transactions=[
                create_transaction(1, [], "10"),
                create_transaction(2, [], "99", created_at="not a date"),
            ],
        )

        with caplog.at_level(logging.WARNING, logger="pos_pnl"):
            statement = engine.calculate_pnl("2024-03-01", "2024-03-31")

        assert statement.revenue == Decimal("10")
        assert statement.transactions == 1
        assert "Transaction 2 ignored" in caplog.text

    def test_net_income_subtracts_expenses(self) -> None:
        """Test net income and net margin."""
        engine = create_engine(
            transactions=[create_transaction(1, [{"upc": "A", "quantity": 1, "price": 200}], "200")],
            costs={"A": "80"},
            expenses=[create_expense("labor", "60"), create_expense("utilities", "20")],
        )

        statement = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert statement.net_income == Decimal("40")
        assert statement.net_margin == Decimal("20")

    def test_repeat_calls_are_identical(self) -> None:
        """Test the calculation reads state without changing it."""
        engine = create_engine(
            transactions=[create_transaction(1, [{"upc": "X", "quantity": 2, "price": 50}], "107", tax="7")],
            costs={"X": "20"},
            expenses=[create_expense("rent", "10")],
        )

        first = engine.calculate_pnl("2024-03-01", "2024-03-31")
        second = engine.calculate_pnl("2024-03-01", "2024-03-31")

        assert first.to_dict() == second.to_dict()

    def test_cost_is_read_at_query_time(self) -> None:
        """Test restocking at a new cost changes COGS for past sales."""
        inventory = InMemoryInventoryStore([CostRecord("X", Decimal("20"), Decimal("50"), 5)])
        engine = PnLEngine(
            transactions=InMemoryTransactionStore(
                [create_transaction(1, [{"upc": "X", "quantity": 2, "price": 50}], "100")]
            ),
            inventory=inventory,
            catalog=InMemoryProductCatalog(),
            expenses=InMemoryExpenseStore(),
        )

        before = engine.calculate_pnl("2024-03-15", "2024-03-15")
        inventory.put(CostRecord("X", Decimal("25"), Decimal("50"), 30))
        after = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert before.cost_of_goods_sold == Decimal("40")
        assert after.cost_of_goods_sold == Decimal("50")

    def test_invalid_date(self) -> None:
        """Test malformed dates raise InvalidDateRange."""
        engine = create_engine()

        with pytest.raises(InvalidDateRange):
            engine.calculate_pnl("March 1", "2024-03-31")


class TestMalformedLineItems:
    """Tests for partial results when line items cannot be decoded."""

    def test_malformed_transaction_is_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test revenue keeps the sale, COGS skips it, and the id is surfaced."""
        engine = create_engine(
            transactions=[
                create_transaction(1, [{"upc": "X", "quantity": 1, "price": 50}], "50"),
                create_transaction(2, "{broken", "30"),
            ],
            costs={"X": "20"},
        )

        with caplog.at_level(logging.WARNING, logger="pos_pnl"):
            statement = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert statement.revenue == Decimal("80")
        assert statement.transactions == 2
        assert statement.cost_of_goods_sold == Decimal("20")
        assert statement.units_sold == 1
        assert statement.skipped_transactions == [2]
        assert not statement.is_complete
        assert "transaction 2" in caplog.text

    def test_skipped_ids_serialized(self) -> None:
        """Test to_dict carries the skipped transaction ids."""
        engine = create_engine(transactions=[create_transaction(5, '"not a list"', "10")])

        statement = engine.calculate_pnl("2024-03-15", "2024-03-15")

        assert statement.to_dict()["skipped_transactions"] == [5]


class TestExpenseRollup:
    """Tests for operating expense buckets."""

    def test_marketing_rolls_into_other(self) -> None:
        """Test labor/rent/utilities buckets and the other rollup."""
        store = InMemoryExpenseStore(
            [create_expense("labor", "100"), create_expense("rent", "200"), create_expense("marketing", "50")]
        )

        rollup = ExpenseAggregator(store).aggregate(date(2024, 3, 1), date(2024, 3, 31))

        assert rollup.labor == Decimal("100")
        assert rollup.rent == Decimal("200")
        assert rollup.utilities == Decimal("0")
        assert rollup.other == Decimal("50")
        assert rollup.total == Decimal("350")

    def test_supplies_and_insurance_are_other(self) -> None:
        """Test every non-core category lands in other."""
        store = InMemoryExpenseStore(
            [create_expense("supplies", "5"), create_expense("insurance", "7"), create_expense("other", "1")]
        )

        rollup = ExpenseAggregator(store).aggregate(date(2024, 3, 1), date(2024, 3, 31))

        assert rollup.other == Decimal("13")
        assert rollup.total == Decimal("13")

    def test_out_of_range_expenses_ignored(self) -> None:
        """Test only expenses dated within the range count."""
        store = InMemoryExpenseStore(
            [create_expense("rent", "200", "2024-02-29"), create_expense("rent", "300", "2024-03-01")]
        )

        rollup = ExpenseAggregator(store).aggregate(date(2024, 3, 1), date(2024, 3, 31))

        assert rollup.rent == Decimal("300")


class TestCostLookup:
    """Tests for the per-report cost cache."""

    def test_lookup_is_memoized(self) -> None:
        """Test each product's cost is read once per lookup."""
        inventory = InMemoryInventoryStore([CostRecord("X", Decimal("3"), Decimal("5"), 1)])
        costs = CostLookup(inventory)

        assert costs.unit_cost("X") == Decimal("3")
        inventory.put(CostRecord("X", Decimal("4"), Decimal("5"), 1))
        assert costs.unit_cost("X") == Decimal("3")
        assert CostLookup(inventory).unit_cost("X") == Decimal("4")

    def test_calculator_with_shared_lookup(self) -> None:
        """Test the calculator accepts a lookup shared across periods."""
        inventory = InMemoryInventoryStore([CostRecord("X", Decimal("2"), Decimal("5"), 1)])
        transactions = InMemoryTransactionStore(
            [create_transaction(1, [{"upc": "X", "quantity": 4, "price": 5}], "20")]
        )
        calculator = PnLCalculator(
            RevenueCogsAggregator(transactions, inventory),
            ExpenseAggregator(InMemoryExpenseStore()),
        )

        statement = calculator.calculate(date(2024, 3, 15), date(2024, 3, 15), CostLookup(inventory))

        assert statement.cost_of_goods_sold == Decimal("8")
