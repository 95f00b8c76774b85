"""Tests for operating expense entries."""

from datetime import date
from decimal import Decimal

import pytest

from pos_pnl.models.expense import ExpenseCategory, ExpenseEntry, InvalidExpense
from pos_pnl.processing.engine import PnLEngine
from pos_pnl.stores.memory import (
    InMemoryExpenseStore,
    InMemoryInventoryStore,
    InMemoryProductCatalog,
    InMemoryTransactionStore,
)


def create_engine() -> PnLEngine:
    """Helper to build an engine with no sales."""
    return PnLEngine(
        transactions=InMemoryTransactionStore(),
        inventory=InMemoryInventoryStore(),
        catalog=InMemoryProductCatalog(),
        expenses=InMemoryExpenseStore(),
    )


class TestExpenseCategory:
    """Tests for ExpenseCategory."""

    def test_parse_case_insensitive(self) -> None:
        """Test categories are matched regardless of case."""
        assert ExpenseCategory.parse(" Utilities ") == ExpenseCategory.UTILITIES

    def test_parse_unknown(self) -> None:
        """Test unknown categories raise InvalidExpense."""
        with pytest.raises(InvalidExpense, match="Unknown expense category"):
            ExpenseCategory.parse("travel")

    @pytest.mark.parametrize(
        "category,bucket",
        [
            (ExpenseCategory.LABOR, "labor"),
            (ExpenseCategory.RENT, "rent"),
            (ExpenseCategory.UTILITIES, "utilities"),
            (ExpenseCategory.MARKETING, "other"),
            (ExpenseCategory.SUPPLIES, "other"),
            (ExpenseCategory.INSURANCE, "other"),
            (ExpenseCategory.OTHER, "other"),
        ],
    )
    def test_rollup_bucket(self, category: ExpenseCategory, bucket: str) -> None:
        """Test each category's statement bucket."""
        assert category.rollup_bucket == bucket


class TestExpenseEntry:
    """Tests for ExpenseEntry validation."""

    def test_from_dict_defaults(self) -> None:
        """Test defaults for created_by and recurring."""
        entry = ExpenseEntry.from_dict(
            {"category": "rent", "amount": "2500.00", "description": "March rent", "date": "2024-03-01"}
        )

        assert entry.category == ExpenseCategory.RENT
        assert entry.amount == Decimal("2500.00")
        assert entry.expense_date == date(2024, 3, 1)
        assert entry.created_by == "system"
        assert entry.recurring is False
        assert entry.subcategory is None

    def test_negative_amount(self) -> None:
        """Test negative amounts are rejected."""
        with pytest.raises(InvalidExpense, match="negative"):
            ExpenseEntry.from_dict({"category": "rent", "amount": -1, "date": "2024-03-01"})

    def test_non_numeric_amount(self) -> None:
        """Test non-numeric amounts are rejected."""
        with pytest.raises(InvalidExpense, match="amount"):
            ExpenseEntry.from_dict({"category": "rent", "amount": "lots", "date": "2024-03-01"})

    def test_missing_date(self) -> None:
        """Test an entry without a date is rejected."""
        with pytest.raises(InvalidExpense, match="no date"):
            ExpenseEntry.from_dict({"category": "rent", "amount": 1})

    def test_bad_date(self) -> None:
        """Test a malformed date is an InvalidExpense, not an InvalidDateRange."""
        with pytest.raises(InvalidExpense, match="date"):
            ExpenseEntry.from_dict({"category": "rent", "amount": 1, "expense_date": "03/01/2024"})

    def test_zero_amount_allowed(self) -> None:
        """Test a zero amount is a valid placeholder entry."""
        entry = ExpenseEntry.from_dict({"category": "other", "amount": 0, "date": "2024-03-01"})
        assert entry.amount == Decimal("0")

    @pytest.mark.parametrize(
        "raw,expected",
        [("false", False), ("False", False), ("0", False), ("", False), ("true", True), ("yes", True), (1, True), (0, False)],
    )
    def test_recurring_from_text(self, raw: object, expected: bool) -> None:
        """Test recurring accepts text and integer flags."""
        entry = ExpenseEntry.from_dict({"category": "rent", "amount": 1, "date": "2024-03-01", "recurring": raw})
        assert entry.recurring is expected

    def test_recurring_rejects_unknown_text(self) -> None:
        """Test an unrecognized recurring value is rejected."""
        with pytest.raises(InvalidExpense, match="yes/no"):
            ExpenseEntry.from_dict({"category": "rent", "amount": 1, "date": "2024-03-01", "recurring": "monthly"})


class TestEngineExpenses:
    """Tests for add_expense and get_expenses."""

    def test_add_then_list_newest_first(self) -> None:
        """Test stored entries get ids and come back newest first."""
        engine = create_engine()
        engine.add_expense({"category": "labor", "amount": 100, "description": "Week 1", "date": "2024-03-02"})
        engine.add_expense({"category": "labor", "amount": 110, "description": "Week 2", "date": "2024-03-09"})
        engine.add_expense({"category": "rent", "amount": 900, "description": "April", "date": "2024-04-01"})

        entries = engine.get_expenses("2024-03-01", "2024-03-31")

        assert [e.description for e in entries] == ["Week 2", "Week 1"]
        assert all(e.id is not None for e in entries)
        assert all(e.created_at is not None for e in entries)

    def test_added_expense_reaches_statement(self) -> None:
        """Test a recorded expense shows up in the next statement."""
        engine = create_engine()
        engine.add_expense(
            ExpenseEntry(
                category=ExpenseCategory.INSURANCE,
                amount=Decimal("75"),
                description="Liquor liability",
                expense_date=date(2024, 3, 20),
                recurring=True,
            )
        )

        statement = engine.calculate_pnl("2024-03-01", "2024-03-31")

        assert statement.operating_expenses.other == Decimal("75")
        assert statement.net_income == Decimal("-75")

    def test_invalid_entry_not_stored(self) -> None:
        """Test a rejected entry leaves the store unchanged."""
        engine = create_engine()

        with pytest.raises(InvalidExpense):
            engine.add_expense({"category": "bribes", "amount": 5, "date": "2024-03-01"})

        assert engine.get_expenses("2024-01-01", "2024-12-31") == []
