"""Operating expense data models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pos_pnl.utils.date_utils import InvalidDateRange, parse_date
from pos_pnl.utils.decimal_utils import to_decimal


class InvalidExpense(ValueError):
    """Raised when an expense entry fails validation."""

    pass


TRUE_STRINGS = frozenset({"true", "yes", "y", "1"})
FALSE_STRINGS = frozenset({"false", "no", "n", "0", ""})


def parse_flag(value: object) -> bool:
    """Parse a boolean field that may arrive as text (JSON, CSV, form input)."""
    if value is None:
        return False
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        raise InvalidExpense(f"Not a yes/no value: '{value}'")
    return bool(value)


class ExpenseCategory(Enum):
    """Closed set of operating expense categories."""

    LABOR = "labor"
    RENT = "rent"
    UTILITIES = "utilities"
    MARKETING = "marketing"
    SUPPLIES = "supplies"
    INSURANCE = "insurance"
    OTHER = "other"

    @property
    def rollup_bucket(self) -> str:
        """Statement bucket: labor, rent, utilities, or other."""
        if self in (ExpenseCategory.LABOR, ExpenseCategory.RENT, ExpenseCategory.UTILITIES):
            return self.value
        return ExpenseCategory.OTHER.value

    @classmethod
    def parse(cls, value: "str | ExpenseCategory") -> "ExpenseCategory":
        """Look up a category by value, case-insensitively.

        Raises:
            InvalidExpense: If the category is not in the closed set.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise InvalidExpense(f"Unknown expense category '{value}' (expected one of: {valid})") from None


@dataclass
class ExpenseEntry:
    """A manually recorded operating expense.

    Attributes:
        category: Expense category.
        amount: Amount spent (non-negative).
        description: Free-text description.
        expense_date: Date the expense applies to.
        subcategory: Optional finer classification (e.g. "electric").
        recurring: Whether the expense repeats each period.
        created_by: Who entered it.
        id: Store-assigned identifier (None until saved).
        created_at: Store-assigned entry timestamp.
    """

    category: ExpenseCategory
    amount: Decimal
    description: str
    expense_date: date
    subcategory: str | None = None
    recurring: bool = False
    created_by: str = "system"
    id: int | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate the entry."""
        self.category = ExpenseCategory.parse(self.category)
        try:
            self.amount = to_decimal(self.amount)
        except ValueError as e:
            raise InvalidExpense(f"Invalid expense amount: {e}") from e
        if self.amount < 0:
            raise InvalidExpense(f"Expense amount must not be negative: {self.amount}")
        try:
            self.expense_date = parse_date(self.expense_date)
        except InvalidDateRange as e:
            raise InvalidExpense(f"Invalid expense date: {e}") from e
        if not self.created_by:
            self.created_by = "system"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ExpenseEntry":
        """Create from dictionary (``date`` is accepted for ``expense_date``)."""
        if "expense_date" in data:
            expense_date = data["expense_date"]
        elif "date" in data:
            expense_date = data["date"]
        else:
            raise InvalidExpense("Expense entry has no date")
        return cls(
            category=data.get("category"),  # type: ignore[arg-type]
            amount=data.get("amount"),  # type: ignore[arg-type]
            description=str(data.get("description") or ""),
            expense_date=expense_date,  # type: ignore[arg-type]
            subcategory=data.get("subcategory") or None,  # type: ignore[arg-type]
            recurring=parse_flag(data.get("recurring")),
            created_by=str(data.get("created_by") or "system"),
        )
