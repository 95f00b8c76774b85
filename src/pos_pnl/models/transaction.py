"""Sales transaction and line-item data models.

Transactions are written once by the POS at sale completion and never
mutated. Their line items are stored as a JSON array in a single text
column; ``parse_line_items`` is the only place that payload is decoded.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pos_pnl.utils.date_utils import to_date
from pos_pnl.utils.decimal_utils import to_decimal


class PaymentType(Enum):
    """How the customer paid."""

    CASH = "cash"
    DEBIT = "debit"
    CREDIT = "credit"


class MalformedLineItems(ValueError):
    """Raised when a transaction's serialized line items cannot be used."""

    def __init__(self, message: str, transaction_id: int | None = None):
        """Initialize MalformedLineItems.

        Args:
            message: Error message.
            transaction_id: ID of the transaction whose payload is bad.
        """
        self.transaction_id = transaction_id
        super().__init__(message)


@dataclass(frozen=True)
class LineItem:
    """One product entry within a transaction.

    Attributes:
        upc: Product identifier (barcode).
        description: Description printed on the receipt.
        quantity: Units sold (>= 1).
        price: Unit price charged.
        total: Extended total for the line.
    """

    upc: str
    description: str
    quantity: int
    price: Decimal
    total: Decimal

    @property
    def revenue(self) -> Decimal:
        """Line revenue at the unit price charged."""
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, data: object) -> "LineItem":
        """Validate and build a line item from a decoded JSON object.

        ``description`` defaults to an empty string and ``total`` to
        ``price * quantity`` when absent.

        Raises:
            ValueError: If the object does not have the line-item shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"line item must be an object, got {type(data).__name__}")

        upc = data.get("upc")
        if isinstance(upc, int) and not isinstance(upc, bool):
            upc = str(upc)
        if not isinstance(upc, str) or not upc.strip():
            raise ValueError(f"line item has no product identifier: {data!r}")

        quantity = data.get("quantity")
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValueError(f"line item quantity must be an integer >= 1: {quantity!r}")

        if "price" not in data:
            raise ValueError(f"line item has no price: {data!r}")
        price = to_decimal(data["price"])

        raw_total = data.get("total")
        total = price * quantity if raw_total is None else to_decimal(raw_total)

        description = data.get("description") or ""
        if not isinstance(description, str):
            raise ValueError(f"line item description must be text: {description!r}")

        return cls(
            upc=upc.strip(),
            description=description,
            quantity=quantity,
            price=price,
            total=total,
        )


def parse_line_items(payload: str | bytes | list, transaction_id: int | None = None) -> list[LineItem]:
    """Decode and validate a transaction's serialized line items.

    Args:
        payload: JSON text from the ``items`` column, or an already
            decoded list.
        transaction_id: Used in error messages.

    Returns:
        List of validated line items (possibly empty).

    Raises:
        MalformedLineItems: If the payload is not a JSON array of valid
            line-item objects.
    """
    if isinstance(payload, (str, bytes)):
        try:
            decoded = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedLineItems(f"items are not valid JSON: {e}", transaction_id) from e
    else:
        decoded = payload

    if not isinstance(decoded, list):
        raise MalformedLineItems(
            f"items must be a JSON array, got {type(decoded).__name__}", transaction_id
        )

    items: list[LineItem] = []
    for index, raw_item in enumerate(decoded):
        try:
            items.append(LineItem.from_dict(raw_item))
        except ValueError as e:
            raise MalformedLineItems(f"item {index}: {e}", transaction_id) from e
    return items


@dataclass(frozen=True)
class TransactionRecord:
    """A completed sale as stored by the POS.

    Attributes:
        id: Monotonic transaction identifier.
        items: Serialized line-item list (JSON text), decoded on demand.
        subtotal: Sum of line totals before tax.
        tax: Tax charged.
        total: Amount charged (revenue).
        payment_type: cash, debit, or credit.
        created_at: Sale timestamp as stored.
        cash_given: Cash tendered, for cash sales.
        change_given: Change returned, for cash sales.
        created_by_user_id: Cashier user id, if recorded.
        created_by_username: Cashier username, if recorded.
    """

    id: int
    items: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_type: PaymentType
    created_at: datetime | date | str
    cash_given: Decimal | None = None
    change_given: Decimal | None = None
    created_by_user_id: int | None = None
    created_by_username: str | None = None

    @property
    def sale_date(self) -> date:
        """Calendar date of the sale, used for all range filtering."""
        return to_date(self.created_at)

    def line_items(self) -> list[LineItem]:
        """Decode this transaction's line items.

        Raises:
            MalformedLineItems: If the payload is malformed.
        """
        return parse_line_items(self.items, self.id)


@dataclass
class LineItemScan:
    """Typed result of decoding line items for a batch of transactions.

    Attributes:
        parsed: (transaction, line items) pairs that decoded cleanly.
        skipped: IDs of transactions whose line items were malformed.
    """

    parsed: list[tuple[TransactionRecord, list[LineItem]]] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

