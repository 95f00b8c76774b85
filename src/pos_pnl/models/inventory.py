"""Inventory and product catalog data models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CostRecord:
    """Current inventory state for one product.

    The cost is whatever is stored now, not the cost at the time of any
    past sale. Restocking at a new cost therefore changes COGS for
    historical periods.

    Attributes:
        upc: Product identifier (unique).
        cost: Current unit cost.
        price: Current unit shelf price.
        quantity: Units on hand.
        taxable: Whether the product is taxed at sale.
    """

    upc: str
    cost: Decimal
    price: Decimal
    quantity: int
    taxable: bool = True


@dataclass(frozen=True)
class CatalogProduct:
    """Product catalog entry used for category lookups.

    Attributes:
        upc: Product identifier.
        description: Catalog item description.
        category: Catalog category name (may be empty).
    """

    upc: str
    description: str = ""
    category: str = ""
