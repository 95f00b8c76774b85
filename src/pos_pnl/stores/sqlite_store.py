"""SQLAlchemy stores over the POS SQLite databases.

The desktop POS keeps ``transactions``, ``inventory`` and
``operating_expenses`` in the inventory database and the imported
product catalog (``products``, with spreadsheet-style column names) in a
separate products database. Both may also live in one file.

Only the ``operating_expenses`` table is owned by this package; the
others are created by the POS and are read here.
"""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from pos_pnl.models.expense import ExpenseCategory, ExpenseEntry
from pos_pnl.models.inventory import CostRecord
from pos_pnl.models.transaction import PaymentType, TransactionRecord
from pos_pnl.stores.base import (
    ExpenseStore,
    InventoryStore,
    ProductCatalog,
    StoreSet,
    StoreUnavailable,
    TransactionStore,
)
from pos_pnl.utils.date_utils import date_to_iso
from pos_pnl.utils.decimal_utils import safe_decimal
from pos_pnl.utils.logging_config import get_logger

logger = get_logger(__name__)

metadata = MetaData()

transactions_table = Table(
    "transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("items", Text, nullable=False),
    Column("subtotal", Float, nullable=False),
    Column("tax", Float, nullable=False),
    Column("total", Float, nullable=False),
    Column("payment_type", Text, nullable=False),
    Column("cash_given", Float),
    Column("change_given", Float),
    Column("created_by_user_id", Integer),
    Column("created_by_username", Text),
    # Kept as text: rows come from both SQLite CURRENT_TIMESTAMP and JS toISOString
    Column("created_at", Text, server_default=func.current_timestamp()),
)

inventory_table = Table(
    "inventory",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("upc", Text, nullable=False, unique=True),
    Column("cost", Float, nullable=False),
    Column("price", Float, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
)

products_table = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("Category Name", Text),
    Column("Item Description", Text),
    Column("UPC", Text, index=True),
)

expenses_table = Table(
    "operating_expenses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("category", String(16), nullable=False),
    Column("subcategory", Text),
    Column("amount", Float, nullable=False),
    Column("description", Text),
    Column("expense_date", Date, nullable=False),
    Column("recurring", Integer, server_default="0"),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("created_by", Text),
    Column("updated_at", DateTime, server_default=func.current_timestamp()),
    Index("idx_expenses_date", "expense_date"),
    Index("idx_expenses_category", "category"),
)

# Tables created by the POS application itself
POS_TABLES = [transactions_table, inventory_table, products_table]


@contextmanager
def _store_errors(store: str, operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into StoreUnavailable."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"{store} store failed during {operation}: {e}")
        raise StoreUnavailable(f"{store} store unavailable: {e}", store=store) from e


def create_engine_for(path: Path | str) -> Engine:
    """Create an engine for a SQLite database file (":memory:" allowed)."""
    if str(path) == ":memory:":
        # One shared connection, otherwise every checkout sees an empty database
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(f"sqlite:///{Path(path)}")


def init_schema(engine: Engine, include_pos_tables: bool = False) -> None:
    """Create the operating_expenses table and indexes if missing.

    Args:
        engine: Engine for the inventory database.
        include_pos_tables: Also create the POS-owned tables (for fresh
            databases in tests and demos).

    Raises:
        StoreUnavailable: If the database cannot be written.
    """
    tables = [expenses_table]
    if include_pos_tables:
        tables = POS_TABLES + tables
    with _store_errors("expense", "schema initialization"):
        metadata.create_all(engine, tables=tables)


def _day_filter(column: Column, start: date, end: date) -> list:
    """Inclusive calendar-date filter on a stored timestamp column."""
    day = func.date(column)
    return [day >= date_to_iso(start), day <= date_to_iso(end)]


class SqliteTransactionStore(TransactionStore):
    """Reads completed sales from the ``transactions`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def transactions_between(self, start: date, end: date) -> list[TransactionRecord]:
        t = transactions_table.c
        query = (
            select(transactions_table)
            .where(*_day_filter(t.created_at, start, end))
            .order_by(t.created_at, t.id)
        )
        with _store_errors("transaction", "range read"):
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()

        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row) -> TransactionRecord:
        try:
            payment_type = PaymentType(str(row["payment_type"]).lower())
        except ValueError:
            # Rows written without a payment type are cash sales
            logger.debug(f"Transaction {row['id']}: unknown payment type {row['payment_type']!r}")
            payment_type = PaymentType.CASH

        return TransactionRecord(
            id=row["id"],
            items=row["items"],
            subtotal=safe_decimal(row["subtotal"]),
            tax=safe_decimal(row["tax"]),
            total=safe_decimal(row["total"]),
            payment_type=payment_type,
            created_at=row["created_at"],
            cash_given=safe_decimal(row["cash_given"], default=None),  # type: ignore[arg-type]
            change_given=safe_decimal(row["change_given"], default=None),  # type: ignore[arg-type]
            created_by_user_id=row["created_by_user_id"],
            created_by_username=row["created_by_username"],
        )


class SqliteInventoryStore(InventoryStore):
    """Reads current costs and stock from the ``inventory`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def cost_record(self, upc: str) -> Optional[CostRecord]:
        i = inventory_table.c
        query = select(i.upc, i.cost, i.price, i.quantity).where(i.upc == upc)
        with _store_errors("inventory", "cost lookup"):
            with self.engine.connect() as conn:
                row = conn.execute(query).mappings().first()

        if row is None:
            return None
        return CostRecord(
            upc=row["upc"],
            cost=safe_decimal(row["cost"]),
            price=safe_decimal(row["price"]),
            quantity=int(row["quantity"] or 0),
        )

    def average_on_hand(self, upc: str) -> Optional[Decimal]:
        query = select(func.avg(inventory_table.c.quantity)).where(inventory_table.c.upc == upc)
        with _store_errors("inventory", "stock average"):
            with self.engine.connect() as conn:
                average = conn.execute(query).scalar()

        if average is None:
            return None
        return safe_decimal(average)


class SqliteProductCatalog(ProductCatalog):
    """Reads categories from the imported ``products`` catalog."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def category_for(self, upc: str) -> Optional[str]:
        p = products_table.c
        query = select(p["Category Name"]).where(p["UPC"] == upc).limit(1)
        with _store_errors("catalog", "category lookup"):
            with self.engine.connect() as conn:
                row = conn.execute(query).first()

        if row is None:
            return None
        return row[0] or ""


class SqliteExpenseStore(ExpenseStore):
    """Reads and writes the ``operating_expenses`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def add(self, entry: ExpenseEntry) -> ExpenseEntry:
        statement = expenses_table.insert().values(
            category=entry.category.value,
            subcategory=entry.subcategory,
            amount=float(entry.amount),
            description=entry.description,
            expense_date=entry.expense_date,
            recurring=1 if entry.recurring else 0,
            created_by=entry.created_by,
        )
        with _store_errors("expense", "insert"):
            with self.engine.begin() as conn:
                result = conn.execute(statement)
                entry.id = result.inserted_primary_key[0]
                entry.created_at = conn.execute(
                    select(expenses_table.c.created_at).where(expenses_table.c.id == entry.id)
                ).scalar()

        logger.info(f"Recorded {entry.category.value} expense #{entry.id}: {entry.amount}")
        return entry

    def expenses_between(self, start: date, end: date) -> list[ExpenseEntry]:
        e = expenses_table.c
        query = (
            select(expenses_table)
            .where(*_day_filter(e.expense_date, start, end))
            .order_by(e.expense_date.desc(), e.id.desc())
        )
        with _store_errors("expense", "range read"):
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()

        return [
            ExpenseEntry(
                id=row["id"],
                category=ExpenseCategory(row["category"]),
                subcategory=row["subcategory"],
                amount=safe_decimal(row["amount"]),
                description=row["description"] or "",
                expense_date=row["expense_date"],
                recurring=bool(row["recurring"]),
                created_by=row["created_by"] or "system",
                created_at=row["created_at"],
            )
            for row in rows
        ]


def open_stores(
    database: Path | str,
    catalog_database: Path | str | None = None,
) -> StoreSet:
    """Open all four stores over the POS SQLite databases.

    Args:
        database: Inventory database (transactions, inventory, expenses).
        catalog_database: Products database; defaults to ``database``.

    Returns:
        StoreSet ready to hand to the engine.

    Raises:
        StoreUnavailable: If the expense table cannot be initialized.
    """
    engine = create_engine_for(database)
    catalog_engine = engine if catalog_database is None else create_engine_for(catalog_database)
    init_schema(engine)
    logger.info(f"Opened POS database {database}")

    return StoreSet(
        transactions=SqliteTransactionStore(engine),
        inventory=SqliteInventoryStore(engine),
        catalog=SqliteProductCatalog(catalog_engine),
        expenses=SqliteExpenseStore(engine),
    )
