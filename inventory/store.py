"""
inventory/store.py -- SQLAlchemy-backed persistence layer for products.

Uses SQLAlchemy Core (not ORM) so the dataclass in inventory/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ProductStore is the repository; _row_to_product
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ProductStore("sqlite:///stocktrack.db")
    product_id = store.create_product(Product(name="Widget", sku="W-1", price=Decimal("9.90"), stock=3))
    store.update_product(product_id, stock=2)
    products = store.list_products()
    store.close()
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from inventory.models import Product

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("sku", String(100), nullable=False, unique=True),
    Column("price", String(32), nullable=False),  # Decimal serialized as text
    Column("stock", Integer, nullable=False, server_default="0"),
    Column("image_url", Text),
    Column("created_at", String(32), nullable=False),
)

_UPDATABLE = {"name", "sku", "price", "stock", "image_url"}


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProductStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # SQLite requires check_same_thread=False when used from FastAPI's
            # threadpool where the same connection may be accessed across threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create_product(self, product: Product) -> int:
        """Insert a new product and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the SKU already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _products.insert().values(
                    name=product.name,
                    sku=product.sku,
                    price=str(product.price),
                    stock=product.stock,
                    image_url=product.image_url,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update_product(self, product_id: int, **fields) -> bool:
        """Update mutable fields on an existing product.

        Accepts any subset of: name, sku, price, stock, image_url. Unknown
        keys raise ValueError. Raises IntegrityError if sku collides with
        another product.

        Returns True if a row was updated, False if product_id was not found.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown product fields: {unknown!r}")
        if "price" in fields:
            fields["price"] = str(fields["price"])
        with self.engine.connect() as conn:
            result = conn.execute(_products.update().where(_products.c.id == product_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_product(self, product_id: int) -> bool:
        """Permanently delete a product. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_products.delete().where(_products.c.id == product_id))
            conn.commit()
        return result.rowcount > 0

    def get_product(self, product_id: int) -> Optional[Product]:
        """Fetch a single product by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        return _row_to_product(row) if row is not None else None

    def list_products(self) -> list[Product]:
        """Return all products, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_products.select().order_by(_products.c.id.desc())).fetchall()
        return [_row_to_product(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


def _row_to_product(row) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        sku=row.sku,
        price=Decimal(row.price),
        stock=row.stock,
        image_url=row.image_url,
        created_at=row.created_at,
    )
