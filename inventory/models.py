"""
inventory/models.py -- Domain dataclass for products.

Pure data container. Validation of field ranges (price > 0, stock >= 0)
happens in the API request models; the store enforces SKU uniqueness.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    """A stocked item.

    price is kept as Decimal end to end (stored as text) so money values never
    pass through float. id is None before the record is written to the database.
    """

    name: str
    sku: str
    price: Decimal
    stock: int = 0
    id: Optional[int] = None
    image_url: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
