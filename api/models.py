"""
API request and response models for StockTrack REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py,
audit/models.py and inventory/models.py, which own the internal domain
representation. Route handlers map between the two.

Wire format is camelCase (createdAt, entityId, imageUrl). Response models use
an alias generator so Python code keeps snake_case attribute names; FastAPI
serializes response_model instances by alias.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from audit.models import LogEntry
from auth.models import User
from inventory.models import Product

# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


class _CamelResponse(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for register, login and reset-password.

    Both fields are optional at the schema level so a missing field reaches
    the auth service, which rejects it with the same 400 message the service
    uses everywhere ("email and password are required").
    Passwords are not whitespace-stripped.
    """

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


class UserSummary(_CamelResponse):
    """Public view of a user -- never includes the password hash."""

    id: int
    email: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, email=user.email, created_at=user.created_at or "")


class UserRef(_CamelResponse):
    id: int
    email: str


class LoginResponse(_CamelResponse):
    token: str
    user: UserRef


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

_CENTS = Decimal("0.01")


def _to_cents(price: Optional[Decimal]) -> Optional[Decimal]:
    """Fix prices at two decimal places so "1e2" and 9.9 are stored as 100.00 and 9.90."""
    return price.quantize(_CENTS) if price is not None else None


class ProductCreate(BaseModel):
    """Request body for POST /api/products."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    stock: int = Field(ge=0)

    @field_validator("price")
    @classmethod
    def price_to_cents(cls, price: Optional[Decimal]) -> Optional[Decimal]:
        return _to_cents(price)


class ProductUpdate(BaseModel):
    """Request body for PUT /api/products/{id}. Only the fields sent are written."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)

    @field_validator("price")
    @classmethod
    def price_to_cents(cls, price: Optional[Decimal]) -> Optional[Decimal]:
        return _to_cents(price)


class ProductResponse(_CamelResponse):
    id: int
    name: str
    sku: str
    price: Decimal
    stock: int
    image_url: Optional[str] = None
    created_at: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            price=product.price,
            stock=product.stock,
            image_url=product.image_url,
            created_at=product.created_at,
        )


class ImageUploadResponse(_CamelResponse):
    ok: bool = True
    image_url: str


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


class LogEntryResponse(_CamelResponse):
    """One row of GET /api/logs. user is None when the actor is absent or unknown."""

    id: int
    action: str
    entity: Optional[str] = None
    entity_id: Optional[int] = None
    payload: Any = None
    created_at: str
    user: Optional[UserRef] = None

    @classmethod
    def from_entry(cls, entry: LogEntry, user: Optional[User]) -> "LogEntryResponse":
        return cls(
            id=entry.id,
            action=entry.action,
            entity=entry.entity,
            entity_id=entry.entity_id,
            payload=entry.payload,
            created_at=entry.created_at,
            user=UserRef(id=user.id, email=user.email) if user is not None else None,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    error is the human-readable message; code is stable and machine-readable.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    code: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    version: str
    database: str = "ok"
