"""Cart events, published by CartStore after each applied mutation."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(UTC)


class CartEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    occurred_at: datetime = Field(default_factory=_now)


class CartItemAdded(CartEvent):
    """A product was added to the cart (or merged into an existing entry)."""

    product_id: str
    requested_quantity: int
    new_quantity: int


class CartQuantityUpdated(CartEvent):
    """The quantity of a cart entry was changed."""

    product_id: str
    previous_quantity: int
    new_quantity: int


class CartItemRemoved(CartEvent):
    """An entry was removed from the cart."""

    product_id: str


class CartCleared(CartEvent):
    """All entries were removed, typically after an order was placed."""

    removed_count: int


class CartReconciled(CartEvent):
    """Persisted entries were refreshed from current product data."""

    updated_product_ids: tuple[str, ...] = ()
    removed_product_ids: tuple[str, ...] = ()
