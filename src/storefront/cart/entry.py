"""Cart entry and snapshot value objects.

A CartEntry is immutable: every quantity change produces a new entry, so a
reader holding a snapshot never sees it change underneath them.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Product(BaseModel):
    """Current product data as offered by the catalogue."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal = Field(ge=0)
    count_in_stock: int = Field(ge=0)
    image: str = ""


class CartEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    count_in_stock: int = Field(ge=1)
    image_ref: str = ""

    @model_validator(mode="after")
    def quantity_must_not_exceed_stock(self):
        if self.quantity > self.count_in_stock:
            raise ValueError(f"quantity {self.quantity} exceeds stock {self.count_in_stock}")
        return self

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartEntry":
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            count_in_stock=product.count_in_stock,
            image_ref=product.image,
        )

    def replace(self, **changes) -> "CartEntry":
        """Return a validated copy with ``changes`` applied."""
        return CartEntry(**{**self.model_dump(), **changes})

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def can_increment(self) -> bool:
        return self.quantity < self.count_in_stock

    @property
    def can_decrement(self) -> bool:
        return self.quantity > 1

    # -------------------------------------------------------------------
    # Persisted record format
    # -------------------------------------------------------------------
    def to_record(self) -> dict:
        return {
            "quantity": self.quantity,
            "countInStock": self.count_in_stock,
            "unitPrice": str(self.unit_price),
            "name": self.name,
            "imageRef": self.image_ref,
        }

    @classmethod
    def from_record(cls, product_id: str, record: dict) -> "CartEntry":
        return cls(
            product_id=product_id,
            name=record["name"],
            unit_price=record["unitPrice"],
            quantity=record["quantity"],
            count_in_stock=record["countInStock"],
            image_ref=record.get("imageRef", ""),
        )


class CartSnapshot(BaseModel):
    """Point-in-time read of the cart. Totals are derived, never stored."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[CartEntry, ...] = ()

    @property
    def total_price(self) -> Decimal:
        return sum((entry.line_total for entry in self.entries), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(entry.quantity for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def product_ids(self) -> list[str]:
        return [entry.product_id for entry in self.entries]

    def get(self, product_id: str) -> CartEntry | None:
        return next((entry for entry in self.entries if entry.product_id == product_id), None)
