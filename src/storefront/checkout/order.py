"""Order draft sent to the backend, and the confirmation it returns.

An OrderDraft is a frozen copy of the cart taken when the customer places
the order. Once submitted it belongs to the backend.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront.cart.entry import CartEntry, CartSnapshot
from storefront.checkout.address import ShippingAddress


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    quantity: int = Field(ge=1)
    image_ref: str = ""
    unit_price: Decimal = Field(ge=0)

    @classmethod
    def from_entry(cls, entry: CartEntry) -> "OrderItem":
        return cls(
            product_id=entry.product_id,
            name=entry.name,
            quantity=entry.quantity,
            image_ref=entry.image_ref,
            unit_price=entry.unit_price,
        )


class OrderDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[OrderItem, ...]
    shipping_address: ShippingAddress
    payment_method: str
    total_price: Decimal = Field(ge=0)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: CartSnapshot,
        shipping_address: ShippingAddress,
        payment_method: str,
    ) -> "OrderDraft":
        return cls(
            items=tuple(OrderItem.from_entry(entry) for entry in snapshot.entries),
            shipping_address=shipping_address,
            payment_method=payment_method,
            total_price=snapshot.total_price,
        )

    def to_payload(self) -> dict:
        """Render the order in the backend's JSON wire format."""
        return {
            "orderItems": [
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "image": item.image_ref,
                    "price": float(item.unit_price),
                    "product": item.product_id,
                }
                for item in self.items
            ],
            "shippingAddress": self.shipping_address.to_payload(),
            "paymentMethod": self.payment_method,
            "totalPrice": float(self.total_price),
        }


class OrderConfirmation(BaseModel):
    """Backend acknowledgement of a created order."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    created_at: datetime | None = None
    raw: dict = Field(default_factory=dict)
