"""Shipping address collected during checkout."""

from pydantic import BaseModel, ConfigDict

from storefront.exceptions import ValidationError

MISSING_ADDRESS_FIELD = "missing required address field"


class ShippingAddress(BaseModel):
    """Shipping address draft. All fields start empty and are required to order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    def with_changes(self, **changes: str) -> "ShippingAddress":
        unknown = set(changes) - set(self.field_names())
        if unknown:
            raise ValueError(f"Unknown address fields: {', '.join(sorted(unknown))}")
        return ShippingAddress(**{**self.model_dump(), **changes})

    def missing_fields(self) -> list[str]:
        """Names of fields that are empty or whitespace only.

        Stricter than a plain emptiness check: a value of spaces is never a
        deliverable address, so it is reported as missing too.
        """
        return [name for name in self.field_names() if not getattr(self, name).strip()]

    def ensure_complete(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise ValidationError(
                MISSING_ADDRESS_FIELD,
                {name: ["This field is required"] for name in missing},
            )

    def to_payload(self) -> dict:
        return {
            "address": self.address,
            "city": self.city,
            "postalCode": self.postal_code,
            "country": self.country,
        }
