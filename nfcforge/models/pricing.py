"""
Pricing breakdown model.

PricingDetails is derived data: it is only ever produced by
calculate_pricing() and never edited field by field.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from nfcforge.models.failure import FailureKind, KnownError


class InvalidQuantityError(KnownError):
    """Raised when a quantity is not a positive integer."""

    def __init__(self, quantity: Any, reason: str = "must be a positive integer"):
        self.quantity = quantity
        super().__init__(
            kind=FailureKind.INVALID_QUANTITY,
            message=f"Invalid quantity: {quantity!r}",
            detail=f"Quantity {reason}",
            suggestion="Enter a whole number of cards, 1 or more.",
            status_code=400,
        )


@dataclass(frozen=True)
class PricingDetails:
    """
    Itemized price for one design at one quantity.

    All amounts are Decimal. Only `total` is rounded to the cent;
    subtotal and discount_amount keep full precision.
    """

    base_price: Decimal
    material_cost: Decimal
    nfc_cost: Decimal
    quantity: int
    discount: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    total: Decimal

    @property
    def unit_price(self) -> Decimal:
        """Per-card price before discount."""
        return self.base_price + self.material_cost + self.nfc_cost

    def to_dict(self) -> dict[str, Any]:
        """Serialize with amounts as strings so no precision is lost."""
        return {
            "base_price": str(self.base_price),
            "material_cost": str(self.material_cost),
            "nfc_cost": str(self.nfc_cost),
            "quantity": self.quantity,
            "discount": str(self.discount),
            "discount_amount": str(self.discount_amount),
            "subtotal": str(self.subtotal),
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PricingDetails":
        return cls(
            base_price=Decimal(data["base_price"]),
            material_cost=Decimal(data["material_cost"]),
            nfc_cost=Decimal(data["nfc_cost"]),
            quantity=int(data["quantity"]),
            discount=Decimal(data["discount"]),
            discount_amount=Decimal(data["discount_amount"]),
            subtotal=Decimal(data["subtotal"]),
            total=Decimal(data["total"]),
        )


class PricingPayload(BaseModel):
    """
    Pricing as submitted by a client at checkout.

    Only `total` is compared against the server's recomputation; the
    other fields are accepted for display round-trips and ignored.
    """

    total: Decimal = Field(..., description="Client-computed order total")
    base_price: Decimal | None = None
    material_cost: Decimal | None = None
    nfc_cost: Decimal | None = None
    quantity: int | None = None
    discount: Decimal | None = None
    discount_amount: Decimal | None = None
    subtotal: Decimal | None = None

    @classmethod
    def from_details(cls, details: PricingDetails) -> "PricingPayload":
        return cls.model_validate(details.to_dict())
