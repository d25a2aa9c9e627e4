"""
Pricing API endpoints.

Exposes the pricing calculator and its rules table to the storefront.
"""

from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from nfcforge.models.design import Design, parse_chip_type, parse_material
from nfcforge.models.pricing import PricingDetails
from nfcforge.services.pricing import calculate_pricing
from nfcforge.services.pricing_rules import (
    BASE_PRICE,
    DISCOUNT_TIERS,
    MATERIAL_SURCHARGES,
    NFC_SURCHARGES,
)

router = APIRouter(prefix="/pricing", tags=["pricing"])


class PricingResponse(BaseModel):
    """Itemized price. Amounts serialize as decimal strings."""

    base_price: Decimal
    material_cost: Decimal
    nfc_cost: Decimal
    quantity: int
    discount: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    total: Decimal

    @classmethod
    def from_details(cls, details: PricingDetails) -> "PricingResponse":
        return cls(
            base_price=details.base_price,
            material_cost=details.material_cost,
            nfc_cost=details.nfc_cost,
            quantity=details.quantity,
            discount=details.discount,
            discount_amount=details.discount_amount,
            subtotal=details.subtotal,
            total=details.total,
        )


class QuoteRequest(BaseModel):
    """Request model for a price quote."""

    material: str = Field(..., description="Card material", examples=["Metal"])
    nfc_type: str = Field(..., description="NFC chip model", examples=["NTAG216"])
    quantity: int = Field(..., description="Number of cards", examples=[500])


class DiscountTier(BaseModel):
    min_quantity: int
    rate: Decimal


class PricingRulesResponse(BaseModel):
    """Response model for the pricing rules table."""

    base_price: Decimal
    materials: dict[str, Decimal]
    nfc_chips: dict[str, Decimal]
    discount_tiers: list[DiscountTier]


@router.post("/quote", response_model=PricingResponse)
async def quote(request: QuoteRequest) -> PricingResponse:
    """
    Price a material/chip combination at a quantity.

    Returns 400 for unsupported options or a non-positive quantity.
    """
    design = Design(
        material=parse_material(request.material),
        nfc_type=parse_chip_type(request.nfc_type),
    )
    return PricingResponse.from_details(calculate_pricing(design, request.quantity))


@router.get("/rules", response_model=PricingRulesResponse)
async def rules() -> PricingRulesResponse:
    """Get the surcharge tables and discount tiers."""
    return PricingRulesResponse(
        base_price=BASE_PRICE,
        materials={m.value: cost for m, cost in MATERIAL_SURCHARGES.items()},
        nfc_chips={c.value: cost for c, cost in NFC_SURCHARGES.items()},
        discount_tiers=[DiscountTier(min_quantity=q, rate=r) for q, r in DISCOUNT_TIERS],
    )
