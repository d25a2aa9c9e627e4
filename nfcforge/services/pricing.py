"""
Pricing Calculator.

calculate_pricing() is pure and deterministic: no I/O, no caching, safe
to call on every design mutation.

Arithmetic is Decimal throughout. Intermediate amounts keep full
precision; only the final total is rounded to the cent.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from nfcforge.models.design import Design
from nfcforge.models.pricing import InvalidQuantityError, PricingDetails
from nfcforge.services.pricing_rules import (
    BASE_PRICE,
    discount_rate,
    material_surcharge,
    nfc_surcharge,
)

CENT = Decimal("0.01")


def validate_quantity(quantity: Any) -> int:
    """
    Ensure quantity is a positive int.

    bool is rejected even though it subclasses int.

    Raises:
        InvalidQuantityError: If quantity is not a positive integer
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity, "must be an integer")
    if quantity < 1:
        raise InvalidQuantityError(quantity, "must be at least 1")
    return quantity


def calculate_pricing(design: Design, quantity: int) -> PricingDetails:
    """
    Price a design at a quantity.

    Args:
        design: The card design (material and chip drive the surcharges)
        quantity: Number of cards, a positive integer

    Returns:
        Itemized PricingDetails

    Raises:
        InvalidQuantityError: If quantity is not a positive integer
        InvalidConfigurationError: If material or chip has no price
    """
    quantity = validate_quantity(quantity)

    material_cost = material_surcharge(design.material)
    nfc_cost = nfc_surcharge(design.nfc_type)
    discount = discount_rate(quantity)

    subtotal = (BASE_PRICE + material_cost + nfc_cost) * quantity
    discount_amount = subtotal * discount
    total = (subtotal - discount_amount).quantize(CENT, rounding=ROUND_HALF_UP)

    return PricingDetails(
        base_price=BASE_PRICE,
        material_cost=material_cost,
        nfc_cost=nfc_cost,
        quantity=quantity,
        discount=discount,
        discount_amount=discount_amount,
        subtotal=subtotal,
        total=total,
    )
