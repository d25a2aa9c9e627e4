"""
Order Validator: the checkout trust boundary.

validate_order() turns an untrusted OrderData payload into an immutable
ValidatedOrder, or raises OrderValidationError naming the first failing
check. Checks run in a fixed order and stop at the first failure:

1. USER: a user reference is present
2. DESIGN: design present, template set, material/chip supported
3. QUANTITY: positive integer, no larger than the configured maximum
4. PRICING: submitted total equals the server's own recomputation
5. SHIPPING: every required shipping field is filled in

The client-submitted price is never trusted; the ValidatedOrder carries
the recomputed PricingDetails.

Pure function: no I/O, no side effects, safe to retry after fixing input.
"""

import logging

from nfcforge.config import settings
from nfcforge.models.design import Design, InvalidColorError, InvalidConfigurationError
from nfcforge.models.order import (
    REQUIRED_SHIPPING_FIELDS,
    OrderData,
    OrderValidationError,
    PricingMismatchError,
    ShippingInfo,
    ValidatedOrder,
    ValidationCheck,
)
from nfcforge.models.pricing import InvalidQuantityError, PricingDetails
from nfcforge.services.pricing import calculate_pricing, validate_quantity

logger = logging.getLogger(__name__)


def _check_user(order_data: OrderData) -> str:
    if order_data.user_id is None or not order_data.user_id.strip():
        raise OrderValidationError(ValidationCheck.USER, "user reference is required")
    return order_data.user_id.strip()


def _check_design(order_data: OrderData) -> Design:
    if order_data.design is None:
        raise OrderValidationError(ValidationCheck.DESIGN, "design is required")
    if not order_data.design.template.strip():
        raise OrderValidationError(ValidationCheck.DESIGN, "design template is not set")
    if order_data.design.material is None:
        raise OrderValidationError(ValidationCheck.DESIGN, "card material is not set")
    if order_data.design.nfc_type is None:
        raise OrderValidationError(ValidationCheck.DESIGN, "NFC chip type is not set")
    try:
        return order_data.design.to_design()
    except (InvalidConfigurationError, InvalidColorError) as e:
        raise OrderValidationError(ValidationCheck.DESIGN, e.message) from e


def _check_quantity(order_data: OrderData, max_quantity: int) -> int:
    try:
        quantity = validate_quantity(order_data.quantity)
    except InvalidQuantityError as e:
        raise OrderValidationError(ValidationCheck.QUANTITY, e.detail or e.message) from e
    if quantity > max_quantity:
        raise OrderValidationError(
            ValidationCheck.QUANTITY,
            f"quantity {quantity} exceeds the maximum of {max_quantity}",
        )
    return quantity


def _check_pricing(order_data: OrderData, design: Design, quantity: int) -> PricingDetails:
    expected = calculate_pricing(design, quantity)
    if order_data.pricing is None:
        raise OrderValidationError(ValidationCheck.PRICING, "pricing is required")
    if order_data.pricing.total != expected.total:
        raise PricingMismatchError(order_data.pricing.total, expected.total)
    return expected


def _check_shipping(order_data: OrderData) -> ShippingInfo:
    if order_data.shipping is None:
        raise OrderValidationError(ValidationCheck.SHIPPING, "shipping information is required")

    fields = order_data.shipping.model_dump()
    missing = [name for name in REQUIRED_SHIPPING_FIELDS if not (fields.get(name) or "").strip()]
    if missing:
        raise OrderValidationError(
            ValidationCheck.SHIPPING,
            f"missing shipping fields: {', '.join(missing)}",
        )

    return ShippingInfo(**{k: v.strip() if isinstance(v, str) else v for k, v in fields.items()})


def validate_order(order_data: OrderData, max_quantity: int | None = None) -> ValidatedOrder:
    """
    Validate a checkout payload.

    Args:
        order_data: Untrusted client payload
        max_quantity: Policy bound on quantity. Defaults to settings.max_order_quantity.

    Returns:
        Immutable ValidatedOrder carrying the recomputed pricing

    Raises:
        OrderValidationError: First failing check (PricingMismatchError for check 4)
    """
    if max_quantity is None:
        max_quantity = settings.max_order_quantity

    try:
        user_id = _check_user(order_data)
        design = _check_design(order_data)
        quantity = _check_quantity(order_data, max_quantity)
        pricing = _check_pricing(order_data, design, quantity)
        shipping = _check_shipping(order_data)
    except OrderValidationError as e:
        logger.warning(
            "ORDER_VALIDATION_FAILED",
            extra={"check": e.check.value, "reason": e.reason},
        )
        raise

    return ValidatedOrder(
        user_id=user_id,
        design=design,
        quantity=quantity,
        pricing=pricing,
        shipping=shipping,
    )
