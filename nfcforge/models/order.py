"""
Order domain model.

An Order is an immutable snapshot of a Design and its PricingDetails,
submitted for payment and fulfillment. Editing the live designer after
checkout never touches a placed order: the order holds its own frozen
copies, not references.

Status lifecycle:

    pending ──► paid ──► fulfilled
       │
       └──► failed

`fulfilled` and `failed` are terminal.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from nfcforge.models.design import Design, DesignPayload
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.models.pricing import PricingDetails, PricingPayload


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FULFILLED = "fulfilled"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.FAILED}),
    OrderStatus.PAID: frozenset({OrderStatus.FULFILLED}),
    OrderStatus.FULFILLED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


class ValidationCheck(str, Enum):
    """Order validator checks, in evaluation order."""

    USER = "user"
    DESIGN = "design"
    QUANTITY = "quantity"
    PRICING = "pricing"
    SHIPPING = "shipping"


REQUIRED_SHIPPING_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "address_line1",
    "city",
    "postal_code",
    "country",
)


# =============================================================================
# ERRORS
# =============================================================================


class OrderValidationError(KnownError):
    """
    Raised when a checkout payload fails one of the validator checks.

    `check` names the first failing check.
    """

    def __init__(
        self,
        check: ValidationCheck,
        reason: str,
        kind: FailureKind = FailureKind.VALIDATION_FAILED,
        suggestion: str | None = None,
        status_code: int = 422,
    ):
        self.check = check
        self.reason = reason
        super().__init__(
            kind=kind,
            message=f"Order validation failed ({check.value}): {reason}",
            detail=f"check={check.value}",
            suggestion=suggestion,
            status_code=status_code,
        )


class PricingMismatchError(OrderValidationError):
    """
    Raised when a submitted total disagrees with the recomputed total.

    Carries the expected total so the client can re-derive its price
    instead of retrying blindly.
    """

    def __init__(self, submitted_total: Any, expected_total: Any):
        self.submitted_total = submitted_total
        self.expected_total = expected_total
        super().__init__(
            check=ValidationCheck.PRICING,
            reason=f"submitted total {submitted_total} does not match {expected_total}",
            kind=FailureKind.PRICING_MISMATCH,
            suggestion="Refresh the price for this design and submit again.",
            status_code=409,
        )


class InvalidStatusTransitionError(KnownError):
    """Raised when an order status change is not allowed by the lifecycle."""

    def __init__(self, current: OrderStatus, target: OrderStatus):
        self.current = current
        self.target = target
        super().__init__(
            kind=FailureKind.INVALID_TRANSITION,
            message=f"Cannot move order from {current.value} to {target.value}",
            status_code=409,
        )


class OrderNotFoundError(KnownError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Order not found: {order_id}",
            status_code=404,
        )


def transition(current: OrderStatus, target: OrderStatus) -> OrderStatus:
    """
    Validate a status change and return the new status.

    Raises:
        InvalidStatusTransitionError: If target is not reachable from current
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current, target)
    return target


# =============================================================================
# DOMAIN TYPES
# =============================================================================


@dataclass(frozen=True)
class ShippingInfo:
    name: str
    email: str
    address_line1: str
    city: str
    postal_code: str
    country: str
    address_line2: str | None = None
    state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShippingInfo":
        return cls(**data)


@dataclass(frozen=True)
class ValidatedOrder:
    """
    A checkout payload that passed every validator check.

    `pricing` is the server-side recomputation, never the client copy.
    """

    user_id: str
    design: Design
    quantity: int
    pricing: PricingDetails
    shipping: ShippingInfo


@dataclass(frozen=True)
class Order:
    """A placed order. Status changes produce new Order values."""

    id: str
    user_id: str
    design: Design
    quantity: int
    pricing: PricingDetails
    shipping: ShippingInfo
    currency: str
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_validated(
        cls, order_id: str, validated: ValidatedOrder, currency: str
    ) -> "Order":
        return cls(
            id=order_id,
            user_id=validated.user_id,
            design=validated.design,
            quantity=validated.quantity,
            pricing=validated.pricing,
            shipping=validated.shipping,
            currency=currency,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def with_status(self, target: OrderStatus) -> "Order":
        """
        Return a copy in the target status.

        Raises:
            InvalidStatusTransitionError: If the lifecycle forbids the change
        """
        return replace(self, status=transition(self.status, target))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "design": self.design.to_dict(),
            "quantity": self.quantity,
            "pricing": self.pricing.to_dict(),
            "shipping": self.shipping.to_dict(),
            "currency": self.currency,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


# =============================================================================
# WIRE PAYLOADS
# =============================================================================


class ShippingPayload(BaseModel):
    """Shipping details as submitted. Completeness is checked by the validator."""

    name: str | None = None
    email: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class OrderData(BaseModel):
    """
    Untrusted checkout payload.

    Every field is optional at the schema level so that the validator,
    not the schema, decides which check failed first.
    """

    user_id: str | None = Field(default=None, description="Purchasing user reference")
    design: DesignPayload | None = None
    quantity: Any = Field(default=None, description="Number of cards")
    pricing: PricingPayload | None = Field(
        default=None,
        description="Client-computed pricing; the total is verified server-side",
    )
    shipping: ShippingPayload | None = None
