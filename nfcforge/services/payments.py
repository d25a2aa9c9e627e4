"""
Payment provider client.

The engine hands the provider only what it needs: order id, total and
currency. The provider returns a client secret that the storefront uses
to confirm the card payment on its side. Payment outcome comes back
through the payment callback endpoint, not through this client.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import httpx

from nfcforge.config import settings
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.models.order import InvalidStatusTransitionError, Order, OrderStatus

logger = logging.getLogger(__name__)


class PaymentError(KnownError):
    """Raised when the payment provider rejects or cannot be reached."""

    def __init__(self, order_id: str, detail: str | None = None):
        self.order_id = order_id
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="Payment could not be started. Please try again.",
            detail=detail,
            status_code=502,
        )


@dataclass(frozen=True)
class PaymentIntent:
    intent_id: str
    client_secret: str
    amount: int
    currency: str


def amount_in_minor_units(total: Decimal) -> int:
    """Convert a currency amount to integer cents."""
    return int((total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentClient:
    """
    Client for the payment provider's payment-intent API.

    Uses form-encoded requests with bearer auth, as Stripe-compatible
    providers expect.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.base_url = (base_url or settings.payment_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.payment_api_key
        self.timeout = timeout

    async def create_payment_intent(self, order: Order) -> PaymentIntent:
        """
        Create a payment intent for a pending order.

        Raises:
            InvalidStatusTransitionError: If the order is not pending
            PaymentError: If the provider request fails
        """
        if order.status != OrderStatus.PENDING:
            raise InvalidStatusTransitionError(order.status, OrderStatus.PAID)

        amount = amount_in_minor_units(order.pricing.total)
        form = {
            "amount": str(amount),
            "currency": order.currency,
            "metadata[order_id]": order.id,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/payment_intents",
                    data=form,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Idempotency-Key": f"intent-{order.id}",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(
                "PAYMENT_INTENT_FAILED", extra={"order_id": order.id, "error": str(e)}
            )
            raise PaymentError(order.id, detail=str(e)) from e

        try:
            intent = PaymentIntent(
                intent_id=data["id"],
                client_secret=data["client_secret"],
                amount=amount,
                currency=order.currency,
            )
        except (KeyError, TypeError) as e:
            raise PaymentError(order.id, detail="malformed provider response") from e

        logger.info(
            "PAYMENT_INTENT_CREATED",
            extra={"order_id": order.id, "intent_id": intent.intent_id, "amount": amount},
        )
        return intent


_client: PaymentClient | None = None


def get_payment_client() -> PaymentClient:
    """Singleton PaymentClient instance."""
    global _client
    if _client is None:
        _client = PaymentClient()
    return _client
