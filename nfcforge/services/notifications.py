"""
Order confirmation notifications.

Delivery is fire-and-forget from the order pipeline's point of view:
a NotificationError is logged there and never undoes a stored order.
"""

import logging
from typing import Any, Protocol

import httpx

from nfcforge.config import settings
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.models.order import Order

logger = logging.getLogger(__name__)


class NotificationError(KnownError):
    """Raised when a confirmation could not be delivered."""

    def __init__(self, order_id: str, detail: str | None = None):
        self.order_id = order_id
        super().__init__(
            kind=FailureKind.NOTIFICATION_FAILED,
            message=f"Could not send confirmation for order {order_id}",
            detail=detail,
            status_code=502,
        )


class Notifier(Protocol):
    async def send_order_confirmation(self, order: Order) -> None: ...


def build_confirmation_email(order: Order, sender: str) -> dict[str, Any]:
    """Build the email service payload for an order confirmation."""
    pricing = order.pricing
    lines = [
        f"Hi {order.shipping.name},",
        "",
        f"Thanks for your order {order.id}.",
        "",
        f"Cards: {order.quantity} x {order.design.material.value} "
        f"with {order.design.nfc_type.value} chip",
        f"Subtotal: {pricing.subtotal:.2f} {order.currency.upper()}",
    ]
    if pricing.discount:
        lines.append(f"Volume discount: {pricing.discount:.0%} (-{pricing.discount_amount:.2f})")
    lines += [
        f"Total: {pricing.total:.2f} {order.currency.upper()}",
        "",
        "We'll let you know when your cards ship.",
    ]
    return {
        "from": sender,
        "to": order.shipping.email,
        "subject": f"Order confirmation {order.id}",
        "text": "\n".join(lines),
        "metadata": {"order_id": order.id},
    }


class EmailServiceNotifier:
    """
    Sends confirmation emails through an HTTP email service.

    The service receives a JSON message at `{base_url}/messages`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or settings.email_service_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.email_service_api_key
        self.sender = sender or settings.email_from
        self.timeout = timeout

    async def send_order_confirmation(self, order: Order) -> None:
        """
        Raises:
            NotificationError: If the email service is unreachable or refuses
        """
        payload = build_confirmation_email(order, self.sender)
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/messages", json=payload, headers=headers
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(order.id, detail=str(e)) from e

        logger.info("ORDER_CONFIRMATION_SENT", extra={"order_id": order.id})


class LoggingNotifier:
    """Notifier used when no email service is configured: logs the message."""

    def __init__(self, sender: str | None = None) -> None:
        self.sender = sender or settings.email_from

    async def send_order_confirmation(self, order: Order) -> None:
        payload = build_confirmation_email(order, self.sender)
        logger.info(
            "ORDER_CONFIRMATION_LOGGED",
            extra={"order_id": order.id, "to": payload["to"], "subject": payload["subject"]},
        )


def get_notifier() -> Notifier:
    """Notifier chosen from settings."""
    if settings.email_service_url:
        return EmailServiceNotifier()
    return LoggingNotifier()
