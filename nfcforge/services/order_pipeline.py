"""
Order Creation Pipeline.

create_order() is the only way an order comes into existence:

1. validate_order(): failure propagates unchanged, nothing stored
2. generate_order_id(): before any persistence call
3. store.save(order): status pending; StorageError is fatal
4. notifier.send_...(): any failure is logged, not raised

Persistence completes before notification is attempted. There is no retry
loop here; retries belong to the store.

Status changes after creation (paid, fulfilled, failed) go through
mark_paid / mark_fulfilled / mark_failed, which enforce the lifecycle.
"""

import logging
from collections.abc import Callable

from nfcforge.config import settings
from nfcforge.models.order import Order, OrderData, OrderStatus
from nfcforge.services.notifications import NotificationError, Notifier
from nfcforge.services.order_ids import generate_order_id
from nfcforge.services.order_store import OrderStore
from nfcforge.services.order_validator import validate_order

logger = logging.getLogger(__name__)


class OrderPipeline:
    """
    Validates, persists and announces new orders.

    Args:
        store: Persistence collaborator
        notifier: Confirmation collaborator
        id_factory: Order id source; must be collision-free across callers
        currency: Currency recorded on new orders
        max_quantity: Quantity policy bound passed to the validator
    """

    def __init__(
        self,
        store: OrderStore,
        notifier: Notifier,
        id_factory: Callable[[], str] = generate_order_id,
        currency: str | None = None,
        max_quantity: int | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.id_factory = id_factory
        self.currency = currency or settings.currency
        self.max_quantity = max_quantity

    async def create_order(self, order_data: OrderData) -> Order:
        """
        Create and persist an order from a checkout payload.

        Raises:
            OrderValidationError: Payload failed validation (nothing stored)
            StorageError: Persistence failed (nothing reachable)
        """
        validated = validate_order(order_data, max_quantity=self.max_quantity)

        order = Order.from_validated(self.id_factory(), validated, self.currency)

        await self.store.save(order)
        logger.info(
            "ORDER_CREATED",
            extra={
                "order_id": order.id,
                "user_id": order.user_id,
                "quantity": order.quantity,
                "total": str(order.pricing.total),
            },
        )

        try:
            await self.notifier.send_order_confirmation(order)
        except NotificationError as e:
            logger.warning(
                "ORDER_CONFIRMATION_FAILED",
                extra={"order_id": order.id, "error": e.detail or e.message},
            )
        except Exception:
            # The order is already stored; a broken notifier must not fail checkout
            logger.exception("ORDER_CONFIRMATION_FAILED", extra={"order_id": order.id})

        return order

    async def mark_paid(self, order_id: str) -> Order:
        """Record a successful payment. Only pending orders can be paid."""
        return await self._transition(order_id, OrderStatus.PAID)

    async def mark_failed(self, order_id: str) -> Order:
        """Record a failed payment or cancellation of a pending order."""
        return await self._transition(order_id, OrderStatus.FAILED)

    async def mark_fulfilled(self, order_id: str) -> Order:
        """Record fulfillment of a paid order."""
        return await self._transition(order_id, OrderStatus.FULFILLED)

    async def _transition(self, order_id: str, target: OrderStatus) -> Order:
        order = await self.store.set_status(order_id, target)
        logger.info(
            "ORDER_STATUS_CHANGED",
            extra={"order_id": order_id, "status": target.value},
        )
        return order
