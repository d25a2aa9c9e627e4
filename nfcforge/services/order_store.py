"""
Order persistence collaborator.

The order pipeline only needs `save(order)`; status changes and reads go
through the same store so the lifecycle rules live in one place.

INVARIANTS:
- save() never overwrites: a second save with the same id raises
  DuplicateOrderError
- Any backend failure surfaces as StorageError; the engine does not retry
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nfcforge.db.database import transaction
from nfcforge.db.operations import (
    count_orders,
    get_order,
    insert_order,
    order_to_model,
    update_order_status,
)
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.models.order import (
    InvalidStatusTransitionError,
    Order,
    OrderNotFoundError,
    OrderStatus,
)

logger = logging.getLogger(__name__)

STORAGE_FAILURE_MESSAGE = "Your order could not be placed. Please try again."


class StorageError(KnownError):
    """
    Raised when the order store cannot complete an operation.

    The user-facing message is deliberately generic: the cause is not
    something the customer can act on.
    """

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.STORAGE_ERROR,
            message=STORAGE_FAILURE_MESSAGE,
            detail=detail,
            suggestion="Wait a moment and submit the order again.",
            status_code=503,
        )


class DuplicateOrderError(StorageError):
    """Raised when saving an order whose id is already stored."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(detail=f"order id already exists: {order_id}")


@dataclass(frozen=True)
class StoredOrder:
    """Acknowledgement returned by a successful save."""

    order: Order
    stored_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class OrderStore(Protocol):
    async def save(self, order: Order) -> StoredOrder: ...

    async def get(self, order_id: str) -> Order: ...

    async def set_status(self, order_id: str, target: OrderStatus) -> Order: ...


class InMemoryOrderStore:
    """
    Process-local order store for development and tests.

    Thread-safe; ids are unique keys.
    """

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._orders)

    async def save(self, order: Order) -> StoredOrder:
        with self._lock:
            if order.id in self._orders:
                raise DuplicateOrderError(order.id)
            self._orders[order.id] = order
        return StoredOrder(order=order)

    async def get(self, order_id: str) -> Order:
        try:
            return self._orders[order_id]
        except KeyError:
            raise OrderNotFoundError(order_id) from None

    async def set_status(self, order_id: str, target: OrderStatus) -> Order:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            updated = order.with_status(target)
            self._orders[order_id] = updated
        return updated


class SqlOrderStore:
    """
    Order store backed by the async SQLAlchemy session factory.

    Each call runs in its own transaction, committed before returning.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, order: Order) -> StoredOrder:
        try:
            async with transaction(self._session_factory) as session:
                await insert_order(session, order)
        except IntegrityError as e:
            raise DuplicateOrderError(order.id) from e
        except SQLAlchemyError as e:
            logger.exception("ORDER_SAVE_FAILED", extra={"order_id": order.id})
            raise StorageError(detail=type(e).__name__) from e
        return StoredOrder(order=order)

    async def get(self, order_id: str) -> Order:
        try:
            async with self._session_factory() as session:
                row = await get_order(session, order_id)
        except SQLAlchemyError as e:
            raise StorageError(detail=type(e).__name__) from e
        if row is None:
            raise OrderNotFoundError(order_id)
        return order_to_model(row)

    async def set_status(self, order_id: str, target: OrderStatus) -> Order:
        order = await self.get(order_id)
        updated = order.with_status(target)
        try:
            async with transaction(self._session_factory) as session:
                changed = await update_order_status(session, order_id, order.status, target)
        except SQLAlchemyError as e:
            raise StorageError(detail=type(e).__name__) from e
        if not changed:
            # Another writer moved the order first; report against what is stored now
            latest = await self.get(order_id)
            raise InvalidStatusTransitionError(latest.status, target)
        return updated

    async def count(self) -> int:
        """
        Number of stored orders. Used by the readiness probe.

        Raises:
            StorageError: If the orders table cannot be read
        """
        try:
            async with self._session_factory() as session:
                return await count_orders(session)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(detail=type(e).__name__) from e
