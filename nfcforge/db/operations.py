"""
Database CRUD operations.

Provides async functions for inserting, reading and transitioning orders.
"""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nfcforge.models.db import OrderDB
from nfcforge.models.design import Design
from nfcforge.models.order import Order, OrderStatus, ShippingInfo
from nfcforge.models.pricing import PricingDetails


def order_to_row(order: Order) -> OrderDB:
    """Convert a domain order to a new ORM row."""
    return OrderDB(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        quantity=order.quantity,
        currency=order.currency,
        total=str(order.pricing.total),
        design=order.design.to_dict(),
        pricing=order.pricing.to_dict(),
        shipping=order.shipping.to_dict(),
        created_at=order.created_at,
    )


def order_to_model(row: OrderDB) -> Order:
    """Convert a database order to a domain model."""
    return Order(
        id=row.id,
        user_id=row.user_id,
        design=Design.from_dict(row.design),
        quantity=row.quantity,
        pricing=PricingDetails.from_dict(row.pricing),
        shipping=ShippingInfo.from_dict(row.shipping),
        currency=row.currency,
        status=OrderStatus(row.status),
        created_at=row.created_at,
    )


async def insert_order(session: AsyncSession, order: Order) -> OrderDB:
    """
    Insert a new order.

    Raises IntegrityError if an order with this id already exists.
    """
    row = order_to_row(order)
    session.add(row)
    await session.flush()
    return row


async def get_order(session: AsyncSession, order_id: str) -> OrderDB | None:
    """
    Get an order by id.

    Returns None if no such order exists.
    """
    result = await session.execute(select(OrderDB).where(OrderDB.id == order_id))
    return result.scalar_one_or_none()


async def list_orders_for_user(
    session: AsyncSession, user_id: str, limit: int = 50
) -> list[OrderDB]:
    """Get a user's orders, newest first."""
    result = await session.execute(
        select(OrderDB)
        .where(OrderDB.user_id == user_id)
        .order_by(OrderDB.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def update_order_status(
    session: AsyncSession,
    order_id: str,
    current: OrderStatus,
    target: OrderStatus,
) -> bool:
    """
    Move an order from `current` to `target` status.

    The update only matches while the stored status is still `current`,
    so two racing transitions cannot both succeed.

    Returns True if the row was updated, False otherwise.
    """
    result = await session.execute(
        update(OrderDB)
        .where(OrderDB.id == order_id, OrderDB.status == current.value)
        .values(status=target.value)
    )
    await session.flush()
    return bool(result.rowcount)


async def count_orders(session: AsyncSession) -> int:
    """Count stored orders."""
    result = await session.execute(select(func.count()).select_from(OrderDB))
    return int(result.scalar_one())
