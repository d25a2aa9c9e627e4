"""
Order API endpoints.

Checkout, order lookup, and the payment/fulfillment lifecycle.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nfcforge.api.pricing import PricingResponse
from nfcforge.db import get_session, get_session_factory, list_orders_for_user, order_to_model
from nfcforge.models.design import DesignPayload
from nfcforge.models.order import Order, OrderData, OrderStatus
from nfcforge.services.notifications import Notifier, get_notifier
from nfcforge.services.order_pipeline import OrderPipeline
from nfcforge.services.order_store import SqlOrderStore
from nfcforge.services.payments import PaymentClient, get_payment_client

router = APIRouter(prefix="/orders", tags=["orders"])


class ShippingResponse(BaseModel):
    name: str
    email: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str


class OrderResponse(BaseModel):
    """Response model for a placed order."""

    id: str
    user_id: str
    status: OrderStatus
    quantity: int
    currency: str
    design: DesignPayload
    pricing: PricingResponse
    shipping: ShippingResponse
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            quantity=order.quantity,
            currency=order.currency,
            design=DesignPayload.from_design(order.design),
            pricing=PricingResponse.from_details(order.pricing),
            shipping=ShippingResponse(**order.shipping.to_dict()),
            created_at=order.created_at,
        )


class OrderListResponse(BaseModel):
    user_id: str
    orders: list[OrderResponse]
    count: int


class PaymentIntentResponse(BaseModel):
    """Client secret the storefront uses to confirm payment."""

    order_id: str
    intent_id: str
    client_secret: str
    amount: int = Field(..., description="Amount in minor currency units")
    currency: str


class PaymentCallbackRequest(BaseModel):
    succeeded: bool = Field(..., description="Whether the provider captured the payment")
    intent_id: str | None = None


def get_order_store(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> SqlOrderStore:
    """Dependency that provides the database-backed order store."""
    return SqlOrderStore(session_factory)


def get_order_pipeline(
    store: Annotated[SqlOrderStore, Depends(get_order_store)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
) -> OrderPipeline:
    """Dependency that wires the pipeline to the order store and notifier."""
    return OrderPipeline(store=store, notifier=notifier)


Pipeline = Annotated[OrderPipeline, Depends(get_order_pipeline)]


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(order_data: OrderData, pipeline: Pipeline) -> OrderResponse:
    """
    Place an order.

    The submitted pricing total is checked against a server-side
    recomputation. Validation failures return 422 (409 for a pricing
    mismatch) naming the failing check; storage failures return 503.
    """
    order = await pipeline.create_order(order_data)
    return OrderResponse.from_order(order)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    session: Annotated[AsyncSession, Depends(get_session)],
    user_id: Annotated[str, Query(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> OrderListResponse:
    """Get a user's orders, newest first."""
    rows = await list_orders_for_user(session, user_id, limit=limit)
    orders = [OrderResponse.from_order(order_to_model(row)) for row in rows]
    return OrderListResponse(user_id=user_id, orders=orders, count=len(orders))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, pipeline: Pipeline) -> OrderResponse:
    """Get a placed order. Returns 404 if not found."""
    order = await pipeline.store.get(order_id)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    order_id: str,
    pipeline: Pipeline,
    payments: Annotated[PaymentClient, Depends(get_payment_client)],
) -> PaymentIntentResponse:
    """
    Start payment for a pending order.

    Returns 409 if the order is no longer pending, 502 if the provider fails.
    """
    order = await pipeline.store.get(order_id)
    intent = await payments.create_payment_intent(order)
    return PaymentIntentResponse(
        order_id=order.id,
        intent_id=intent.intent_id,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post("/{order_id}/payment-callback", response_model=OrderResponse)
async def payment_callback(
    order_id: str, request: PaymentCallbackRequest, pipeline: Pipeline
) -> OrderResponse:
    """Record the payment outcome: pending -> paid, or pending -> failed."""
    if request.succeeded:
        order = await pipeline.mark_paid(order_id)
    else:
        order = await pipeline.mark_failed(order_id)
    return OrderResponse.from_order(order)


@router.post("/{order_id}/fulfill", response_model=OrderResponse)
async def fulfill_order(order_id: str, pipeline: Pipeline) -> OrderResponse:
    """Mark a paid order as fulfilled."""
    order = await pipeline.mark_fulfilled(order_id)
    return OrderResponse.from_order(order)
