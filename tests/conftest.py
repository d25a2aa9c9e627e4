from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nfcforge.db.database import get_session, get_session_factory
from nfcforge.main import app
from nfcforge.models.db import Base
from nfcforge.models.design import Design, DesignPayload, Material, NfcChipType
from nfcforge.models.order import (
    Order,
    OrderData,
    ShippingInfo,
    ShippingPayload,
    ValidatedOrder,
)
from nfcforge.models.pricing import PricingPayload
from nfcforge.services.design_sessions import DesignSessionRegistry, get_session_registry
from nfcforge.services.notifications import get_notifier
from nfcforge.services.payments import PaymentClient, get_payment_client
from nfcforge.services.pricing import calculate_pricing

PAYMENTS_URL = "https://payments.test/v1"

SHIPPING = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "address_line1": "12 Analytical Way",
    "city": "London",
    "postal_code": "N1 9GU",
    "country": "GB",
}


@pytest.fixture
def metal_design() -> Design:
    """A metal card with the largest chip."""
    return Design(template="modern", material=Material.METAL, nfc_type=NfcChipType.NTAG216)


def build_order_data(
    design: Design | None = None,
    quantity: Any = 1,
    user_id: str | None = "user-123",
    total: Decimal | str | None = None,
    shipping: dict[str, Any] | None = None,
) -> OrderData:
    """Build a checkout payload whose pricing is correct unless `total` is given."""
    design = design or Design()
    valid_quantity = isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1
    pricing = calculate_pricing(design, quantity) if valid_quantity else None
    pricing_payload = PricingPayload.from_details(pricing) if pricing else None
    if total is not None:
        pricing_payload = PricingPayload(total=Decimal(str(total)))
    return OrderData(
        user_id=user_id,
        design=DesignPayload.from_design(design),
        quantity=quantity,
        pricing=pricing_payload,
        shipping=ShippingPayload(**(SHIPPING if shipping is None else shipping)),
    )


@pytest.fixture
def order_data_factory() -> Callable[..., OrderData]:
    return build_order_data


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


def build_order(
    order_id: str = "NFC-20260101-00000000000000aa",
    user_id: str = "user-123",
    design: Design | None = None,
    quantity: int = 1,
    created_at: datetime | None = None,
) -> Order:
    """Build a pending order with correct pricing."""
    design = design or Design()
    validated = ValidatedOrder(
        user_id=user_id,
        design=design,
        quantity=quantity,
        pricing=calculate_pricing(design, quantity),
        shipping=ShippingInfo(**SHIPPING),
    )
    order = Order.from_validated(order_id, validated, "usd")
    if created_at is not None:
        order = replace(order, created_at=created_at)
    return order


@pytest.fixture
def order_factory() -> Callable[..., Order]:
    return build_order


@pytest.fixture
def notifier() -> AsyncMock:
    """Notifier double that records confirmations."""
    mock = AsyncMock()
    mock.send_order_confirmation = AsyncMock(return_value=None)
    return mock


@pytest.fixture
async def client(session_factory, notifier):
    """Provide an async test client wired to the in-memory database."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    registry = DesignSessionRegistry()
    payments = PaymentClient(base_url=PAYMENTS_URL, api_key="sk_test_1")

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_client] = lambda: payments
    app.dependency_overrides[get_session_registry] = lambda: registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
