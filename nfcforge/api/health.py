"""
Health check endpoints.

/health is the liveness probe and touches nothing. /ready reports whether
checkout can work: the orders table must be readable. It also reports the
open designer sessions and which notification and payment backends are
configured.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from nfcforge.api.orders import get_order_store
from nfcforge.config import settings
from nfcforge.services.design_sessions import DesignSessionRegistry, get_session_registry
from nfcforge.services.order_store import SqlOrderStore, StorageError

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness response."""

    status: str
    order_store: str
    stored_orders: int | None = None
    open_design_sessions: int
    notifications: str
    payments: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy", service=settings.app_name)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def ready(
    response: Response,
    store: Annotated[SqlOrderStore, Depends(get_order_store)],
    registry: Annotated[DesignSessionRegistry, Depends(get_session_registry)],
) -> ReadinessResponse:
    """
    Readiness probe.

    Returns 503 if the orders table cannot be read, since no order could
    be placed. Missing email or payment configuration does not block
    readiness: confirmations fall back to the log, and payment intents
    fail on their own.
    """
    backends = {
        "open_design_sessions": len(registry),
        "notifications": "email" if settings.email_service_url else "log",
        "payments": "configured" if settings.payment_api_key else "not configured",
    }
    try:
        stored = await store.count()
    except StorageError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", order_store="unavailable", **backends)
    return ReadinessResponse(
        status="ready", order_store="available", stored_orders=stored, **backends
    )
