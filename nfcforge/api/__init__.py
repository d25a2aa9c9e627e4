from nfcforge.api.designs import router as designs_router
from nfcforge.api.health import router as health_router
from nfcforge.api.orders import router as orders_router
from nfcforge.api.pricing import router as pricing_router

__all__ = [
    "designs_router",
    "health_router",
    "orders_router",
    "pricing_router",
]
