"""
NFCForge services.

Pricing, the designer state store, and the order pipeline.
"""

from nfcforge.services.design_store import DesignSnapshot, DesignStore, parse_action
from nfcforge.services.order_pipeline import OrderPipeline
from nfcforge.services.order_validator import validate_order
from nfcforge.services.pricing import calculate_pricing

__all__ = [
    "DesignSnapshot",
    "DesignStore",
    "OrderPipeline",
    "calculate_pricing",
    "parse_action",
    "validate_order",
]
