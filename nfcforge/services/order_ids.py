"""
Order identifier allocation.

Identifiers come from the OS CSPRNG (64 random bits per id), so concurrent
callers in any number of processes never need to coordinate. The storage
layer's primary key rejects the astronomically unlikely duplicate.

Format: NFC-YYYYMMDD-<16 lowercase hex chars>
"""

import re
import secrets
from datetime import UTC, datetime

ORDER_ID_PREFIX = "NFC"
ORDER_ID_PATTERN = re.compile(r"^NFC-\d{8}-[0-9a-f]{16}$")


def generate_order_id(now: datetime | None = None) -> str:
    """Generate a new, globally unique order identifier."""
    now = now or datetime.now(UTC)
    return f"{ORDER_ID_PREFIX}-{now:%Y%m%d}-{secrets.token_hex(8)}"


def is_order_id(value: str) -> bool:
    """Check that a string has the order identifier shape."""
    return bool(ORDER_ID_PATTERN.match(value))
