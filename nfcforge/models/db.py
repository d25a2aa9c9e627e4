"""
SQLAlchemy ORM models for persistent storage.

Orders store their design, pricing and shipping snapshots as JSON.
Monetary amounts inside the pricing JSON are decimal strings.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class OrderDB(Base):
    """
    A placed order.

    The primary key is the application-generated order id, so a second
    insert with the same id fails instead of overwriting.
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[str] = mapped_column(String(20), index=True)
    quantity: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3))
    total: Mapped[str] = mapped_column(String(32))

    design: Mapped[dict[str, Any]] = mapped_column(JSON)
    pricing: Mapped[dict[str, Any]] = mapped_column(JSON)
    shipping: Mapped[dict[str, Any]] = mapped_column(JSON)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<OrderDB(id={self.id}, status={self.status})>"
