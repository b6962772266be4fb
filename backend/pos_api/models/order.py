"""
Order Models: DiningTable, Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, TimestampMixin, new_id, utcnow
from .enums import OrderStatus, OrderType, PaymentMethod, enum_column


class DiningTable(TimestampMixin, Base):
    """Physical table in the dining room."""

    # "table" is a reserved SQL keyword
    __tablename__ = "dining_table"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_occupied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Order(Base):
    """
    Customer order taken at the POS.

    created_at/updated_at are business data here (they are carried through
    snapshots verbatim), so the timestamp mixin is not used.
    """

    __tablename__ = "customer_order"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[OrderType] = mapped_column(
        enum_column(OrderType), nullable=False, default=OrderType.DINE_IN
    )
    status: Mapped[OrderStatus] = mapped_column(
        enum_column(OrderStatus), nullable=False, default=OrderStatus.PREPARING
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    zone_id: Mapped[Optional[str]] = mapped_column(Text, ForeignKey("zone.id"), index=True)
    driver_id: Mapped[Optional[str]] = mapped_column(Text, ForeignKey("driver.id"), index=True)
    table_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("dining_table.id"), index=True
    )
    discount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)
    tax_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    payment: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod), nullable=False, default=PaymentMethod.CASH
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
    # Printed receipt as rendered at checkout; opaque to this service
    receipt_snapshot: Mapped[Optional[Any]] = mapped_column(JSON(none_as_null=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    items: Mapped[list["OrderItem"]] = relationship(back_populates="order")


class OrderItem(TimestampMixin, Base):
    __tablename__ = "order_item"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(
        Text, ForeignKey("customer_order.id"), nullable=False, index=True
    )
    # Nullable: the product may have been deleted since the order was taken
    product_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("product.id"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)

    order: Mapped["Order"] = relationship(back_populates="items")
