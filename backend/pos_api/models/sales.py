"""
Sales Models: Sale (invoice), SaleItem.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, TimestampMixin, new_id
from .enums import SaleStatus, enum_column


class Sale(TimestampMixin, Base):
    """Invoice, optionally issued for a POS order."""

    __tablename__ = "sale"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    invoice_no: Mapped[str] = mapped_column(Text, nullable=False)
    order_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("customer_order.id"), index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    status: Mapped[SaleStatus] = mapped_column(
        enum_column(SaleStatus), nullable=False, default=SaleStatus.DRAFT
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)

    items: Mapped[list["SaleItem"]] = relationship(back_populates="sale")


class SaleItem(TimestampMixin, Base):
    """Invoice line; name is a copy of the product name at invoicing time."""

    __tablename__ = "sale_item"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    sale_id: Mapped[str] = mapped_column(
        Text, ForeignKey("sale.id"), nullable=False, index=True
    )
    product_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("product.id"), index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)

    sale: Mapped["Sale"] = relationship(back_populates="items")
