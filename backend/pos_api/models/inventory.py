"""
Inventory Models: Material, Supplier, Purchase, PurchaseItem, Waste.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, Quantity, TimestampMixin, new_id
from .enums import PurchaseStatus, enum_column


class Material(TimestampMixin, Base):
    """Raw inventory item, tracked in its own unit (kg, l, pcs...)."""

    __tablename__ = "material"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    stock: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=0)
    min_stock: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=0)


class Supplier(TimestampMixin, Base):
    __tablename__ = "supplier"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    purchases: Mapped[list["Purchase"]] = relationship(back_populates="supplier")


class Purchase(TimestampMixin, Base):
    """Purchase order / goods receipt from a supplier."""

    __tablename__ = "purchase"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    supplier_id: Mapped[str] = mapped_column(
        Text, ForeignKey("supplier.id"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    status: Mapped[PurchaseStatus] = mapped_column(
        enum_column(PurchaseStatus), nullable=False, default=PurchaseStatus.DRAFT
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)

    supplier: Mapped["Supplier"] = relationship(back_populates="purchases")
    items: Mapped[list["PurchaseItem"]] = relationship(back_populates="purchase")


class PurchaseItem(TimestampMixin, Base):
    __tablename__ = "purchase_item"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    purchase_id: Mapped[str] = mapped_column(
        Text, ForeignKey("purchase.id"), nullable=False, index=True
    )
    material_id: Mapped[str] = mapped_column(
        Text, ForeignKey("material.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    total_cost: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)

    purchase: Mapped["Purchase"] = relationship(back_populates="items")


class Waste(TimestampMixin, Base):
    """Material written off (spoiled, dropped, expired)."""

    __tablename__ = "waste"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    material_id: Mapped[str] = mapped_column(
        Text, ForeignKey("material.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=0)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    cost: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
