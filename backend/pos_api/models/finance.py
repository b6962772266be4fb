"""
Finance Models: Expense, TaxRate.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Money, TimestampMixin, new_id


class Expense(TimestampMixin, Base):
    __tablename__ = "expense"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    vendor: Mapped[Optional[str]] = mapped_column(Text)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)


class TaxRate(TimestampMixin, Base):
    """Configured tax rate (percent). At most one is expected to be the default."""

    __tablename__ = "tax_rate"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
