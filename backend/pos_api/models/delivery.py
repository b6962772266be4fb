"""
Delivery Models: Zone, Driver.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Money, TimestampMixin, new_id
from .enums import ZoneStatus, enum_column


class Zone(TimestampMixin, Base):
    """Delivery zone with its distance limit, fee and minimum order."""

    __tablename__ = "zone"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    limit_km: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=0)
    fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    min_order: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    status: Mapped[ZoneStatus] = mapped_column(
        enum_column(ZoneStatus), nullable=False, default=ZoneStatus.ACTIVE
    )


class Driver(TimestampMixin, Base):
    """
    Delivery driver.
    status is free text ("available", "on route", ...); active_orders is a
    derived counter zeroed by the transactions reset.
    """

    __tablename__ = "driver"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="available")
    active_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
