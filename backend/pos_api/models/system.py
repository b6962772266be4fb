"""
System Models: Branch, BrandingSettings, SystemSettings, BackupRecord, AuditLog.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id
from .enums import BackupStatus, enum_column

if TYPE_CHECKING:
    from .identity import User


class Branch(TimestampMixin, Base):
    __tablename__ = "branch"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)


class BrandingSettings(TimestampMixin, Base):
    __tablename__ = "branding_settings"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    primary_color: Mapped[Optional[str]] = mapped_column(Text)


class SystemSettings(TimestampMixin, Base):
    """
    Singleton row (id "system").
    setup_completed_at is None until first-run setup finishes; factory reset
    clears it to send the application back into setup.
    """

    __tablename__ = "system_settings"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    setup_completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class BackupRecord(TimestampMixin, Base):
    """
    Stored snapshot. The snapshot body lives in a file named
    <reference>.json, or inline in payload for records created that way.
    """

    __tablename__ = "backup_record"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    reference: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    status: Mapped[BackupStatus] = mapped_column(
        enum_column(BackupStatus), nullable=False, default=BackupStatus.RUNNING
    )
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    storage_path: Mapped[Optional[str]] = mapped_column(Text)
    payload: Mapped[Optional[Any]] = mapped_column(JSON(none_as_null=True))
    note: Mapped[Optional[str]] = mapped_column(Text)
    restored_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_by_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("app_user.id"), index=True
    )

    created_by: Mapped[Optional["User"]] = relationship()


class AuditLog(TimestampMixin, Base):
    """Records who changed what; written by the CRUD services."""

    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("app_user.id"), index=True
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str] = mapped_column(Text, nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(Text)
    details: Mapped[Optional[Any]] = mapped_column(JSON(none_as_null=True))
