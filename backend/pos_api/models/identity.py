"""
Identity Models: User, Role, Permission, RolePermission, UserRole,
UserSession, Invite.

These tables belong to the authentication subsystem. Maintenance code only
reads User ids (restore) and wipes them all (factory reset).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, new_id


class User(TimestampMixin, Base):
    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Role(TimestampMixin, Base):
    __tablename__ = "role"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)


class Permission(Base):
    """Static permission catalogue ("backup:manage", ...). Survives factory reset."""

    __tablename__ = "permission"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)


class RolePermission(Base):
    __tablename__ = "role_permission"

    role_id: Mapped[str] = mapped_column(Text, ForeignKey("role.id"), primary_key=True)
    permission_id: Mapped[str] = mapped_column(
        Text, ForeignKey("permission.id"), primary_key=True
    )


class UserRole(Base):
    __tablename__ = "user_role"

    user_id: Mapped[str] = mapped_column(Text, ForeignKey("app_user.id"), primary_key=True)
    role_id: Mapped[str] = mapped_column(Text, ForeignKey("role.id"), primary_key=True)


class UserSession(TimestampMixin, Base):
    __tablename__ = "user_session"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Text, ForeignKey("app_user.id"), nullable=False, index=True
    )
    token_hash: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Invite(TimestampMixin, Base):
    __tablename__ = "invite"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    role_id: Mapped[Optional[str]] = mapped_column(Text, ForeignKey("role.id"))
    invited_by_id: Mapped[Optional[str]] = mapped_column(Text, ForeignKey("app_user.id"))
    token_hash: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
