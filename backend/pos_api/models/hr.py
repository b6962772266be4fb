"""
HR Models: Employee, Attendance, ShiftTemplate, ShiftLog, Payroll, Leave.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, TimestampMixin, new_id
from .enums import EmployeeStatus, LeaveStatus, PayrollType, ShiftStatus, enum_column

if TYPE_CHECKING:
    from .identity import User


class Employee(TimestampMixin, Base):
    """
    Staff member on the HR roster.
    user_id optionally links the employee to a login account.
    """

    __tablename__ = "employee"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[Optional[str]] = mapped_column(
        Text, ForeignKey("app_user.id"), index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role_title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    phone: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[EmployeeStatus] = mapped_column(
        enum_column(EmployeeStatus), nullable=False, default=EmployeeStatus.ACTIVE
    )

    user: Mapped[Optional["User"]] = relationship()


class Attendance(TimestampMixin, Base):
    __tablename__ = "attendance"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        Text, ForeignKey("employee.id"), nullable=False, index=True
    )
    check_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    check_out: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(Text, nullable=False, default="present")
    notes: Mapped[Optional[str]] = mapped_column(Text)


class ShiftTemplate(TimestampMixin, Base):
    """Recurring shift definition; times are wall-clock "HH:MM" strings."""

    __tablename__ = "shift_template"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[str] = mapped_column(Text, nullable=False)
    end_time: Mapped[str] = mapped_column(Text, nullable=False)
    staff_count: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[ShiftStatus] = mapped_column(
        enum_column(ShiftStatus), nullable=False, default=ShiftStatus.ACTIVE
    )


class ShiftLog(TimestampMixin, Base):
    """Worked shift; pauses is a JSON list of {"start": iso, "end": iso | null}."""

    __tablename__ = "shift_log"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        Text, ForeignKey("employee.id"), nullable=False, index=True
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pauses: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)


class Payroll(TimestampMixin, Base):
    __tablename__ = "payroll"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        Text, ForeignKey("employee.id"), nullable=False, index=True
    )
    type: Mapped[PayrollType] = mapped_column(
        enum_column(PayrollType), nullable=False, default=PayrollType.SALARY
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=0)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    note: Mapped[Optional[str]] = mapped_column(Text)


class Leave(TimestampMixin, Base):
    __tablename__ = "leave_request"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(
        Text, ForeignKey("employee.id"), nullable=False, index=True
    )
    from_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    to_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        enum_column(LeaveStatus), nullable=False, default=LeaveStatus.PENDING
    )
    reason: Mapped[Optional[str]] = mapped_column(Text)
