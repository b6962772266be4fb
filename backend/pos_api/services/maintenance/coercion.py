"""
Coercion of untrusted JSON values into domain-typed values.

Snapshot files may be hand-edited or come from older releases, so every
helper here is total: bad input degrades to a documented fallback instead
of raising. The conversions follow JavaScript semantics (String(),
Number(), truthiness) because snapshot files are also produced and edited
by the browser client.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Any, TypeVar

from pos_api.models.enums import (
    EmployeeStatus,
    LeaveStatus,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PayrollType,
    PurchaseStatus,
    SaleStatus,
    ShiftStatus,
    ZoneStatus,
)

E = TypeVar("E", bound=Enum)


# =============================================================================
# Scalars
# =============================================================================


def _js_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_js_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def to_text(value: Any, fallback: str = "") -> str:
    """Return strings as-is, None as fallback, anything else stringified."""
    if isinstance(value, str):
        return value
    if value is None:
        return fallback
    return _js_string(value)


def to_nullable_text(value: Any) -> str | None:
    """None stays None; otherwise stringify, mapping the empty string to None."""
    if value is None:
        return None
    text = value if isinstance(value, str) else _js_string(value)
    return text if text else None


def _parse_numeric_text(text: str) -> float:
    stripped = text.strip()
    if not stripped:
        return 0.0
    lowered = stripped.lower()
    for prefix, base in (("0x", 16), ("0o", 8), ("0b", 2)):
        if lowered.startswith(prefix):
            try:
                return float(int(stripped[2:], base))
            except ValueError:
                return math.nan
    # float() accepts spellings Number() rejects
    if "_" in stripped or lowered.lstrip("+-") in ("nan", "inf", "infinity"):
        return math.nan
    try:
        return float(stripped)
    except ValueError:
        return math.nan


def _raw_number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf
    if isinstance(value, str):
        return _parse_numeric_text(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return 0.0
        if len(value) == 1:
            return _parse_numeric_text(_js_string(value[0]))
    return math.nan


def to_number(value: Any) -> float:
    """Numeric coercion; anything non-finite becomes 0."""
    number = _raw_number(value)
    return number if math.isfinite(number) else 0.0


def to_int(value: Any, minimum: int) -> int:
    """Round half up (Math.round) and clamp to a lower bound."""
    return max(minimum, math.floor(to_number(value) + 0.5))


def to_boolean(value: Any) -> bool:
    """JavaScript truthiness: empty containers are truthy, NaN is falsy."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


# =============================================================================
# Dates
# =============================================================================


def parse_date(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 string into an aware UTC datetime.

    Accepts a trailing "Z" and date-only strings; values without an offset
    are taken as UTC. Returns None for anything unparsable.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def format_date(value: datetime | None) -> str | None:
    """Serialize a datetime as "YYYY-MM-DDTHH:MM:SS.mmmZ" (UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Enums
# =============================================================================

# Value an unknown or corrupted enum degrades to
ENUM_FALLBACKS: dict[type[Enum], Enum] = {
    PurchaseStatus: PurchaseStatus.DRAFT,
    ZoneStatus: ZoneStatus.ACTIVE,
    EmployeeStatus: EmployeeStatus.ACTIVE,
    ShiftStatus: ShiftStatus.ACTIVE,
    PayrollType: PayrollType.SALARY,
    LeaveStatus: LeaveStatus.PENDING,
    OrderType: OrderType.DINE_IN,
    OrderStatus: OrderStatus.PREPARING,
    PaymentMethod: PaymentMethod.CASH,
    SaleStatus: SaleStatus.DRAFT,
}


def coerce_enum(enum_cls: type[E], value: Any) -> E:
    """Return the member whose value equals value, else the enum's fallback."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    return ENUM_FALLBACKS[enum_cls]  # type: ignore[return-value]


to_purchase_status = partial(coerce_enum, PurchaseStatus)
to_zone_status = partial(coerce_enum, ZoneStatus)
to_employee_status = partial(coerce_enum, EmployeeStatus)
to_shift_status = partial(coerce_enum, ShiftStatus)
to_payroll_type = partial(coerce_enum, PayrollType)
to_leave_status = partial(coerce_enum, LeaveStatus)
to_order_type = partial(coerce_enum, OrderType)
to_order_status = partial(coerce_enum, OrderStatus)
to_payment_method = partial(coerce_enum, PaymentMethod)
to_sale_status = partial(coerce_enum, SaleStatus)
