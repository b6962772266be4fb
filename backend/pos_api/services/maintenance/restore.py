"""
Restore engine: replaces all operational data with the content of a snapshot.

The restore is all-or-nothing. Inside one transaction the operational tables
are cleared, then every collection is inserted parents-first. A row whose
required reference does not point at a row inserted earlier in the same
restore, or whose required date does not parse, is dropped instead of
failing the restore; the RestoreReport says how many and why.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from shared.config.logging import maintenance_logger as logger
from shared.infrastructure.db import atomic
from pos_api.models import (
    Attendance,
    Category,
    DiningTable,
    Driver,
    Employee,
    Expense,
    Leave,
    Material,
    Order,
    OrderItem,
    Payroll,
    Product,
    Purchase,
    PurchaseItem,
    RecipeItem,
    Sale,
    SaleItem,
    ShiftLog,
    ShiftTemplate,
    Supplier,
    TaxRate,
    User,
    Waste,
    Zone,
)
from .coercion import (
    parse_date,
    to_employee_status,
    to_leave_status,
    to_order_status,
    to_order_type,
    to_payment_method,
    to_payroll_type,
    to_purchase_status,
    to_sale_status,
    to_shift_status,
    to_zone_status,
)
from .reset import clear_operational
from .snapshot import SystemSnapshot


class DropReason(str, Enum):
    MISSING_REFERENCE = "missing_reference"
    INVALID_DATE = "invalid_date"
    DUPLICATE_ID = "duplicate_id"


@dataclass
class CollectionReport:
    inserted: int = 0
    dropped: Counter = field(default_factory=Counter)


@dataclass
class RestoreReport:
    """Per-collection outcome of a restore, keyed by snapshot collection name."""

    collections: dict[str, CollectionReport] = field(default_factory=dict)

    def collection(self, key: str) -> CollectionReport:
        return self.collections.setdefault(key, CollectionReport())

    @property
    def total_inserted(self) -> int:
        return sum(entry.inserted for entry in self.collections.values())

    @property
    def total_dropped(self) -> int:
        return sum(sum(entry.dropped.values()) for entry in self.collections.values())

    def as_dict(self) -> dict[str, Any]:
        return {
            "inserted": {key: entry.inserted for key, entry in self.collections.items()},
            "dropped": {
                key: {reason.value: count for reason, count in entry.dropped.items()}
                for key, entry in self.collections.items()
                if entry.dropped
            },
            "totalInserted": self.total_inserted,
            "totalDropped": self.total_dropped,
        }


# Either the column values to insert or the reason the row was dropped
RowOutcome = dict[str, Any] | DropReason


def _bulk_insert(db: Session, model: type, rows: list[dict[str, Any]]) -> None:
    """One multi-row INSERT. An empty batch issues no statement."""
    if rows:
        db.execute(insert(model), rows)


def _restore_collection(
    db: Session,
    report: RestoreReport,
    key: str,
    model: type,
    rows: Iterable[Any],
    convert: Callable[[Any], RowOutcome],
) -> set[str]:
    """Convert, filter and insert one collection; returns the inserted ids."""
    entry = report.collection(key)
    inserted_ids: set[str] = set()
    values: list[dict[str, Any]] = []

    for row in rows:
        if row.id in inserted_ids:
            entry.dropped[DropReason.DUPLICATE_ID] += 1
            continue
        outcome = convert(row)
        if isinstance(outcome, DropReason):
            entry.dropped[outcome] += 1
            continue
        inserted_ids.add(row.id)
        values.append(outcome)

    _bulk_insert(db, model, values)
    entry.inserted = len(values)
    return inserted_ids


def _optional_ref(value: str | None, valid_ids: set[str]) -> bool:
    return value is None or value in valid_ids


def _insert_snapshot(db: Session, snapshot: SystemSnapshot, report: RestoreReport) -> None:
    data = snapshot.data
    restore = partial(_restore_collection, db, report)

    # Catalog and inventory
    category_ids = restore(
        "categories",
        Category,
        data.categories,
        lambda r: {"id": r.id, "name": r.name, "description": r.description},
    )
    material_ids = restore(
        "materials",
        Material,
        data.materials,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "unit": r.unit,
            "cost": r.cost,
            "stock": r.stock,
            "min_stock": r.min_stock,
        },
    )

    def product(r):
        if r.category_id not in category_ids:
            return DropReason.MISSING_REFERENCE
        return {
            "id": r.id,
            "name": r.name,
            "category_id": r.category_id,
            "price": r.price,
            "is_active": r.is_active,
            "image_url": r.image_url,
        }

    product_ids = restore("products", Product, data.products, product)

    def recipe_item(r):
        if r.product_id not in product_ids or r.material_id not in material_ids:
            return DropReason.MISSING_REFERENCE
        return {
            "id": r.id,
            "product_id": r.product_id,
            "material_id": r.material_id,
            "quantity": r.quantity,
        }

    restore("recipeItems", RecipeItem, data.recipe_items, recipe_item)

    supplier_ids = restore(
        "suppliers",
        Supplier,
        data.suppliers,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "phone": r.phone,
            "email": r.email,
            "is_active": r.is_active,
        },
    )

    def purchase(r):
        if r.supplier_id not in supplier_ids:
            return DropReason.MISSING_REFERENCE
        date = parse_date(r.date)
        if date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "code": r.code,
            "supplier_id": r.supplier_id,
            "date": date,
            "total": r.total,
            "status": to_purchase_status(r.status),
            "notes": r.notes,
        }

    purchase_ids = restore("purchases", Purchase, data.purchases, purchase)

    def purchase_item(r):
        if r.purchase_id not in purchase_ids or r.material_id not in material_ids:
            return DropReason.MISSING_REFERENCE
        return {
            "id": r.id,
            "purchase_id": r.purchase_id,
            "material_id": r.material_id,
            "quantity": r.quantity,
            "unit_cost": r.unit_cost,
            "total_cost": r.total_cost,
        }

    restore("purchaseItems", PurchaseItem, data.purchase_items, purchase_item)

    def waste(r):
        if r.material_id not in material_ids:
            return DropReason.MISSING_REFERENCE
        date = parse_date(r.date)
        if date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "date": date,
            "material_id": r.material_id,
            "quantity": r.quantity,
            "reason": r.reason,
            "cost": r.cost,
        }

    restore("waste", Waste, data.waste, waste)

    # Delivery, taxes and dining room
    zone_ids = restore(
        "zones",
        Zone,
        data.zones,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "limit_km": r.limit_km,
            "fee": r.fee,
            "min_order": r.min_order,
            "status": to_zone_status(r.status),
        },
    )
    restore(
        "taxes",
        TaxRate,
        data.taxes,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "rate": r.rate,
            "is_default": r.is_default,
            "is_active": r.is_active,
        },
    )
    driver_ids = restore(
        "drivers",
        Driver,
        data.drivers,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "phone": r.phone,
            "status": r.status,
            "active_orders": r.active_orders,
        },
    )
    table_ids = restore(
        "diningTables",
        DiningTable,
        data.dining_tables,
        lambda r: {"id": r.id, "name": r.name, "number": r.number, "is_occupied": r.is_occupied},
    )

    # HR
    user_ids = set(db.scalars(select(User.id)).all())
    employee_ids = restore(
        "employees",
        Employee,
        data.employees,
        lambda r: {
            "id": r.id,
            "user_id": r.user_id if r.user_id in user_ids else None,
            "name": r.name,
            "role_title": r.role_title,
            "phone": r.phone,
            "status": to_employee_status(r.status),
        },
    )

    def attendance(r):
        if r.employee_id not in employee_ids:
            return DropReason.MISSING_REFERENCE
        check_in = parse_date(r.check_in)
        check_out = parse_date(r.check_out) if r.check_out else None
        if check_in is None or (r.check_out and check_out is None):
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "employee_id": r.employee_id,
            "check_in": check_in,
            "check_out": check_out,
            "status": r.status,
            "notes": r.notes,
        }

    restore("attendance", Attendance, data.attendance, attendance)

    restore(
        "shiftTemplates",
        ShiftTemplate,
        data.shift_templates,
        lambda r: {
            "id": r.id,
            "name": r.name,
            "start_time": r.start_time,
            "end_time": r.end_time,
            "staff_count": r.staff_count,
            "status": to_shift_status(r.status),
        },
    )

    def shift_log(r):
        if r.employee_id not in employee_ids:
            return DropReason.MISSING_REFERENCE
        started_at = parse_date(r.started_at)
        ended_at = parse_date(r.ended_at) if r.ended_at else None
        if started_at is None or (r.ended_at and ended_at is None):
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "employee_id": r.employee_id,
            "started_at": started_at,
            "ended_at": ended_at,
            "duration_minutes": r.duration_minutes,
            "pauses": r.pauses if r.pauses is not None else [],
        }

    restore("shiftLogs", ShiftLog, data.shift_logs, shift_log)

    def payroll(r):
        if r.employee_id not in employee_ids:
            return DropReason.MISSING_REFERENCE
        date = parse_date(r.date)
        if date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "employee_id": r.employee_id,
            "type": to_payroll_type(r.type),
            "amount": r.amount,
            "date": date,
            "note": r.note,
        }

    restore("payroll", Payroll, data.payroll, payroll)

    def leave(r):
        if r.employee_id not in employee_ids:
            return DropReason.MISSING_REFERENCE
        from_date = parse_date(r.from_date)
        to_date = parse_date(r.to_date)
        if from_date is None or to_date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "employee_id": r.employee_id,
            "from_date": from_date,
            "to_date": to_date,
            "status": to_leave_status(r.status),
            "reason": r.reason,
        }

    restore("leaves", Leave, data.leaves, leave)

    # Orders and sales
    def order(r):
        if not (
            _optional_ref(r.zone_id, zone_ids)
            and _optional_ref(r.driver_id, driver_ids)
            and _optional_ref(r.table_id, table_ids)
        ):
            return DropReason.MISSING_REFERENCE
        created_at = parse_date(r.created_at)
        updated_at = parse_date(r.updated_at)
        if created_at is None or updated_at is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "code": r.code,
            "type": to_order_type(r.type),
            "status": to_order_status(r.status),
            "customer_name": r.customer_name,
            "zone_id": r.zone_id,
            "driver_id": r.driver_id,
            "table_id": r.table_id,
            "discount": r.discount,
            "tax_rate": r.tax_rate,
            "tax_amount": r.tax_amount,
            "payment": to_payment_method(r.payment),
            "notes": r.notes,
            "receipt_snapshot": r.receipt_snapshot,
            "created_at": created_at,
            "updated_at": updated_at,
        }

    order_ids = restore("orders", Order, data.orders, order)

    def order_item(r):
        if r.order_id not in order_ids or not _optional_ref(r.product_id, product_ids):
            return DropReason.MISSING_REFERENCE
        return {
            "id": r.id,
            "order_id": r.order_id,
            "product_id": r.product_id,
            "quantity": r.quantity,
            "unit_price": r.unit_price,
            "total_price": r.total_price,
        }

    restore("orderItems", OrderItem, data.order_items, order_item)

    def sale(r):
        if not _optional_ref(r.order_id, order_ids):
            return DropReason.MISSING_REFERENCE
        date = parse_date(r.date)
        if date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "invoice_no": r.invoice_no,
            "order_id": r.order_id,
            "date": date,
            "customer_name": r.customer_name,
            "total": r.total,
            "status": to_sale_status(r.status),
            "notes": r.notes,
        }

    sale_ids = restore("sales", Sale, data.sales, sale)

    def sale_item(r):
        if r.sale_id not in sale_ids or not _optional_ref(r.product_id, product_ids):
            return DropReason.MISSING_REFERENCE
        return {
            "id": r.id,
            "sale_id": r.sale_id,
            "product_id": r.product_id,
            "name": r.name,
            "quantity": r.quantity,
            "unit_price": r.unit_price,
            "total_price": r.total_price,
        }

    restore("saleItems", SaleItem, data.sale_items, sale_item)

    def expense(r):
        date = parse_date(r.date)
        if date is None:
            return DropReason.INVALID_DATE
        return {
            "id": r.id,
            "date": date,
            "title": r.title,
            "vendor": r.vendor,
            "amount": r.amount,
            "notes": r.notes,
        }

    restore("expenses", Expense, data.expenses, expense)


def restore_system_snapshot(db: Session, snapshot: SystemSnapshot) -> RestoreReport:
    """
    Replace all operational data with the snapshot's content atomically.

    Users and other identity data are left alone; employees pointing at a
    user that does not exist here are restored unlinked. Any storage error
    rolls the whole restore back, leaving the previous data in place.
    """
    report = RestoreReport()

    with atomic(db):
        clear_operational(db)
        _insert_snapshot(db, snapshot, report)

    if report.total_dropped:
        logger.warning(
            "Snapshot restored with dropped rows",
            total_inserted=report.total_inserted,
            dropped=report.as_dict()["dropped"],
        )
    else:
        logger.info("Snapshot restored", total_inserted=report.total_inserted)
    return report
