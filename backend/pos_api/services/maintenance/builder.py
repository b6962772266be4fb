"""
Snapshot builder: reads every operational table into a SystemSnapshot.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import SNAPSHOT_VERSION
from shared.config.logging import maintenance_logger as logger
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
    Waste,
    Zone,
)
from .coercion import format_date
from .snapshot import (
    AttendanceRow,
    CategoryRow,
    DiningTableRow,
    DriverRow,
    EmployeeRow,
    ExpenseRow,
    LeaveRow,
    MaterialRow,
    OrderItemRow,
    OrderRow,
    PayrollRow,
    ProductRow,
    PurchaseItemRow,
    PurchaseRow,
    RecipeItemRow,
    SaleItemRow,
    SaleRow,
    ShiftLogRow,
    ShiftTemplateRow,
    SnapshotData,
    SupplierRow,
    SystemSnapshot,
    TaxRateRow,
    WasteRow,
    ZoneRow,
    summarize_snapshot,
)


def _ordered(db: Session, model: type, *order_by: Any) -> list[Any]:
    """All rows of model, ordered by the given columns then by id."""
    return list(db.scalars(select(model).order_by(*order_by, model.id)).all())


def _num(value: Decimal | float | int | None) -> float:
    return float(value) if value is not None else 0.0


def _enum(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _date(value: datetime) -> str:
    return format_date(value) or ""


def build_system_snapshot(db: Session) -> SystemSnapshot:
    """
    Read the whole operational dataset into a SystemSnapshot.

    Ordering is deterministic so two exports of unchanged data are identical
    apart from exported_at. Reads run one after another on the given
    session rather than concurrently: a Session is not safe to share between
    threads, and one session per query would give up the single consistent
    view. Callers wanting that view run this inside their own transaction.
    """
    categories = [
        CategoryRow(id=c.id, name=c.name, description=c.description)
        for c in _ordered(db, Category, Category.name)
    ]
    materials = [
        MaterialRow(
            id=m.id,
            name=m.name,
            unit=m.unit,
            cost=_num(m.cost),
            stock=_num(m.stock),
            min_stock=_num(m.min_stock),
        )
        for m in _ordered(db, Material, Material.name)
    ]
    products = [
        ProductRow(
            id=p.id,
            name=p.name,
            category_id=p.category_id,
            price=_num(p.price),
            is_active=p.is_active,
            image_url=p.image_url,
        )
        for p in _ordered(db, Product, Product.created_at)
    ]
    recipe_items = [
        RecipeItemRow(
            id=r.id,
            product_id=r.product_id,
            material_id=r.material_id,
            quantity=_num(r.quantity),
        )
        for r in _ordered(db, RecipeItem)
    ]
    suppliers = [
        SupplierRow(id=s.id, name=s.name, phone=s.phone, email=s.email, is_active=s.is_active)
        for s in _ordered(db, Supplier, Supplier.name)
    ]
    purchases = [
        PurchaseRow(
            id=p.id,
            code=p.code,
            supplier_id=p.supplier_id,
            date=_date(p.date),
            total=_num(p.total),
            status=_enum(p.status),
            notes=p.notes,
        )
        for p in _ordered(db, Purchase, Purchase.date)
    ]
    purchase_items = [
        PurchaseItemRow(
            id=i.id,
            purchase_id=i.purchase_id,
            material_id=i.material_id,
            quantity=_num(i.quantity),
            unit_cost=_num(i.unit_cost),
            total_cost=_num(i.total_cost),
        )
        for i in _ordered(db, PurchaseItem)
    ]
    waste = [
        WasteRow(
            id=w.id,
            date=_date(w.date),
            material_id=w.material_id,
            quantity=_num(w.quantity),
            reason=w.reason,
            cost=_num(w.cost),
        )
        for w in _ordered(db, Waste, Waste.date)
    ]
    zones = [
        ZoneRow(
            id=z.id,
            name=z.name,
            limit_km=_num(z.limit_km),
            fee=_num(z.fee),
            min_order=_num(z.min_order),
            status=_enum(z.status),
        )
        for z in _ordered(db, Zone, Zone.name)
    ]
    taxes = [
        TaxRateRow(
            id=t.id,
            name=t.name,
            rate=_num(t.rate),
            is_default=t.is_default,
            is_active=t.is_active,
        )
        for t in _ordered(db, TaxRate, TaxRate.is_default.desc(), TaxRate.name)
    ]
    drivers = [
        DriverRow(
            id=d.id,
            name=d.name,
            phone=d.phone,
            status=d.status,
            active_orders=d.active_orders,
        )
        for d in _ordered(db, Driver, Driver.name)
    ]
    dining_tables = [
        DiningTableRow(id=t.id, name=t.name, number=t.number, is_occupied=t.is_occupied)
        for t in _ordered(db, DiningTable, DiningTable.number)
    ]
    orders = [
        OrderRow(
            id=o.id,
            code=o.code,
            type=_enum(o.type),
            status=_enum(o.status),
            customer_name=o.customer_name,
            zone_id=o.zone_id,
            driver_id=o.driver_id,
            table_id=o.table_id,
            discount=_num(o.discount),
            tax_rate=_num(o.tax_rate),
            tax_amount=_num(o.tax_amount),
            payment=_enum(o.payment),
            notes=o.notes,
            receipt_snapshot=o.receipt_snapshot,
            created_at=_date(o.created_at),
            updated_at=_date(o.updated_at),
        )
        for o in _ordered(db, Order, Order.created_at)
    ]
    order_items = [
        OrderItemRow(
            id=i.id,
            order_id=i.order_id,
            product_id=i.product_id,
            quantity=i.quantity,
            unit_price=_num(i.unit_price),
            total_price=_num(i.total_price),
        )
        for i in _ordered(db, OrderItem)
    ]
    sales = [
        SaleRow(
            id=s.id,
            invoice_no=s.invoice_no,
            order_id=s.order_id,
            date=_date(s.date),
            customer_name=s.customer_name,
            total=_num(s.total),
            status=_enum(s.status),
            notes=s.notes,
        )
        for s in _ordered(db, Sale, Sale.date)
    ]
    sale_items = [
        SaleItemRow(
            id=i.id,
            sale_id=i.sale_id,
            product_id=i.product_id,
            name=i.name,
            quantity=i.quantity,
            unit_price=_num(i.unit_price),
            total_price=_num(i.total_price),
        )
        for i in _ordered(db, SaleItem)
    ]
    expenses = [
        ExpenseRow(
            id=e.id,
            date=_date(e.date),
            title=e.title,
            vendor=e.vendor,
            amount=_num(e.amount),
            notes=e.notes,
        )
        for e in _ordered(db, Expense, Expense.date)
    ]
    employees = [
        EmployeeRow(
            id=e.id,
            user_id=e.user_id,
            name=e.name,
            role_title=e.role_title,
            phone=e.phone,
            status=_enum(e.status),
        )
        for e in _ordered(db, Employee, Employee.created_at)
    ]
    attendance = [
        AttendanceRow(
            id=a.id,
            employee_id=a.employee_id,
            check_in=_date(a.check_in),
            check_out=format_date(a.check_out),
            status=a.status,
            notes=a.notes,
        )
        for a in _ordered(db, Attendance, Attendance.check_in)
    ]
    shift_templates = [
        ShiftTemplateRow(
            id=t.id,
            name=t.name,
            start_time=t.start_time,
            end_time=t.end_time,
            staff_count=t.staff_count,
            status=_enum(t.status),
        )
        for t in _ordered(db, ShiftTemplate, ShiftTemplate.created_at)
    ]
    shift_logs = [
        ShiftLogRow(
            id=s.id,
            employee_id=s.employee_id,
            started_at=_date(s.started_at),
            ended_at=format_date(s.ended_at),
            duration_minutes=s.duration_minutes,
            pauses=s.pauses if s.pauses is not None else [],
        )
        for s in _ordered(db, ShiftLog, ShiftLog.started_at)
    ]
    payroll = [
        PayrollRow(
            id=p.id,
            employee_id=p.employee_id,
            type=_enum(p.type),
            amount=_num(p.amount),
            date=_date(p.date),
            note=p.note,
        )
        for p in _ordered(db, Payroll, Payroll.date)
    ]
    leaves = [
        LeaveRow(
            id=l.id,
            employee_id=l.employee_id,
            from_date=_date(l.from_date),
            to_date=_date(l.to_date),
            status=_enum(l.status),
            reason=l.reason,
        )
        for l in _ordered(db, Leave, Leave.created_at)
    ]

    snapshot = SystemSnapshot(
        version=SNAPSHOT_VERSION,
        exported_at=format_date(datetime.now(timezone.utc)),
        data=SnapshotData(
            categories=categories,
            materials=materials,
            products=products,
            recipe_items=recipe_items,
            suppliers=suppliers,
            purchases=purchases,
            purchase_items=purchase_items,
            waste=waste,
            zones=zones,
            taxes=taxes,
            drivers=drivers,
            dining_tables=dining_tables,
            orders=orders,
            order_items=order_items,
            sales=sales,
            sale_items=sale_items,
            expenses=expenses,
            employees=employees,
            attendance=attendance,
            shift_templates=shift_templates,
            shift_logs=shift_logs,
            payroll=payroll,
            leaves=leaves,
        ),
    )

    logger.info("Snapshot built", **summarize_snapshot(snapshot))
    return snapshot
