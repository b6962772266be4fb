"""
System snapshot schema and parser.

A snapshot is the versioned, self-contained export of all operational data
(no users, roles, branding or system configuration). On the wire it looks
like:

    {
      "version": 1,
      "exportedAt": "2024-01-05T10:00:00.000Z",
      "data": {"categories": [...], "materials": [...], ...}
    }

The parser also accepts the 22 collections placed directly at the root.
Row values stay in transport form (ISO date strings, raw enum text); the
restore engine converts them when inserting.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.config.constants import SNAPSHOT_VERSION
from .coercion import (
    format_date,
    to_boolean,
    to_int,
    to_nullable_text,
    to_number,
    to_text,
)


class SnapshotModel(BaseModel):
    """snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Row schemas
# =============================================================================


class CategoryRow(SnapshotModel):
    id: str
    name: str
    description: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "CategoryRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            description=to_nullable_text(row.get("description")),
        )


class MaterialRow(SnapshotModel):
    id: str
    name: str
    unit: str
    cost: float
    stock: float
    min_stock: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "MaterialRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            unit=to_text(row.get("unit")),
            cost=to_number(row.get("cost")),
            stock=to_number(row.get("stock")),
            min_stock=to_number(row.get("minStock")),
        )


class ProductRow(SnapshotModel):
    id: str
    name: str
    category_id: str
    price: float
    is_active: bool
    image_url: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "ProductRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            category_id=to_text(row.get("categoryId")),
            price=to_number(row.get("price")),
            is_active=to_boolean(row.get("isActive")),
            image_url=to_nullable_text(row.get("imageUrl")),
        )


class RecipeItemRow(SnapshotModel):
    id: str
    product_id: str
    material_id: str
    quantity: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "RecipeItemRow":
        return cls(
            id=to_text(row.get("id")),
            product_id=to_text(row.get("productId")),
            material_id=to_text(row.get("materialId")),
            quantity=to_number(row.get("quantity")),
        )


class SupplierRow(SnapshotModel):
    id: str
    name: str
    phone: str | None
    email: str | None
    is_active: bool

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "SupplierRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            phone=to_nullable_text(row.get("phone")),
            email=to_nullable_text(row.get("email")),
            is_active=to_boolean(row.get("isActive")),
        )


class PurchaseRow(SnapshotModel):
    id: str
    code: str
    supplier_id: str
    date: str
    total: float
    status: str
    notes: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "PurchaseRow":
        return cls(
            id=to_text(row.get("id")),
            code=to_text(row.get("code")),
            supplier_id=to_text(row.get("supplierId")),
            date=to_text(row.get("date")),
            total=to_number(row.get("total")),
            status=to_text(row.get("status")),
            notes=to_nullable_text(row.get("notes")),
        )


class PurchaseItemRow(SnapshotModel):
    id: str
    purchase_id: str
    material_id: str
    quantity: float
    unit_cost: float
    total_cost: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "PurchaseItemRow":
        return cls(
            id=to_text(row.get("id")),
            purchase_id=to_text(row.get("purchaseId")),
            material_id=to_text(row.get("materialId")),
            quantity=to_number(row.get("quantity")),
            unit_cost=to_number(row.get("unitCost")),
            total_cost=to_number(row.get("totalCost")),
        )


class WasteRow(SnapshotModel):
    id: str
    date: str
    material_id: str
    quantity: float
    reason: str
    cost: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "WasteRow":
        return cls(
            id=to_text(row.get("id")),
            date=to_text(row.get("date")),
            material_id=to_text(row.get("materialId")),
            quantity=to_number(row.get("quantity")),
            reason=to_text(row.get("reason")),
            cost=to_number(row.get("cost")),
        )


class ZoneRow(SnapshotModel):
    id: str
    name: str
    limit_km: float
    fee: float
    min_order: float
    status: str

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "ZoneRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            limit_km=to_number(row.get("limitKm")),
            fee=to_number(row.get("fee")),
            min_order=to_number(row.get("minOrder")),
            status=to_text(row.get("status")),
        )


class TaxRateRow(SnapshotModel):
    id: str
    name: str
    rate: float
    is_default: bool
    is_active: bool

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "TaxRateRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            rate=to_number(row.get("rate")),
            is_default=to_boolean(row.get("isDefault")),
            is_active=to_boolean(row.get("isActive")),
        )


class DriverRow(SnapshotModel):
    id: str
    name: str
    phone: str | None
    status: str
    active_orders: int

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "DriverRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            phone=to_nullable_text(row.get("phone")),
            status=to_text(row.get("status")),
            active_orders=to_int(row.get("activeOrders"), minimum=0),
        )


class DiningTableRow(SnapshotModel):
    id: str
    name: str
    number: int
    is_occupied: bool

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "DiningTableRow":
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            number=to_int(row.get("number"), minimum=1),
            is_occupied=to_boolean(row.get("isOccupied")),
        )


class OrderRow(SnapshotModel):
    id: str
    code: str
    type: str
    status: str
    customer_name: str
    zone_id: str | None
    driver_id: str | None
    table_id: str | None
    discount: float
    tax_rate: float
    tax_amount: float
    payment: str
    notes: str | None
    receipt_snapshot: Any = None
    created_at: str
    updated_at: str

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "OrderRow":
        return cls(
            id=to_text(row.get("id")),
            code=to_text(row.get("code")),
            type=to_text(row.get("type")),
            status=to_text(row.get("status")),
            customer_name=to_text(row.get("customerName")),
            zone_id=to_nullable_text(row.get("zoneId")),
            driver_id=to_nullable_text(row.get("driverId")),
            table_id=to_nullable_text(row.get("tableId")),
            discount=to_number(row.get("discount")),
            tax_rate=to_number(row.get("taxRate")),
            tax_amount=to_number(row.get("taxAmount")),
            payment=to_text(row.get("payment")),
            notes=to_nullable_text(row.get("notes")),
            receipt_snapshot=row.get("receiptSnapshot"),
            created_at=to_text(row.get("createdAt")),
            updated_at=to_text(row.get("updatedAt")),
        )


class OrderItemRow(SnapshotModel):
    id: str
    order_id: str
    product_id: str | None
    quantity: int
    unit_price: float
    total_price: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "OrderItemRow":
        return cls(
            id=to_text(row.get("id")),
            order_id=to_text(row.get("orderId")),
            product_id=to_nullable_text(row.get("productId")),
            quantity=to_int(row.get("quantity"), minimum=1),
            unit_price=to_number(row.get("unitPrice")),
            total_price=to_number(row.get("totalPrice")),
        )


class SaleRow(SnapshotModel):
    id: str
    invoice_no: str
    order_id: str | None
    date: str
    customer_name: str
    total: float
    status: str
    notes: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "SaleRow":
        return cls(
            id=to_text(row.get("id")),
            invoice_no=to_text(row.get("invoiceNo")),
            order_id=to_nullable_text(row.get("orderId")),
            date=to_text(row.get("date")),
            customer_name=to_text(row.get("customerName")),
            total=to_number(row.get("total")),
            status=to_text(row.get("status")),
            notes=to_nullable_text(row.get("notes")),
        )


class SaleItemRow(SnapshotModel):
    id: str
    sale_id: str
    product_id: str | None
    name: str
    quantity: int
    unit_price: float
    total_price: float

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "SaleItemRow":
        return cls(
            id=to_text(row.get("id")),
            sale_id=to_text(row.get("saleId")),
            product_id=to_nullable_text(row.get("productId")),
            name=to_text(row.get("name")),
            quantity=to_int(row.get("quantity"), minimum=1),
            unit_price=to_number(row.get("unitPrice")),
            total_price=to_number(row.get("totalPrice")),
        )


class ExpenseRow(SnapshotModel):
    id: str
    date: str
    title: str
    vendor: str | None
    amount: float
    notes: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "ExpenseRow":
        return cls(
            id=to_text(row.get("id")),
            date=to_text(row.get("date")),
            title=to_text(row.get("title")),
            vendor=to_nullable_text(row.get("vendor")),
            amount=to_number(row.get("amount")),
            notes=to_nullable_text(row.get("notes")),
        )


class EmployeeRow(SnapshotModel):
    id: str
    user_id: str | None
    name: str
    role_title: str
    phone: str | None
    status: str

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "EmployeeRow":
        return cls(
            id=to_text(row.get("id")),
            user_id=to_nullable_text(row.get("userId")),
            name=to_text(row.get("name")),
            role_title=to_text(row.get("roleTitle")),
            phone=to_nullable_text(row.get("phone")),
            status=to_text(row.get("status")),
        )


class AttendanceRow(SnapshotModel):
    id: str
    employee_id: str
    check_in: str
    check_out: str | None
    status: str
    notes: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "AttendanceRow":
        return cls(
            id=to_text(row.get("id")),
            employee_id=to_text(row.get("employeeId")),
            check_in=to_text(row.get("checkIn")),
            check_out=to_nullable_text(row.get("checkOut")),
            status=to_text(row.get("status")),
            notes=to_nullable_text(row.get("notes")),
        )


class ShiftTemplateRow(SnapshotModel):
    id: str
    name: str
    start_time: str
    end_time: str
    staff_count: int | None
    status: str

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "ShiftTemplateRow":
        staff_count = row.get("staffCount")
        return cls(
            id=to_text(row.get("id")),
            name=to_text(row.get("name")),
            start_time=to_text(row.get("startTime")),
            end_time=to_text(row.get("endTime")),
            staff_count=None if staff_count is None else to_int(staff_count, minimum=0),
            status=to_text(row.get("status")),
        )


class ShiftLogRow(SnapshotModel):
    id: str
    employee_id: str
    started_at: str
    ended_at: str | None
    duration_minutes: int
    pauses: Any = Field(default_factory=list)

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "ShiftLogRow":
        pauses = row.get("pauses")
        return cls(
            id=to_text(row.get("id")),
            employee_id=to_text(row.get("employeeId")),
            started_at=to_text(row.get("startedAt")),
            ended_at=to_nullable_text(row.get("endedAt")),
            duration_minutes=to_int(row.get("durationMinutes"), minimum=0),
            pauses=[] if pauses is None else pauses,
        )


class PayrollRow(SnapshotModel):
    id: str
    employee_id: str
    type: str
    amount: float
    date: str
    note: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "PayrollRow":
        return cls(
            id=to_text(row.get("id")),
            employee_id=to_text(row.get("employeeId")),
            type=to_text(row.get("type")),
            amount=to_number(row.get("amount")),
            date=to_text(row.get("date")),
            note=to_nullable_text(row.get("note")),
        )


class LeaveRow(SnapshotModel):
    id: str
    employee_id: str
    from_date: str
    to_date: str
    status: str
    reason: str | None

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]) -> "LeaveRow":
        return cls(
            id=to_text(row.get("id")),
            employee_id=to_text(row.get("employeeId")),
            from_date=to_text(row.get("fromDate")),
            to_date=to_text(row.get("toDate")),
            status=to_text(row.get("status")),
            reason=to_nullable_text(row.get("reason")),
        )


# =============================================================================
# Snapshot
# =============================================================================


class SnapshotData(SnapshotModel):
    categories: list[CategoryRow] = Field(default_factory=list)
    materials: list[MaterialRow] = Field(default_factory=list)
    products: list[ProductRow] = Field(default_factory=list)
    recipe_items: list[RecipeItemRow] = Field(default_factory=list)
    suppliers: list[SupplierRow] = Field(default_factory=list)
    purchases: list[PurchaseRow] = Field(default_factory=list)
    purchase_items: list[PurchaseItemRow] = Field(default_factory=list)
    waste: list[WasteRow] = Field(default_factory=list)
    zones: list[ZoneRow] = Field(default_factory=list)
    taxes: list[TaxRateRow] = Field(default_factory=list)
    drivers: list[DriverRow] = Field(default_factory=list)
    dining_tables: list[DiningTableRow] = Field(default_factory=list)
    orders: list[OrderRow] = Field(default_factory=list)
    order_items: list[OrderItemRow] = Field(default_factory=list)
    sales: list[SaleRow] = Field(default_factory=list)
    sale_items: list[SaleItemRow] = Field(default_factory=list)
    expenses: list[ExpenseRow] = Field(default_factory=list)
    employees: list[EmployeeRow] = Field(default_factory=list)
    attendance: list[AttendanceRow] = Field(default_factory=list)
    shift_templates: list[ShiftTemplateRow] = Field(default_factory=list)
    shift_logs: list[ShiftLogRow] = Field(default_factory=list)
    payroll: list[PayrollRow] = Field(default_factory=list)
    leaves: list[LeaveRow] = Field(default_factory=list)


class SystemSnapshot(SnapshotModel):
    version: int = SNAPSHOT_VERSION
    exported_at: str
    data: SnapshotData

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready wrapped form with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# Wire key -> row schema. Every key except "taxes" must be present for a
# payload to count as a snapshot; older exports carry no taxes collection.
ROW_SCHEMAS: dict[str, type[SnapshotModel]] = {
    "categories": CategoryRow,
    "materials": MaterialRow,
    "products": ProductRow,
    "recipeItems": RecipeItemRow,
    "suppliers": SupplierRow,
    "purchases": PurchaseRow,
    "purchaseItems": PurchaseItemRow,
    "waste": WasteRow,
    "zones": ZoneRow,
    "taxes": TaxRateRow,
    "drivers": DriverRow,
    "diningTables": DiningTableRow,
    "orders": OrderRow,
    "orderItems": OrderItemRow,
    "sales": SaleRow,
    "saleItems": SaleItemRow,
    "expenses": ExpenseRow,
    "employees": EmployeeRow,
    "attendance": AttendanceRow,
    "shiftTemplates": ShiftTemplateRow,
    "shiftLogs": ShiftLogRow,
    "payroll": PayrollRow,
    "leaves": LeaveRow,
}

SNAPSHOT_KEYS: tuple[str, ...] = tuple(key for key in ROW_SCHEMAS if key != "taxes")


def _snapshot_root(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Wrapped form keeps the collections under "data"; flat form at the root."""
    data = payload.get("data")
    if isinstance(data, Mapping):
        return data
    return payload


def _parse_rows(schema: type[SnapshotModel], value: Any) -> list[Any]:
    if not isinstance(value, list):
        return []
    return [schema.from_raw(row) for row in value if isinstance(row, Mapping)]  # type: ignore[attr-defined]


def parse_system_snapshot(payload: Any) -> SystemSnapshot | None:
    """
    Validate and normalize an untrusted payload into a SystemSnapshot.

    Returns None when the payload is not snapshot-shaped (not an object, or
    any required collection missing or not a list). Field-level defects never
    fail the parse: they degrade through the coercion helpers. Non-object
    entries inside a collection are dropped.
    """
    if not isinstance(payload, Mapping):
        return None

    root = _snapshot_root(payload)
    if any(not isinstance(root.get(key), list) for key in SNAPSHOT_KEYS):
        return None

    data = SnapshotData(
        **{key: _parse_rows(schema, root.get(key)) for key, schema in ROW_SCHEMAS.items()}
    )

    version = payload.get("version")
    exported_at = payload.get("exportedAt")

    return SystemSnapshot(
        version=version if isinstance(version, int) and not isinstance(version, bool) else SNAPSHOT_VERSION,
        exported_at=exported_at if isinstance(exported_at, str) else format_date(datetime.now(timezone.utc)),
        data=data,
    )


def summarize_snapshot(snapshot: SystemSnapshot) -> dict[str, int]:
    """Headline row counts shown next to a backup."""
    data = snapshot.data
    return {
        "categories": len(data.categories),
        "materials": len(data.materials),
        "products": len(data.products),
        "taxes": len(data.taxes),
        "suppliers": len(data.suppliers),
        "orders": len(data.orders),
        "sales": len(data.sales),
        "expenses": len(data.expenses),
        "employees": len(data.employees),
    }
