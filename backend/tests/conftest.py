"""
Pytest configuration and fixtures for backend tests.
"""

import copy
import os
import tempfile
from datetime import datetime, timezone

# Settings are read once at import time; point them at throwaway resources
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BACKUP_STORAGE_DIR", tempfile.mkdtemp(prefix="pos-backups-"))
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pos_api.main import app
from pos_api.models import (
    Attendance,
    AuditLog,
    BackupRecord,
    Base,
    Branch,
    BrandingSettings,
    Category,
    DiningTable,
    Driver,
    Employee,
    Expense,
    Invite,
    Leave,
    Material,
    Order,
    OrderItem,
    Payroll,
    Permission,
    Product,
    Purchase,
    PurchaseItem,
    RecipeItem,
    Role,
    RolePermission,
    Sale,
    SaleItem,
    ShiftLog,
    ShiftTemplate,
    Supplier,
    SystemSettings,
    TaxRate,
    User,
    UserRole,
    UserSession,
    Waste,
    Zone,
)
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
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import sign_jwt


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys unless asked; deletion order must be checked
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def backup_dir(tmp_path, monkeypatch):
    """Route backup files to a per-test directory."""
    directory = tmp_path / "backups"
    monkeypatch.setattr(settings, "backup_storage_dir", str(directory))
    return directory


@pytest.fixture(scope="function")
def client(db_session, backup_dir):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Users and tokens
# =============================================================================


@pytest.fixture
def seed_owner(db_session):
    """Owner account with a role, a session and an invite."""
    user = User(id="user-owner", email="owner@test.com", full_name="Test Owner", password_hash="x")
    role = Role(id="role-owner", name="OWNER")
    permission = Permission(id="perm-reset", key="system:reset")
    db_session.add_all([user, role, permission])
    db_session.flush()
    db_session.add_all([
        UserRole(user_id=user.id, role_id=role.id),
        RolePermission(role_id=role.id, permission_id=permission.id),
        UserSession(
            id="session-1",
            user_id=user.id,
            token_hash="hash",
            expires_at=utc(2030, 1, 1),
        ),
        Invite(
            id="invite-1",
            email="new@test.com",
            role_id=role.id,
            invited_by_id=user.id,
            token_hash="hash",
            expires_at=utc(2030, 1, 1),
        ),
    ])
    db_session.commit()
    return user


def _auth_headers(sub, roles, permissions, email="user@test.com"):
    token = sign_jwt({"sub": sub, "email": email, "roles": roles, "permissions": permissions})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    """Owner with every maintenance permission."""
    return _auth_headers(
        "user-owner",
        ["OWNER"],
        ["backup:view", "backup:manage", "system:reset"],
        email="owner@test.com",
    )


@pytest.fixture
def admin_headers():
    """Admin with every maintenance permission but not the OWNER role."""
    return _auth_headers("user-admin", ["ADMIN"], ["backup:view", "backup:manage", "system:reset"])


@pytest.fixture
def viewer_headers():
    """May list and download backups, nothing else."""
    return _auth_headers("user-viewer", ["CASHIER"], ["backup:view"])


# =============================================================================
# Operational data
# =============================================================================


@pytest.fixture
def seed_operational(db_session, seed_owner):
    """
    One or two rows in every operational table, all references satisfied.
    Dining table "table-1" is occupied and driver "driver-1" has active orders.
    """
    db = db_session
    db.add_all([
        Category(id="cat-1", name="Drinks", description="Cold and hot"),
        Category(id="cat-2", name="Burgers", description=None),
        Material(id="mat-1", name="Beef", unit="kg", cost=12.5, stock=20, min_stock=5),
        Material(id="mat-2", name="Bun", unit="pcs", cost=0.25, stock=100, min_stock=10),
        Supplier(id="sup-1", name="Meat Co", phone="555-0100", email="meat@test.com", is_active=True),
        Zone(id="zone-1", name="Downtown", limit_km=5, fee=2.5, min_order=10, status=ZoneStatus.ACTIVE),
        TaxRate(id="tax-1", name="VAT", rate=15, is_default=True, is_active=True),
        TaxRate(id="tax-2", name="Reduced", rate=5, is_default=False, is_active=True),
        Driver(id="driver-1", name="Sam", phone="555-0111", status="on route", active_orders=2),
        DiningTable(id="table-1", name="Window", number=1, is_occupied=True),
        DiningTable(id="table-2", name="Patio", number=2, is_occupied=False),
        Employee(
            id="emp-1",
            user_id="user-owner",
            name="Alex",
            role_title="Chef",
            phone=None,
            status=EmployeeStatus.ACTIVE,
        ),
        ShiftTemplate(
            id="shift-1",
            name="Morning",
            start_time="08:00",
            end_time="16:00",
            staff_count=3,
            status=ShiftStatus.ACTIVE,
        ),
    ])
    db.flush()
    db.add_all([
        Product(
            id="prod-1",
            name="Cheeseburger",
            category_id="cat-2",
            price=8.5,
            is_active=True,
            image_url=None,
            created_at=utc(2024, 1, 1),
        ),
        Product(
            id="prod-2",
            name="Cola",
            category_id="cat-1",
            price=2,
            is_active=False,
            image_url="https://cdn.test/cola.png",
            created_at=utc(2024, 1, 2),
        ),
        Purchase(
            id="pur-1",
            code="PO-1",
            supplier_id="sup-1",
            date=utc(2024, 1, 3, 9),
            total=125,
            status=PurchaseStatus.RECEIVED,
            notes=None,
        ),
        Waste(id="waste-1", date=utc(2024, 1, 4), material_id="mat-1", quantity=1.5, reason="Spoiled", cost=18.75),
        Attendance(
            id="att-1",
            employee_id="emp-1",
            check_in=utc(2024, 1, 5, 8),
            check_out=utc(2024, 1, 5, 16),
            status="present",
            notes=None,
        ),
        ShiftLog(
            id="log-1",
            employee_id="emp-1",
            started_at=utc(2024, 1, 5, 8),
            ended_at=None,
            duration_minutes=0,
            pauses=[{"start": "2024-01-05T12:00:00.000Z", "end": None}],
        ),
        Payroll(
            id="pay-1",
            employee_id="emp-1",
            type=PayrollType.BONUS,
            amount=100,
            date=utc(2024, 1, 31),
            note="Holiday",
        ),
        Leave(
            id="leave-1",
            employee_id="emp-1",
            from_date=utc(2024, 2, 1),
            to_date=utc(2024, 2, 3),
            status=LeaveStatus.APPROVED,
            reason="Trip",
        ),
        Order(
            id="order-1",
            code="ORD-1",
            type=OrderType.DINE_IN,
            status=OrderStatus.COMPLETED,
            customer_name="Walk-in",
            table_id="table-1",
            discount=0,
            tax_rate=15,
            tax_amount=1.5,
            payment=PaymentMethod.CARD,
            receipt_snapshot={"lines": 2, "total": 11.5},
            created_at=utc(2024, 1, 5, 12),
            updated_at=utc(2024, 1, 5, 12, 30),
        ),
        Order(
            id="order-2",
            code="ORD-2",
            type=OrderType.DELIVERY,
            status=OrderStatus.OUT_FOR_DELIVERY,
            customer_name="Dana",
            zone_id="zone-1",
            driver_id="driver-1",
            discount=1,
            tax_rate=0,
            tax_amount=0,
            payment=PaymentMethod.CASH,
            receipt_snapshot=None,
            created_at=utc(2024, 1, 6, 18),
            updated_at=utc(2024, 1, 6, 18),
        ),
        Expense(id="exp-1", date=utc(2024, 1, 7), title="Rent", vendor="Landlord", amount=900, notes=None),
    ])
    db.flush()
    db.add_all([
        RecipeItem(id="rec-1", product_id="prod-1", material_id="mat-1", quantity=0.2),
        RecipeItem(id="rec-2", product_id="prod-1", material_id="mat-2", quantity=1),
        PurchaseItem(id="pi-1", purchase_id="pur-1", material_id="mat-1", quantity=10, unit_cost=12.5, total_cost=125),
        OrderItem(id="oi-1", order_id="order-1", product_id="prod-1", quantity=1, unit_price=8.5, total_price=8.5),
        OrderItem(id="oi-2", order_id="order-1", product_id="prod-2", quantity=1, unit_price=2, total_price=2),
        OrderItem(id="oi-3", order_id="order-2", product_id=None, quantity=3, unit_price=1, total_price=3),
        Sale(
            id="sale-1",
            invoice_no="INV-1",
            order_id="order-1",
            date=utc(2024, 1, 5, 12, 30),
            customer_name="Walk-in",
            total=11.5,
            status=SaleStatus.PAID,
            notes=None,
        ),
    ])
    db.flush()
    db.add(
        SaleItem(
            id="si-1",
            sale_id="sale-1",
            product_id="prod-1",
            name="Cheeseburger",
            quantity=1,
            unit_price=8.5,
            total_price=8.5,
        )
    )
    db.add_all([
        Branch(id="branch-1", name="Main"),
        BrandingSettings(id="brand-1", business_name="Test Diner"),
        SystemSettings(id="system", setup_completed_at=utc(2024, 1, 1)),
        AuditLog(id="audit-1", user_id="user-owner", action="create", entity_type="product", entity_id="prod-1"),
        BackupRecord(id="backup-old", reference="BKP-240101-1111", size_bytes=10, note="old"),
    ])
    db.commit()
    return db


# =============================================================================
# Wire-format snapshots
# =============================================================================


_BASE_SNAPSHOT = {
    "version": 1,
    "exportedAt": "2024-01-08T10:00:00.000Z",
    "data": {
        "categories": [{"id": "cat-1", "name": "Drinks", "description": None}],
        "materials": [
            {"id": "mat-1", "name": "Beef", "unit": "kg", "cost": 12.5, "stock": 20, "minStock": 5}
        ],
        "products": [
            {
                "id": "prod-1",
                "name": "Cola",
                "categoryId": "cat-1",
                "price": 2,
                "isActive": True,
                "imageUrl": None,
            }
        ],
        "recipeItems": [{"id": "rec-1", "productId": "prod-1", "materialId": "mat-1", "quantity": 0.1}],
        "suppliers": [
            {"id": "sup-1", "name": "Meat Co", "phone": None, "email": None, "isActive": True}
        ],
        "purchases": [
            {
                "id": "pur-1",
                "code": "PO-1",
                "supplierId": "sup-1",
                "date": "2024-01-03T09:00:00.000Z",
                "total": 125,
                "status": "RECEIVED",
                "notes": None,
            }
        ],
        "purchaseItems": [
            {
                "id": "pi-1",
                "purchaseId": "pur-1",
                "materialId": "mat-1",
                "quantity": 10,
                "unitCost": 12.5,
                "totalCost": 125,
            }
        ],
        "waste": [],
        "zones": [
            {"id": "zone-1", "name": "Downtown", "limitKm": 5, "fee": 2.5, "minOrder": 10, "status": "ACTIVE"}
        ],
        "taxes": [{"id": "tax-1", "name": "VAT", "rate": 15, "isDefault": True, "isActive": True}],
        "drivers": [
            {"id": "driver-1", "name": "Sam", "phone": None, "status": "available", "activeOrders": 0}
        ],
        "diningTables": [{"id": "table-1", "name": "Window", "number": 1, "isOccupied": False}],
        "orders": [
            {
                "id": "order-1",
                "code": "ORD-1",
                "type": "DINE_IN",
                "status": "COMPLETED",
                "customerName": "Walk-in",
                "zoneId": None,
                "driverId": None,
                "tableId": "table-1",
                "discount": 0,
                "taxRate": 15,
                "taxAmount": 0.3,
                "payment": "CASH",
                "notes": None,
                "receiptSnapshot": None,
                "createdAt": "2024-01-05T12:00:00.000Z",
                "updatedAt": "2024-01-05T12:30:00.000Z",
            }
        ],
        "orderItems": [
            {
                "id": "oi-1",
                "orderId": "order-1",
                "productId": "prod-1",
                "quantity": 1,
                "unitPrice": 2,
                "totalPrice": 2,
            }
        ],
        "sales": [
            {
                "id": "sale-1",
                "invoiceNo": "INV-1",
                "orderId": "order-1",
                "date": "2024-01-05T12:30:00.000Z",
                "customerName": "Walk-in",
                "total": 2.3,
                "status": "PAID",
                "notes": None,
            }
        ],
        "saleItems": [
            {
                "id": "si-1",
                "saleId": "sale-1",
                "productId": "prod-1",
                "name": "Cola",
                "quantity": 1,
                "unitPrice": 2,
                "totalPrice": 2,
            }
        ],
        "expenses": [
            {
                "id": "exp-1",
                "date": "2024-01-07T00:00:00.000Z",
                "title": "Rent",
                "vendor": None,
                "amount": 900,
                "notes": None,
            }
        ],
        "employees": [
            {
                "id": "emp-1",
                "userId": None,
                "name": "Alex",
                "roleTitle": "Chef",
                "phone": None,
                "status": "ACTIVE",
            }
        ],
        "attendance": [
            {
                "id": "att-1",
                "employeeId": "emp-1",
                "checkIn": "2024-01-05T08:00:00.000Z",
                "checkOut": None,
                "status": "present",
                "notes": None,
            }
        ],
        "shiftTemplates": [
            {
                "id": "shift-1",
                "name": "Morning",
                "startTime": "08:00",
                "endTime": "16:00",
                "staffCount": None,
                "status": "ACTIVE",
            }
        ],
        "shiftLogs": [
            {
                "id": "log-1",
                "employeeId": "emp-1",
                "startedAt": "2024-01-05T08:00:00.000Z",
                "endedAt": "2024-01-05T16:00:00.000Z",
                "durationMinutes": 480,
                "pauses": [],
            }
        ],
        "payroll": [
            {
                "id": "pay-1",
                "employeeId": "emp-1",
                "type": "SALARY",
                "amount": 1500,
                "date": "2024-01-31T00:00:00.000Z",
                "note": None,
            }
        ],
        "leaves": [
            {
                "id": "leave-1",
                "employeeId": "emp-1",
                "fromDate": "2024-02-01T00:00:00.000Z",
                "toDate": "2024-02-03T00:00:00.000Z",
                "status": "PENDING",
                "reason": None,
            }
        ],
    },
}


@pytest.fixture
def snapshot_payload():
    """
    Factory for a valid wrapped snapshot in wire format.

    Returns a fresh deep copy on every call so tests can mutate it freely.
    """
    def make():
        return copy.deepcopy(_BASE_SNAPSHOT)

    return make
