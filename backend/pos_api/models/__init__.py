"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin, shared column types
- enums: Status/type enumerations
- catalog: Category, Product, RecipeItem
- inventory: Material, Supplier, Purchase, PurchaseItem, Waste
- delivery: Zone, Driver
- order: DiningTable, Order, OrderItem
- sales: Sale, SaleItem
- finance: Expense, TaxRate
- hr: Employee, Attendance, ShiftTemplate, ShiftLog, Payroll, Leave
- identity: User, Role, Permission, RolePermission, UserRole, UserSession, Invite
- system: Branch, BrandingSettings, SystemSettings, BackupRecord, AuditLog
"""

# Base classes
from .base import Base, TimestampMixin, new_id

# Enumerations
from .enums import (
    PurchaseStatus,
    ZoneStatus,
    EmployeeStatus,
    ShiftStatus,
    PayrollType,
    LeaveStatus,
    OrderType,
    OrderStatus,
    PaymentMethod,
    SaleStatus,
    BackupStatus,
)

# Catalog
from .catalog import Category, Product, RecipeItem

# Inventory
from .inventory import Material, Supplier, Purchase, PurchaseItem, Waste

# Delivery
from .delivery import Zone, Driver

# Orders and tables
from .order import DiningTable, Order, OrderItem

# Sales (invoices)
from .sales import Sale, SaleItem

# Finance
from .finance import Expense, TaxRate

# HR
from .hr import Employee, Attendance, ShiftTemplate, ShiftLog, Payroll, Leave

# Identity
from .identity import User, Role, Permission, RolePermission, UserRole, UserSession, Invite

# System
from .system import Branch, BrandingSettings, SystemSettings, BackupRecord, AuditLog

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "new_id",
    # Enums
    "PurchaseStatus",
    "ZoneStatus",
    "EmployeeStatus",
    "ShiftStatus",
    "PayrollType",
    "LeaveStatus",
    "OrderType",
    "OrderStatus",
    "PaymentMethod",
    "SaleStatus",
    "BackupStatus",
    # Catalog
    "Category",
    "Product",
    "RecipeItem",
    # Inventory
    "Material",
    "Supplier",
    "Purchase",
    "PurchaseItem",
    "Waste",
    # Delivery
    "Zone",
    "Driver",
    # Orders
    "DiningTable",
    "Order",
    "OrderItem",
    # Sales
    "Sale",
    "SaleItem",
    # Finance
    "Expense",
    "TaxRate",
    # HR
    "Employee",
    "Attendance",
    "ShiftTemplate",
    "ShiftLog",
    "Payroll",
    "Leave",
    # Identity
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
    "UserSession",
    "Invite",
    # System
    "Branch",
    "BrandingSettings",
    "SystemSettings",
    "BackupRecord",
    "AuditLog",
]
