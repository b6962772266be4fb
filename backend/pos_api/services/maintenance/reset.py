"""
Reset engine: scoped and factory wipes of the database.

Deletion order is fixed so that every child table is emptied before the
tables it references; the database never sees a dangling foreign key, even
with constraints checked immediately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from shared.config.constants import SYSTEM_SETTINGS_ID
from shared.config.logging import maintenance_logger as logger
from shared.infrastructure.db import atomic
from pos_api.models import (
    Attendance,
    AuditLog,
    BackupRecord,
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


class ResetScope(str, Enum):
    TRANSACTIONS = "transactions"
    OPERATIONAL = "operational"


TRANSACTION_TABLES = (
    SaleItem,
    Sale,
    OrderItem,
    Order,
    PurchaseItem,
    Purchase,
    Waste,
    Expense,
    Attendance,
    ShiftLog,
    Payroll,
    Leave,
)

MASTER_DATA_TABLES = (
    RecipeItem,
    Product,
    Category,
    Material,
    Supplier,
    Zone,
    TaxRate,
    Driver,
    DiningTable,
    ShiftTemplate,
    Employee,
)

# Permission is a static catalogue and survives a factory reset
IDENTITY_TABLES = (
    Branch,
    BrandingSettings,
    BackupRecord,
    AuditLog,
    UserSession,
    Invite,
    UserRole,
    RolePermission,
    Role,
    User,
)


@dataclass
class ResetResult:
    """Rows deleted per table, in deletion order."""

    scope: str
    deleted: dict[str, int] = field(default_factory=dict)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())

    def as_dict(self) -> dict[str, object]:
        return {"scope": self.scope, "deleted": dict(self.deleted), "totalDeleted": self.total_deleted}


def _delete_all(db: Session, tables: tuple[type, ...], deleted: dict[str, int]) -> None:
    for model in tables:
        result = db.execute(delete(model))
        deleted[model.__tablename__] = result.rowcount or 0


def clear_transactions(db: Session) -> dict[str, int]:
    """
    Delete all transactional records and reset derived counters.

    Dining tables become unoccupied and drivers drop to zero active orders,
    since the orders that justified those values are gone.
    Does not commit.
    """
    deleted: dict[str, int] = {}
    _delete_all(db, TRANSACTION_TABLES, deleted)
    db.execute(update(DiningTable).values(is_occupied=False))
    db.execute(update(Driver).values(active_orders=0))
    return deleted


def clear_operational(db: Session) -> dict[str, int]:
    """Delete transactions and all master data. Does not commit."""
    deleted = clear_transactions(db)
    _delete_all(db, MASTER_DATA_TABLES, deleted)
    return deleted


def reset_system_data(db: Session, scope: ResetScope | str) -> ResetResult:
    """
    Wipe the chosen scope in one transaction.

    Raises:
        ValueError: unknown scope; nothing is touched.
    """
    scope = ResetScope(scope)

    with atomic(db):
        if scope is ResetScope.TRANSACTIONS:
            deleted = clear_transactions(db)
        else:
            deleted = clear_operational(db)

    result = ResetResult(scope=scope.value, deleted=deleted)
    logger.info("System data reset", scope=scope.value, total_deleted=result.total_deleted)
    return result


def factory_reset_system_data(db: Session) -> ResetResult:
    """
    Return the installation to its never-set-up state in one transaction.

    Removes all operational data, users, roles, sessions, invites, branding,
    backup records and audit logs, then marks setup as not completed.

    Only the database is touched: the <reference>.json files in the backup
    directory stay on disk, unlisted, and can still be brought back through
    an import.
    """
    with atomic(db):
        deleted = clear_operational(db)
        _delete_all(db, IDENTITY_TABLES, deleted)

        system_settings = db.scalar(
            select(SystemSettings).where(SystemSettings.id == SYSTEM_SETTINGS_ID)
        )
        if system_settings is None:
            db.add(SystemSettings(id=SYSTEM_SETTINGS_ID, setup_completed_at=None))
        else:
            system_settings.setup_completed_at = None

    result = ResetResult(scope="factory", deleted=deleted)
    logger.warning("Factory reset completed", total_deleted=result.total_deleted)
    return result
