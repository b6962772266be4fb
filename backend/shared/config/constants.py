"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import Permissions, Roles, SYSTEM_SETTINGS_ID

    require_permissions(Permissions.BACKUP_MANAGE)
"""

from typing import Final


# =============================================================================
# Roles & Permissions
# =============================================================================


class Roles:
    """Role names carried in the token's "roles" claim."""

    OWNER: Final[str] = "OWNER"
    ADMIN: Final[str] = "ADMIN"
    MANAGER: Final[str] = "MANAGER"
    CASHIER: Final[str] = "CASHIER"

    ALL: Final[list[str]] = [OWNER, ADMIN, MANAGER, CASHIER]


class Permissions:
    """Permission keys carried in the token's "permissions" claim."""

    BACKUP_VIEW: Final[str] = "backup:view"
    BACKUP_MANAGE: Final[str] = "backup:manage"
    SYSTEM_RESET: Final[str] = "system:reset"


# =============================================================================
# System
# =============================================================================

# Primary key of the singleton system settings row
SYSTEM_SETTINGS_ID: Final[str] = "system"

# Current snapshot file format version
SNAPSHOT_VERSION: Final[int] = 1

# Default notes stored on backup records
DEFAULT_BACKUP_NOTE: Final[str] = "Manual backup"
DEFAULT_IMPORT_NOTE: Final[str] = "Restored from uploaded file"
