"""
HTTP routers.

- backup: /api/backup (list, create, detail, download, restore, import, delete)
- system: /api/system (scoped reset, factory reset)
- health: /api/health
"""

from .backup import router as backup_router
from .health import router as health_router
from .system import router as system_router

__all__ = ["backup_router", "health_router", "system_router"]
