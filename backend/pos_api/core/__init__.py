"""
Application core: CORS, lifespan, middlewares and the maintenance guard.
"""

from .cors import configure_cors
from .lifespan import lifespan
from .maintenance_lock import maintenance_guard
from .middlewares import register_middlewares

__all__ = ["configure_cors", "lifespan", "maintenance_guard", "register_middlewares"]
