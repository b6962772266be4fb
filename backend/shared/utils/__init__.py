"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    InvalidSnapshotError,
)

__all__ = [
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "InvalidSnapshotError",
]
