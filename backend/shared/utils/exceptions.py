"""
HTTP exceptions raised by services and routers.

Every exception logs itself when constructed, with whatever keyword context
the raiser passes, so handlers never need a separate log call:

    raise BackupNotFoundError(backup_id)
    raise InvalidSnapshotError("Backup file format is invalid", backup_id=backup_id)
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """Base class: an HTTPException that is logged on construction."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        getattr(logger, log_level, logger.warning)(detail, status_code=status_code, **log_context)
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404
# =============================================================================


class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        detail = f"{entity} with ID {entity_id} not found" if entity_id is not None else f"{entity} not found"
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            detail,
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class BackupNotFoundError(NotFoundError):
    def __init__(self, backup_id: str | None = None, **log_context: Any):
        super().__init__("Backup record", backup_id, **log_context)


class BackupFileMissingError(AppException):
    """The record exists but its snapshot file is gone from the backup directory."""

    def __init__(self, reference: str, **log_context: Any):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "Backup file is missing",
            log_level="error",
            reference=reference,
            **log_context,
        )


# =============================================================================
# 403
# =============================================================================


class ForbiddenError(AppException):
    def __init__(self, action: str | None = None, **log_context: Any):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            f"Not authorized to {action}" if action else "Access denied",
            action=action,
            **log_context,
        )


class MissingPermissionError(ForbiddenError):
    def __init__(self, required: list[str], **log_context: Any):
        super().__init__(
            f"perform this action (requires: {', '.join(required)})",
            required_permissions=required,
            **log_context,
        )


# =============================================================================
# 400
# =============================================================================


class ValidationError(AppException):
    def __init__(self, detail: str, **log_context: Any):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, **log_context)


class InvalidSnapshotError(ValidationError):
    """Uploaded or stored content is not a snapshot."""

    def __init__(self, detail: str = "Snapshot payload is invalid", **log_context: Any):
        super().__init__(detail, **log_context)


class InvalidBackupReferenceError(ValidationError):
    """Reference contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, reference: str, **log_context: Any):
        super().__init__("Invalid backup reference", reference=reference, **log_context)


class ConfirmationMismatchError(ValidationError):
    """Factory reset phrase typed by the user does not match the configured one."""

    def __init__(self, **log_context: Any):
        super().__init__("Confirmation phrase does not match.", **log_context)


# =============================================================================
# 409
# =============================================================================


class ConflictError(AppException):
    def __init__(self, detail: str, **log_context: Any):
        super().__init__(status.HTTP_409_CONFLICT, detail, **log_context)


class MaintenanceInProgressError(ConflictError):
    """A reset, restore or import is already running in this process."""

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            "Another maintenance operation is in progress",
            operation=operation,
            **log_context,
        )
