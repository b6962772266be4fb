"""
Backup endpoints.

All logic lives in BackupService; handlers only authorize, guard and
translate to HTTP.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from shared.config.constants import Permissions
from shared.config.logging import audit_maintenance_event
from shared.infrastructure.db import get_db
from shared.security.auth import require_permissions
from shared.utils.schemas import BackupCreateRequest, BackupImportRequest
from pos_api.core.maintenance_lock import maintenance_guard
from pos_api.services.backup import BackupService

router = APIRouter(prefix="/api/backup", tags=["backup"])

can_view = require_permissions(Permissions.BACKUP_VIEW)
can_manage = require_permissions(Permissions.BACKUP_MANAGE)


@router.get("")
def list_backups(
    db: Session = Depends(get_db),
    user: dict = Depends(can_view),
) -> dict[str, Any]:
    """List backups, newest first."""
    return {"backups": BackupService(db).list_backups()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_backup(
    body: BackupCreateRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    user: dict = Depends(can_manage),
) -> dict[str, Any]:
    """Export the current data into a new backup file."""
    note = body.note if body else None
    return {"backup": BackupService(db).create_backup(note=note, user_id=user.get("sub"))}


@router.post("/import")
def import_backup(
    body: BackupImportRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(can_manage),
) -> dict[str, Any]:
    """Restore from an uploaded snapshot and archive it as a backup."""
    with maintenance_guard("import"):
        result = BackupService(db).import_snapshot(
            body.snapshot, note=body.note, user_id=user.get("sub")
        )
    audit_maintenance_event(
        "IMPORT",
        user_id=user.get("sub"),
        email=user.get("email"),
        backup_id=result["backup"]["id"],
        total_dropped=result["report"]["totalDropped"],
    )
    return result


@router.get("/{backup_id}")
def get_backup(
    backup_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(can_view),
) -> dict[str, Any]:
    """Backup record with the headline counts of its snapshot."""
    return BackupService(db).get_backup(backup_id)


@router.get("/{backup_id}/download")
def download_backup(
    backup_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(can_view),
) -> Response:
    """The snapshot file as a JSON attachment."""
    file_name, content = BackupService(db).download_backup(backup_id)
    return Response(
        content=content,
        media_type="application/json; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.post("/{backup_id}/restore")
def restore_backup(
    backup_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(can_manage),
) -> dict[str, Any]:
    """Replace all operational data with this backup."""
    with maintenance_guard("restore"):
        result = BackupService(db).restore_backup(backup_id)
    audit_maintenance_event(
        "RESTORE",
        user_id=user.get("sub"),
        email=user.get("email"),
        backup_id=backup_id,
        total_dropped=result["report"]["totalDropped"],
    )
    return result


@router.delete("/{backup_id}")
def delete_backup(
    backup_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(can_manage),
) -> dict[str, Any]:
    """Delete the backup record and its file."""
    BackupService(db).delete_backup(backup_id)
    audit_maintenance_event(
        "BACKUP_DELETE",
        user_id=user.get("sub"),
        email=user.get("email"),
        backup_id=backup_id,
    )
    return {"deleted": True}
