"""
Backup Service: stored snapshots and their lifecycle.

A backup is a snapshot file on disk plus a BackupRecord row describing it.
Records created by older releases may carry the snapshot inline in the
payload column instead of a file; both are read transparently.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shared.config.constants import DEFAULT_BACKUP_NOTE, DEFAULT_IMPORT_NOTE
from shared.config.logging import backup_logger as logger
from shared.infrastructure.db import atomic
from shared.utils.exceptions import (
    BackupFileMissingError,
    BackupNotFoundError,
    ConflictError,
    InvalidSnapshotError,
)
from pos_api.models import BackupRecord, BackupStatus, User
from pos_api.services.maintenance import (
    SystemSnapshot,
    build_system_snapshot,
    format_date,
    parse_system_snapshot,
    restore_system_snapshot,
    summarize_snapshot,
)
from .storage import (
    backup_file_exists,
    delete_backup_file,
    generate_reference,
    read_backup_file,
    write_backup_file,
)

BACKUP_PREFIX = "BKP"
IMPORT_PREFIX = "IMP"
REFERENCE_ATTEMPTS = 5


def map_backup_record(record: BackupRecord) -> dict[str, Any]:
    """API representation of a backup record."""
    creator = record.created_by
    return {
        "id": record.id,
        "reference": record.reference,
        "fileName": f"{record.reference}.json",
        "status": record.status.value.lower(),
        "sizeBytes": record.size_bytes,
        "note": record.note,
        "storagePath": record.storage_path,
        "createdAt": format_date(record.created_at),
        "restoredAt": format_date(record.restored_at),
        "createdBy": (
            {"id": creator.id, "fullName": creator.full_name, "email": creator.email}
            if creator is not None
            else None
        ),
    }


def _normalize_note(note: str | None, default: str) -> str:
    note = (note or "").strip()
    return note or default


def _serialize(snapshot: SystemSnapshot) -> str:
    return json.dumps(snapshot.to_payload(), indent=2, ensure_ascii=False)


class BackupService:
    """Create, inspect, download, restore, import and delete backups."""

    def __init__(self, db: Session, storage_dir: str | Path | None = None):
        self.db = db
        self.storage_dir = storage_dir

    # =========================================================================
    # Queries
    # =========================================================================

    def _get_record(self, backup_id: str) -> BackupRecord:
        record = self.db.scalar(
            select(BackupRecord)
            .options(selectinload(BackupRecord.created_by))
            .where(BackupRecord.id == backup_id)
        )
        if record is None:
            raise BackupNotFoundError(backup_id)
        return record

    def list_backups(self) -> list[dict[str, Any]]:
        """All backup records, newest first."""
        records = self.db.scalars(
            select(BackupRecord)
            .options(selectinload(BackupRecord.created_by))
            .order_by(BackupRecord.created_at.desc(), BackupRecord.id.desc())
        ).all()
        return [map_backup_record(record) for record in records]

    def get_backup(self, backup_id: str) -> dict[str, Any]:
        """
        Record plus the headline counts of its snapshot.

        summary is None when the snapshot cannot be read or is not a
        valid snapshot; the record itself is still returned.
        """
        record = self._get_record(backup_id)

        summary = None
        try:
            snapshot = parse_system_snapshot(self._load_payload(record))
        except (BackupFileMissingError, InvalidSnapshotError):
            snapshot = None
        if snapshot is not None:
            summary = summarize_snapshot(snapshot)

        return {"backup": map_backup_record(record), "summary": summary}

    def download_backup(self, backup_id: str) -> tuple[str, str]:
        """Return (file name, JSON content) for the attachment response."""
        record = self._get_record(backup_id)
        if record.payload is not None:
            content = json.dumps(record.payload, indent=2, ensure_ascii=False)
        else:
            content = self._read_file(record.reference)
        return f"{record.reference}.json", content

    def _read_file(self, reference: str) -> str:
        try:
            _, content = read_backup_file(reference, self.storage_dir)
        except FileNotFoundError:
            raise BackupFileMissingError(reference)
        return content

    def _load_payload(self, record: BackupRecord) -> Any:
        if record.payload is not None:
            return record.payload
        content = self._read_file(record.reference)
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            raise InvalidSnapshotError("Backup file format is invalid", reference=record.reference)

    # =========================================================================
    # Commands
    # =========================================================================

    def _resolve_creator(self, user_id: str | None) -> str | None:
        """Only link the record to users that exist in this database."""
        if user_id is None:
            return None
        return user_id if self.db.get(User, user_id) is not None else None

    def _reference_taken(self, reference: str) -> bool:
        if backup_file_exists(reference, self.storage_dir):
            return True
        return self.db.scalar(select(BackupRecord.id).where(BackupRecord.reference == reference)) is not None

    def _reserve_reference(self, prefix: str) -> str:
        """A reference used by neither a record nor a stored file."""
        for _ in range(REFERENCE_ATTEMPTS):
            reference = generate_reference(prefix)
            if not self._reference_taken(reference):
                return reference
        raise ConflictError("Could not allocate a backup reference", prefix=prefix)

    def _store(
        self,
        prefix: str,
        snapshot: SystemSnapshot,
        note: str,
        user_id: str | None,
        restored_at: datetime | None = None,
    ) -> BackupRecord:
        """
        Write the snapshot file and its record.

        The file is only ever created, never replaced, so a failed record
        removes the file this call wrote and nothing else.
        """
        content = _serialize(snapshot)
        reference = self._reserve_reference(prefix)
        try:
            storage_path = write_backup_file(reference, content, self.storage_dir)
        except FileExistsError:
            raise ConflictError("Backup reference already in use", reference=reference)

        try:
            with atomic(self.db):
                record = BackupRecord(
                    reference=reference,
                    status=BackupStatus.COMPLETED,
                    size_bytes=len(content.encode("utf-8")),
                    storage_path=str(storage_path),
                    note=note,
                    restored_at=restored_at,
                    created_by_id=self._resolve_creator(user_id),
                )
                self.db.add(record)
        except Exception:
            delete_backup_file(reference, self.storage_dir)
            raise

        self.db.refresh(record)
        return record

    def create_backup(self, note: str | None = None, user_id: str | None = None) -> dict[str, Any]:
        """Export the current data into a new backup."""
        snapshot = build_system_snapshot(self.db)
        record = self._store(BACKUP_PREFIX, snapshot, _normalize_note(note, DEFAULT_BACKUP_NOTE), user_id)

        logger.info(
            "Backup created",
            backup_id=record.id,
            reference=record.reference,
            size_bytes=record.size_bytes,
        )
        return map_backup_record(record)

    def restore_backup(self, backup_id: str) -> dict[str, Any]:
        """
        Replace all operational data with a stored backup.

        Raises:
            BackupNotFoundError: unknown backup id.
            BackupFileMissingError: the record's file is gone.
            InvalidSnapshotError: the stored content is not a snapshot.
        """
        record = self._get_record(backup_id)
        snapshot = parse_system_snapshot(self._load_payload(record))
        if snapshot is None:
            raise InvalidSnapshotError("Backup file format is invalid", backup_id=backup_id)

        report = restore_system_snapshot(self.db, snapshot)

        with atomic(self.db):
            record.restored_at = datetime.now(timezone.utc)

        logger.info("Backup restored", backup_id=backup_id, reference=record.reference)
        return {
            "restored": True,
            "summary": summarize_snapshot(snapshot),
            "report": report.as_dict(),
        }

    def import_snapshot(
        self,
        payload: Any,
        note: str | None = None,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Restore from an uploaded snapshot, then archive it as a new backup.

        Raises:
            InvalidSnapshotError: the payload is not snapshot-shaped.
        """
        snapshot = parse_system_snapshot(payload)
        if snapshot is None:
            raise InvalidSnapshotError()

        report = restore_system_snapshot(self.db, snapshot)
        record = self._store(
            IMPORT_PREFIX,
            snapshot,
            _normalize_note(note, DEFAULT_IMPORT_NOTE),
            user_id,
            restored_at=datetime.now(timezone.utc),
        )

        logger.info("Snapshot imported", backup_id=record.id, reference=record.reference)
        return {
            "backup": map_backup_record(record),
            "summary": summarize_snapshot(snapshot),
            "report": report.as_dict(),
        }

    def delete_backup(self, backup_id: str) -> None:
        """Delete the record, then its file."""
        record = self._get_record(backup_id)
        reference = record.reference

        with atomic(self.db):
            self.db.delete(record)
        delete_backup_file(reference, self.storage_dir)

        logger.info("Backup deleted", backup_id=backup_id, reference=reference)
