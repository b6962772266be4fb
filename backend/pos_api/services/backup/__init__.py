"""Backup records and snapshot files."""

from .service import BackupService, map_backup_record

__all__ = ["BackupService", "map_backup_record"]
