"""
Tests for BackupService.
"""

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from pos_api.models import BackupRecord, BackupStatus, Order
from pos_api.services.backup import BackupService
from pos_api.services.maintenance import reset_system_data
from shared.utils.exceptions import (
    BackupFileMissingError,
    BackupNotFoundError,
    ConflictError,
    InvalidSnapshotError,
)


def count(db, model):
    return db.scalar(select(func.count()).select_from(model))


@pytest.fixture
def service(db_session, backup_dir):
    return BackupService(db_session)


class TestCreateBackup:
    """create_backup writes a file and a record."""

    def test_creates_file_and_record(self, service, seed_operational, backup_dir):
        backup = service.create_backup(user_id="user-owner")

        assert backup["reference"].startswith("BKP-")
        assert backup["fileName"] == f"{backup['reference']}.json"
        assert backup["status"] == "completed"
        assert backup["note"] == "Manual backup"
        assert backup["createdBy"] == {
            "id": "user-owner",
            "fullName": "Test Owner",
            "email": "owner@test.com",
        }

        path = backup_dir / backup["fileName"]
        assert path.exists()
        assert backup["sizeBytes"] == len(path.read_bytes())
        content = json.loads(path.read_text(encoding="utf-8"))
        assert len(content["data"]["orders"]) == 2

    def test_note_is_trimmed(self, service, db_session):
        assert service.create_backup(note="  before upgrade ")["note"] == "before upgrade"
        assert service.create_backup(note="   ")["note"] == "Manual backup"

    def test_unknown_creator_not_linked(self, service, db_session):
        backup = service.create_backup(user_id="ghost")
        assert backup["createdBy"] is None

    def test_file_removed_when_record_fails(self, service, db_session, backup_dir, monkeypatch):
        def failing_add(instance):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(db_session, "add", failing_add)

        with pytest.raises(RuntimeError):
            service.create_backup()
        assert list(backup_dir.glob("*.json")) == []

    def test_colliding_reference_keeps_existing_backup(self, service, db_session, backup_dir, monkeypatch):
        monkeypatch.setattr(
            "pos_api.services.backup.service.generate_reference",
            lambda prefix: f"{prefix}-260101-1234",
        )
        first = service.create_backup(note="first")
        original = (backup_dir / "BKP-260101-1234.json").read_text(encoding="utf-8")

        with pytest.raises(ConflictError) as exc_info:
            service.create_backup(note="second")
        assert exc_info.value.status_code == 409

        assert (backup_dir / "BKP-260101-1234.json").read_text(encoding="utf-8") == original
        file_name, content = service.download_backup(first["id"])
        assert file_name == "BKP-260101-1234.json"
        assert content == original
        assert count(db_session, BackupRecord) == 1

    def test_reference_retried_until_free(self, service, backup_dir, monkeypatch):
        candidates = iter(["BKP-260101-1111", "BKP-260101-1111", "BKP-260101-2222"])
        monkeypatch.setattr(
            "pos_api.services.backup.service.generate_reference",
            lambda prefix: next(candidates),
        )
        first = service.create_backup()
        second = service.create_backup()

        assert first["reference"] == "BKP-260101-1111"
        assert second["reference"] == "BKP-260101-2222"
        assert (backup_dir / "BKP-260101-1111.json").exists()

    def test_reference_skips_orphaned_file(self, service, backup_dir, monkeypatch):
        backup_dir.mkdir(parents=True)
        (backup_dir / "BKP-260101-3333.json").write_text("{}", encoding="utf-8")
        candidates = iter(["BKP-260101-3333", "BKP-260101-4444"])
        monkeypatch.setattr(
            "pos_api.services.backup.service.generate_reference",
            lambda prefix: next(candidates),
        )

        assert service.create_backup()["reference"] == "BKP-260101-4444"
        assert (backup_dir / "BKP-260101-3333.json").read_text(encoding="utf-8") == "{}"


class TestQueries:
    """list_backups, get_backup and download_backup."""

    def test_list_newest_first(self, service, seed_operational):
        db = seed_operational
        db.get(BackupRecord, "backup-old").created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        db.commit()
        created = service.create_backup()

        assert [b["id"] for b in service.list_backups()] == [created["id"], "backup-old"]

    def test_get_with_summary(self, service, seed_operational):
        created = service.create_backup()
        detail = service.get_backup(created["id"])

        assert detail["backup"]["id"] == created["id"]
        assert detail["summary"]["orders"] == 2
        assert detail["summary"]["categories"] == 2

    def test_get_missing_file_has_no_summary(self, service, seed_operational):
        detail = service.get_backup("backup-old")
        assert detail["backup"]["reference"] == "BKP-240101-1111"
        assert detail["summary"] is None

    def test_get_corrupted_file_has_no_summary(self, service, db_session, backup_dir):
        created = service.create_backup()
        (backup_dir / created["fileName"]).write_text("not json", encoding="utf-8")
        assert service.get_backup(created["id"])["summary"] is None

    def test_get_unknown(self, service):
        with pytest.raises(BackupNotFoundError):
            service.get_backup("nope")

    def test_download_file(self, service, seed_operational, backup_dir):
        created = service.create_backup()
        file_name, content = service.download_backup(created["id"])

        assert file_name == created["fileName"]
        assert content == (backup_dir / file_name).read_text(encoding="utf-8")

    def test_download_prefers_inline_payload(self, service, db_session, snapshot_payload):
        db_session.add(
            BackupRecord(
                id="inline",
                reference="BKP-inline",
                status=BackupStatus.COMPLETED,
                payload=snapshot_payload(),
            )
        )
        db_session.commit()

        file_name, content = service.download_backup("inline")
        assert file_name == "BKP-inline.json"
        assert json.loads(content)["exportedAt"] == "2024-01-08T10:00:00.000Z"
        assert service.get_backup("inline")["summary"]["products"] == 1

    def test_download_missing_file(self, service, seed_operational):
        with pytest.raises(BackupFileMissingError) as exc_info:
            service.download_backup("backup-old")
        assert exc_info.value.status_code == 404


class TestRestoreBackup:
    """restore_backup replaces operational data."""

    def test_restores_and_stamps(self, service, seed_operational):
        db = seed_operational
        created = service.create_backup()
        reset_system_data(db, "transactions")
        assert count(db, Order) == 0

        result = service.restore_backup(created["id"])

        assert result["restored"] is True
        assert result["summary"]["orders"] == 2
        assert result["report"]["totalDropped"] == 0
        assert count(db, Order) == 2
        assert service.get_backup(created["id"])["backup"]["restoredAt"] is not None

    def test_missing_file(self, service, seed_operational):
        with pytest.raises(BackupFileMissingError):
            service.restore_backup("backup-old")
        assert count(seed_operational, Order) == 2

    def test_file_that_is_not_a_snapshot(self, service, seed_operational, backup_dir):
        created = service.create_backup()
        (backup_dir / created["fileName"]).write_text('{"version": 1}', encoding="utf-8")

        with pytest.raises(InvalidSnapshotError):
            service.restore_backup(created["id"])
        assert count(seed_operational, Order) == 2

    def test_unknown_backup(self, service):
        with pytest.raises(BackupNotFoundError):
            service.restore_backup("nope")


class TestImportSnapshot:
    """import_snapshot restores an uploaded payload and archives it."""

    def test_imports_and_archives(self, service, seed_operational, snapshot_payload, backup_dir):
        db = seed_operational
        result = service.import_snapshot(snapshot_payload(), user_id="user-owner")

        backup = result["backup"]
        assert backup["reference"].startswith("IMP-")
        assert backup["note"] == "Restored from uploaded file"
        assert backup["restoredAt"] is not None
        assert (backup_dir / backup["fileName"]).exists()
        assert result["summary"]["orders"] == 1
        assert count(db, Order) == 1

    def test_custom_note(self, service, db_session, snapshot_payload):
        result = service.import_snapshot(snapshot_payload(), note="from laptop")
        assert result["backup"]["note"] == "from laptop"

    def test_report_counts_drops(self, service, db_session, snapshot_payload):
        payload = snapshot_payload()
        payload["data"]["orderItems"][0]["orderId"] = "missing"
        result = service.import_snapshot(payload)
        assert result["report"]["dropped"]["orderItems"] == {"missing_reference": 1}
        assert result["report"]["totalDropped"] == 1

    @pytest.mark.parametrize("payload", [None, [], {"version": 1}, "snapshot"])
    def test_invalid_payload(self, service, seed_operational, payload):
        with pytest.raises(InvalidSnapshotError) as exc_info:
            service.import_snapshot(payload)

        assert exc_info.value.status_code == 400
        assert count(seed_operational, Order) == 2
        assert count(seed_operational, BackupRecord) == 1


class TestDeleteBackup:
    """delete_backup removes the record and its file."""

    def test_deletes_record_and_file(self, service, db_session, backup_dir):
        created = service.create_backup()
        service.delete_backup(created["id"])

        assert db_session.get(BackupRecord, created["id"]) is None
        assert not (backup_dir / created["fileName"]).exists()

    def test_record_without_file(self, service, seed_operational):
        service.delete_backup("backup-old")
        assert count(seed_operational, BackupRecord) == 0

    def test_unknown_backup(self, service):
        with pytest.raises(BackupNotFoundError):
            service.delete_backup("nope")
