"""
Backup file storage.

Each backup is one UTF-8 JSON file named <reference>.json inside the backup
directory. References are restricted to [A-Za-z0-9_-] so a reference can
never address a path outside that directory.
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from pathlib import Path

from shared.config.settings import settings
from shared.utils.exceptions import InvalidBackupReferenceError

REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def _base_dir(storage_dir: str | Path | None) -> Path:
    return Path(storage_dir if storage_dir is not None else settings.backup_storage_dir)


def assert_reference(reference: str) -> None:
    if not REFERENCE_PATTERN.match(reference):
        raise InvalidBackupReferenceError(reference)


def generate_reference(prefix: str) -> str:
    """
    Build a reference like "BKP-240105-4821".

    Anything outside [A-Za-z0-9_-] is replaced with "-" and the result is
    capped at the configured maximum length.
    """
    now = datetime.now()
    code = f"{prefix}-{now:%y%m%d}-{random.randint(1000, 9999)}"
    return _UNSAFE_CHARS.sub("-", code)[: settings.backup_reference_max_length]


def ensure_backup_dir(storage_dir: str | Path | None = None) -> Path:
    base = _base_dir(storage_dir)
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_backup_file_path(reference: str, storage_dir: str | Path | None = None) -> Path:
    assert_reference(reference)
    return _base_dir(storage_dir) / f"{reference}.json"


def backup_file_exists(reference: str, storage_dir: str | Path | None = None) -> bool:
    return build_backup_file_path(reference, storage_dir).exists()


def write_backup_file(reference: str, content: str, storage_dir: str | Path | None = None) -> Path:
    """
    Create <reference>.json.

    Raises:
        FileExistsError: a file for this reference is already stored. It is
            never replaced.
    """
    ensure_backup_dir(storage_dir)
    path = build_backup_file_path(reference, storage_dir)
    with path.open("x", encoding="utf-8") as fh:
        fh.write(content)
    return path


def read_backup_file(reference: str, storage_dir: str | Path | None = None) -> tuple[Path, str]:
    """
    Raises:
        FileNotFoundError: no file for this reference.
    """
    path = build_backup_file_path(reference, storage_dir)
    return path, path.read_text(encoding="utf-8")


def delete_backup_file(reference: str, storage_dir: str | Path | None = None) -> None:
    """Remove the file; a file that is already gone is not an error."""
    build_backup_file_path(reference, storage_dir).unlink(missing_ok=True)
