"""
System maintenance: snapshot export, restore and data resets.

- coercion: total conversions of untrusted snapshot values
- snapshot: snapshot schema, parser and summary
- builder: database -> snapshot
- reset: scoped and factory resets
- restore: snapshot -> database, all-or-nothing
"""

from .builder import build_system_snapshot
from .coercion import format_date, parse_date
from .reset import (
    ResetResult,
    ResetScope,
    clear_operational,
    clear_transactions,
    factory_reset_system_data,
    reset_system_data,
)
from .restore import DropReason, RestoreReport, restore_system_snapshot
from .snapshot import (
    SNAPSHOT_KEYS,
    SnapshotData,
    SystemSnapshot,
    parse_system_snapshot,
    summarize_snapshot,
)

__all__ = [
    "build_system_snapshot",
    "format_date",
    "parse_date",
    "ResetResult",
    "ResetScope",
    "clear_operational",
    "clear_transactions",
    "factory_reset_system_data",
    "reset_system_data",
    "DropReason",
    "RestoreReport",
    "restore_system_snapshot",
    "SNAPSHOT_KEYS",
    "SnapshotData",
    "SystemSnapshot",
    "parse_system_snapshot",
    "summarize_snapshot",
]
