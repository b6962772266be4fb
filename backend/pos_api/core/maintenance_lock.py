"""
Process-local guard for destructive maintenance operations.

Resets, restores and imports each run in one database transaction, but two
of them interleaving would still leave a confusing result. Within one
process they are serialized; a second request arriving while one runs is
rejected instead of queued.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from shared.utils.exceptions import MaintenanceInProgressError

_maintenance_lock = threading.Lock()


@contextmanager
def maintenance_guard(operation: str) -> Iterator[None]:
    """
    Raises:
        MaintenanceInProgressError: another guarded operation is running.
    """
    if not _maintenance_lock.acquire(blocking=False):
        raise MaintenanceInProgressError(operation)
    try:
        yield
    finally:
        _maintenance_lock.release()
