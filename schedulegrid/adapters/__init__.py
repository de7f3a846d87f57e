"""
Adapters layer - External schedule stores (REST backend, JSON snapshots).
"""

from .rest_store import RestScheduleStore
from .snapshot_store import SnapshotScheduleStore

__all__ = ["RestScheduleStore", "SnapshotScheduleStore"]
