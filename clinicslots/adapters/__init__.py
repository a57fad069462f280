"""
Adapters layer - Snapshot files and booking stores.
"""

from .memory_store import InMemoryBookingStore
from .snapshot import Snapshot, SnapshotLoader

__all__ = ["InMemoryBookingStore", "Snapshot", "SnapshotLoader"]
