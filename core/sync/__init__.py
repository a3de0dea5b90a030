"""
HotelSphere Sync - Public API
==============================
Local store ⇄ hosted replica reconciliation.

Imports of the coordinator and marker model are deferred to avoid
circular import during app loading.
Use: from core.sync.coordinator import SyncCoordinator
"""

from core.sync.health import SyncHealth, SyncState, get_sync_health
from core.sync.policy import ConflictPolicy, LastWriterWins

__all__ = [
    "SyncHealth",
    "SyncState",
    "get_sync_health",
    "ConflictPolicy",
    "LastWriterWins",
]
