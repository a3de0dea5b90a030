"""
HotelSphere Local Store - Public API
=====================================
Durable process-local table store.

Imports are deferred to avoid circular import during app loading.
Use: from core.local_store.store import LocalStore
"""

from core.local_store.errors import (
    InvalidSnapshotError,
    LocalStoreError,
    MissingRecordIdError,
    SingletonViolationError,
    UnknownTableError,
)

__all__ = [
    "LocalStoreError",
    "UnknownTableError",
    "MissingRecordIdError",
    "SingletonViolationError",
    "InvalidSnapshotError",
]
