"""
HotelSphere Sync — Errors
===========================
Error types for the sync coordinator.
Replica transport failures stay IntegrationError subclasses.
"""


class SyncError(Exception):
    """Base error for sync operations."""
    pass


class UnsupportedTableError(SyncError):
    """Push or change for a table the sync layer does not replicate."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table '{table}' is not replicated.")


class InvalidRemoteSnapshotError(SyncError):
    """Replica snapshot cannot be loaded into the local store."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(
            f"Replica snapshot rejected, local data kept: {detail}"
        )
