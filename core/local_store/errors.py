"""
HotelSphere Local Store — Errors
==================================
Error types for the local table store.
"""


class LocalStoreError(Exception):
    """Base error for local store operations."""
    pass


class UnknownTableError(LocalStoreError):
    """Table name is not one of the six logical tables."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Unknown local table '{table}'.")


class MissingRecordIdError(LocalStoreError):
    """Record written without a usable id."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(
            f"Record for table '{table}' has no 'id'. "
            f"Every entity must carry a non-empty string id."
        )


class SingletonViolationError(LocalStoreError):
    """More than one settings record offered for the singleton table."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Settings are a singleton; got {count} records."
        )


class InvalidSnapshotError(LocalStoreError):
    """Snapshot/backup document does not have the expected shape."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid snapshot document: {detail}")


class InvalidRecordError(LocalStoreError):
    """Record does not load as its table's entity."""

    def __init__(self, table: str, record_id: str, detail: str):
        self.table = table
        self.record_id = record_id
        self.detail = detail
        super().__init__(
            f"Record '{record_id}' in table '{table}' is invalid: {detail}"
        )
