"""
HotelSphere Front Desk — Errors
=================================
Raised for calls that cannot proceed at all. Expected business
rejections are returned as Rejected results instead.
"""


class FrontDeskError(Exception):
    """Base error for front desk operations."""
    pass


class SettingsMissingError(FrontDeskError):
    """Local store has no settings row; bootstrap has not run."""

    def __init__(self):
        super().__init__(
            "Hotel settings are missing from the local store. "
            "Run bootstrap before front desk operations."
        )


class RecordNotFoundError(FrontDeskError):
    """Referenced record is not in the local store."""

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"No record '{record_id}' in table '{table}'.")
