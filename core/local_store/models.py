"""
HotelSphere Local Store — Record Models
=========================================
Two tables back the six logical tables of the local store:

- LocalRecord     one row per (table, record_id); payload in `data`
- SettingsRecord  the hotel settings; at most ONE row, ever

RULES:
- (table, record_id) is unique — writes are upserts by id
- Settings have no id. The singleton constraint is a database
  constraint on the `singleton` column, not a well-known key.

This file contains NO business logic.
"""

from django.db import models


class EntityTable(models.TextChoices):
    """Logical tables stored as LocalRecord rows."""
    ROOMS = "rooms", "Rooms"
    GUESTS = "guests", "Guests"
    BOOKINGS = "bookings", "Bookings"
    TRANSACTIONS = "transactions", "Transactions"
    GROUPS = "groups", "Groups"


class LocalRecord(models.Model):
    """
    One entity of one logical table, stored as its dict form.
    Row order (pk) preserves first-insertion order of the entity.
    """

    table = models.CharField(
        max_length=32,
        choices=EntityTable.choices,
        help_text="Logical table this record belongs to.",
    )
    record_id = models.CharField(
        max_length=255,
        help_text="Entity id, unique within its table.",
    )
    data = models.JSONField(
        help_text="Entity dict form (snake_case keys, minor-unit amounts).",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "hs_local_records"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["table", "record_id"],
                name="uq_local_table_record",
            ),
        ]
        indexes = [
            models.Index(fields=["table"], name="idx_local_table"),
        ]

    def __str__(self):
        return f"[{self.table}] {self.record_id}"


class SettingsRecord(models.Model):
    """
    The hotel settings row.

    `singleton` is always True and unique, so a second row can never
    be inserted. Writers update the existing row in place.
    """

    singleton = models.BooleanField(default=True, editable=False)
    data = models.JSONField(help_text="HotelSettings dict form.")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "hs_local_settings"
        constraints = [
            models.UniqueConstraint(
                fields=["singleton"],
                name="uq_settings_singleton",
            ),
        ]

    def save(self, *args, **kwargs):
        """GUARD: the settings row is a singleton."""
        if self.singleton is not True:
            raise PermissionError(
                "Settings are a singleton. "
                "The singleton flag cannot be cleared."
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Settings({self.data.get('name', '')})"
