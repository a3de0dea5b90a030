"""
HotelSphere Core — Local Store App Configuration
==================================================
The local store is the only data source the front desk reads
synchronously. It holds the six tables (rooms, guests, bookings,
transactions, groups, settings) keyed by entity id.

This app:
- Persists records by (table, id)
- Enforces the single settings row
- Replaces all tables atomically for bootstrap/resync/restore

This app does NOT:
- Talk to the remote replica (that is core.sync responsibility)
- Interpret booking or folio meaning
"""

from django.apps import AppConfig


class LocalStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.local_store"
    label = "local_store"
    verbose_name = "HotelSphere Local Store"
