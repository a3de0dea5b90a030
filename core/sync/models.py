"""
HotelSphere Sync — Bootstrap Marker
=====================================
Durable marker of an in-flight remote-wins replacement.

Table: hs_bootstrap_marker
Fields:
- saga:       which replacement is running (always "bootstrap")
- reason:     what triggered it (bootstrap / resync / recovery)
- started_at: when the marker was written
- tables:     table record counts fetched from the replica

The marker is written BEFORE local tables are replaced and cleared
only AFTER every table succeeded. A marker found at session start
means the previous replacement never finished.

Markers are NOT data. They can be deleted or reset safely.
"""

from typing import Dict, Optional

from django.db import models

BOOTSTRAP_SAGA = "bootstrap"


class BootstrapMarker(models.Model):

    saga = models.CharField(
        max_length=64,
        unique=True,
        default=BOOTSTRAP_SAGA,
        help_text="Replacement saga this marker brackets.",
    )
    reason = models.CharField(
        max_length=32,
        help_text="What started the replacement (bootstrap/resync/recovery).",
    )
    tables = models.JSONField(
        default=dict,
        help_text="Record counts per table fetched from the replica.",
    )
    started_at = models.DateTimeField(
        auto_now=True,
        help_text="When this marker was last written.",
    )

    class Meta:
        db_table = "hs_bootstrap_marker"

    def __str__(self):
        return f"BootstrapMarker({self.saga}, reason={self.reason})"


# ══════════════════════════════════════════════════════════════
# MARKER OPERATIONS
# ══════════════════════════════════════════════════════════════

def save_marker(reason: str, tables: Optional[Dict[str, int]] = None) -> BootstrapMarker:
    """Write (or overwrite) the marker before replacing local tables."""
    marker, _ = BootstrapMarker.objects.update_or_create(
        saga=BOOTSTRAP_SAGA,
        defaults={"reason": reason, "tables": dict(tables or {})},
    )
    return marker


def load_marker() -> Optional[BootstrapMarker]:
    """Return the leftover marker, or None if the last replacement finished."""
    try:
        return BootstrapMarker.objects.get(saga=BOOTSTRAP_SAGA)
    except BootstrapMarker.DoesNotExist:
        return None


def clear_marker() -> bool:
    """
    Delete the marker once all tables are replaced.
    Returns True if deleted, False if not found.
    """
    deleted, _ = BootstrapMarker.objects.filter(saga=BOOTSTRAP_SAGA).delete()
    return deleted > 0
