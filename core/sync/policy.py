"""
HotelSphere Sync — Conflict Policy
====================================
Decides what lands in the local store when a remote change arrives
for a record that already exists locally.

Default: last writer wins (the remote record replaces the local one).
There is no field-level merge and no vector clock.
"""

from __future__ import annotations

from typing import Optional, Protocol


class ConflictPolicy(Protocol):
    def resolve(self, local: Optional[dict], remote: dict) -> dict:
        """Return the record to store. `local` is None for a new record."""
        ...


class LastWriterWins:
    """Remote overwrites local, whole record."""

    def resolve(self, local: Optional[dict], remote: dict) -> dict:
        return dict(remote)
