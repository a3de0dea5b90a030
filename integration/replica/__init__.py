"""
HotelSphere Integration — Remote Replica
==========================================
The hosted copy of the six tables, shared by every client instance.

Protocol (all operations may raise IntegrationError subclasses):
    select(table)              → list of record dicts
    upsert(table, records)     → insert-or-update by id
    delete(table, record_id)   → remove by id
    fetch_settings()           → settings dict or None
    fetch_snapshot()           → {table: [records]} for all six tables

Settings have no id locally. Adapters address the single remote
settings row by REMOTE_SETTINGS_ID and strip it on the way back.

Implementations:
    InMemoryReplica   — process-local, for tests and offline demos
    PostgrestReplica  — HTTP (integration.replica.postgrest)
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from core.primitives.hotel import ALL_TABLES, TABLE_SETTINGS
from integration.adapters import (
    IntegrationError,
    ReplicaUnavailableError,
    ValidationError,
)

logger = logging.getLogger("hotelsphere.replica")

REMOTE_SETTINGS_ID = "primary"


class RemoteReplica(Protocol):
    """Structural type every replica adapter satisfies."""

    def select(self, table: str) -> List[dict]: ...

    def upsert(self, table: str, records: Iterable[dict]) -> None: ...

    def delete(self, table: str, record_id: str) -> None: ...

    def fetch_settings(self) -> Optional[dict]: ...

    def fetch_snapshot(self) -> Dict[str, List[dict]]: ...


def check_table(table: str, system_id: str = "") -> None:
    if table not in ALL_TABLES:
        raise ValidationError(f"Unknown replica table '{table}'.", system_id=system_id)


def strip_settings_id(record: Optional[dict]) -> Optional[dict]:
    if record is None:
        return None
    data = dict(record)
    data.pop("id", None)
    return data


# ══════════════════════════════════════════════════════════════
# IN-MEMORY REPLICA
# ══════════════════════════════════════════════════════════════

class InMemoryReplica:
    """
    Replica held in process memory.

    - `available = False` makes every call raise ReplicaUnavailableError
    - `fail_next(exc)` makes the next call raise `exc` once
    - `on_change` (if set) receives a realtime-shaped message for every
      successful write, the way the hosted replica echoes changes back
      to all subscribers including the writer
    """

    system_id = "memory"

    def __init__(
        self,
        on_change: Optional[Callable[[dict], Any]] = None,
    ) -> None:
        self._tables: Dict[str, Dict[str, dict]] = {t: {} for t in ALL_TABLES}
        self.available = True
        self.on_change = on_change
        self.calls: List[tuple] = []
        self._pending_failure: Optional[IntegrationError] = None

    # ── failure injection ────────────────────────────────────

    def fail_next(self, exc: IntegrationError) -> None:
        self._pending_failure = exc

    def _enter(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if not self.available:
            raise ReplicaUnavailableError(
                "In-memory replica is offline.", system_id=self.system_id,
            )
        if self._pending_failure is not None:
            exc, self._pending_failure = self._pending_failure, None
            raise exc

    def _emit(self, event_type: str, table: str, new: Optional[dict], old: Optional[dict]) -> None:
        if self.on_change is None:
            return
        self.on_change({
            "table": table,
            "eventType": event_type,
            "new": copy.deepcopy(new) if new is not None else None,
            "old": copy.deepcopy(old) if old is not None else None,
        })

    # ── protocol ─────────────────────────────────────────────

    def select(self, table: str) -> List[dict]:
        check_table(table, self.system_id)
        self._enter("select", table)
        if table == TABLE_SETTINGS:
            return [
                strip_settings_id(r) for r in self._tables[table].values()
            ]
        return [copy.deepcopy(r) for r in self._tables[table].values()]

    def upsert(self, table: str, records: Iterable[dict]) -> None:
        check_table(table, self.system_id)
        items = [dict(r) for r in records]
        self._enter("upsert", table)
        for record in items:
            if table == TABLE_SETTINGS:
                record["id"] = REMOTE_SETTINGS_ID
            record_id = record.get("id")
            if not record_id:
                raise ValidationError(
                    f"Record for '{table}' has no id.", system_id=self.system_id,
                )
            existed = record_id in self._tables[table]
            self._tables[table][record_id] = copy.deepcopy(record)
            self._emit("UPDATE" if existed else "INSERT", table, record, None)

    def delete(self, table: str, record_id: str) -> None:
        check_table(table, self.system_id)
        self._enter("delete", table)
        if table == TABLE_SETTINGS:
            record_id = REMOTE_SETTINGS_ID
        old = self._tables[table].pop(record_id, None)
        if old is not None:
            self._emit("DELETE", table, None, {"id": record_id})

    def fetch_settings(self) -> Optional[dict]:
        self._enter("fetch_settings", TABLE_SETTINGS)
        return strip_settings_id(self._tables[TABLE_SETTINGS].get(REMOTE_SETTINGS_ID))

    def fetch_snapshot(self) -> Dict[str, List[dict]]:
        return {table: self.select(table) for table in ALL_TABLES}

    # ── test helpers ─────────────────────────────────────────

    def seed(self, table: str, records: Iterable[dict]) -> None:
        """Write records directly, bypassing availability and echo."""
        for record in records:
            data = copy.deepcopy(dict(record))
            if table == TABLE_SETTINGS:
                data["id"] = REMOTE_SETTINGS_ID
            self._tables[table][data["id"]] = data

    def count(self, table: str) -> int:
        return len(self._tables[table])


__all__ = [
    "REMOTE_SETTINGS_ID",
    "RemoteReplica",
    "InMemoryReplica",
    "check_table",
    "strip_settings_id",
]
