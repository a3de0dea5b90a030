"""
HotelSphere Local Store — Table Store Adapter
===============================================
The single controlled read/write path for local data.

Per table:  get / all / put / bulk_put / delete / clear / count
Settings:   get_settings / put_settings (singleton, no id)
Multi-table: snapshot / replace_all / wipe (all-or-nothing)

Write rules:
- put is an upsert by id (last write wins, no merge)
- Re-putting identical data is harmless (idempotent)
- replace_all clears and bulk-inserts every table it is given
  inside ONE transaction.atomic() block

This adapter does NOT:
- Push to the remote replica
- Validate referential integrity (the front desk does)
- Interpret entity meaning beyond the id on writes
  (callers taking foreign data run validate_record first)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.db import transaction

from core.config.hotel import HotelSettings
from core.local_store.errors import (
    InvalidRecordError,
    InvalidSnapshotError,
    MissingRecordIdError,
    SingletonViolationError,
    UnknownTableError,
)
from core.local_store.models import LocalRecord, SettingsRecord
from core.primitives.hotel import (
    ALL_TABLES,
    ENTITY_TABLES,
    ENTITY_TYPES,
    TABLE_BOOKINGS,
    TABLE_GROUPS,
    TABLE_GUESTS,
    TABLE_ROOMS,
    TABLE_SETTINGS,
    TABLE_TRANSACTIONS,
    Booking,
    GroupProfile,
    Guest,
    Room,
    Transaction,
)

logger = logging.getLogger("hotelsphere.store")

Snapshot = Dict[str, List[dict]]


def empty_snapshot() -> Snapshot:
    return {table: [] for table in ALL_TABLES}


def as_record(record: Any) -> dict:
    """Entities are stored in their dict form; dicts pass through copied."""
    if hasattr(record, "to_dict"):
        return record.to_dict()
    if isinstance(record, Mapping):
        return dict(record)
    raise TypeError(f"Cannot store {type(record).__name__} as a record.")


def validate_snapshot(snapshot: Mapping[str, Any]) -> None:
    """
    Check snapshot shape: known tables only, list values, at most one
    settings record, and an id on every entity record.
    """
    if not isinstance(snapshot, Mapping):
        raise InvalidSnapshotError("expected a mapping of table → records.")
    for table, records in snapshot.items():
        if table not in ALL_TABLES:
            raise InvalidSnapshotError(f"unknown table '{table}'.")
        if not isinstance(records, list):
            raise InvalidSnapshotError(f"table '{table}' must be a list.")
        if table == TABLE_SETTINGS:
            if len(records) > 1:
                raise SingletonViolationError(len(records))
            continue
        for record in records:
            if not isinstance(record, Mapping) or not record.get("id"):
                raise InvalidSnapshotError(
                    f"table '{table}' has a record without an id."
                )


def validate_record(table: str, record: Mapping[str, Any]) -> None:
    """
    Check that `record` loads as its table's entity, so the typed
    readers (rooms(), bookings(), settings() ...) can never fail on it.

    Raises InvalidRecordError.
    """
    if table not in ALL_TABLES:
        raise UnknownTableError(table)
    record_id = str(record.get("id") or "") if isinstance(record, Mapping) else ""
    try:
        if table == TABLE_SETTINGS:
            HotelSettings.from_dict(dict(record))
        else:
            ENTITY_TYPES[table].from_dict(dict(record))
    except (KeyError, TypeError, ValueError) as exc:
        detail = f"missing field {exc}" if isinstance(exc, KeyError) else str(exc)
        raise InvalidRecordError(table, record_id, detail) from exc


def validate_snapshot_records(snapshot: Mapping[str, Any]) -> None:
    """Shape check plus validate_record on every record."""
    validate_snapshot(snapshot)
    for table, records in snapshot.items():
        for record in records:
            validate_record(table, record)


class LocalStore:
    """
    Durable table store keyed by entity id.

    Reads are synchronous and always reflect this process's own
    preceding writes.
    """

    # ── validation ───────────────────────────────────────────

    @staticmethod
    def _check_table(table: str) -> None:
        if table not in ENTITY_TABLES:
            raise UnknownTableError(table)

    @staticmethod
    def _record_id(table: str, record: dict) -> str:
        record_id = record.get("id")
        if not record_id or not isinstance(record_id, str):
            raise MissingRecordIdError(table)
        return record_id

    # ── per-table operations ─────────────────────────────────

    def get(self, table: str, record_id: str) -> Optional[dict]:
        if table == TABLE_SETTINGS:
            return self.get_settings()
        self._check_table(table)
        row = (
            LocalRecord.objects
            .filter(table=table, record_id=record_id)
            .values_list("data", flat=True)
            .first()
        )
        return dict(row) if row is not None else None

    def all(self, table: str) -> List[dict]:
        if table == TABLE_SETTINGS:
            settings = self.get_settings()
            return [settings] if settings is not None else []
        self._check_table(table)
        rows = (
            LocalRecord.objects
            .filter(table=table)
            .order_by("id")
            .values_list("data", flat=True)
        )
        return [dict(row) for row in rows]

    def put(self, table: str, record: Any) -> None:
        data = as_record(record)
        if table == TABLE_SETTINGS:
            self.put_settings(data)
            return
        self._check_table(table)
        record_id = self._record_id(table, data)
        LocalRecord.objects.update_or_create(
            table=table,
            record_id=record_id,
            defaults={"data": data},
        )

    def bulk_put(self, table: str, records: Iterable[Any]) -> int:
        items = [as_record(r) for r in records]
        if table == TABLE_SETTINGS:
            if len(items) > 1:
                raise SingletonViolationError(len(items))
            if items:
                self.put_settings(items[0])
            return len(items)
        self._check_table(table)
        with transaction.atomic():
            for data in items:
                self.put(table, data)
        return len(items)

    def delete(self, table: str, record_id: str) -> bool:
        if table == TABLE_SETTINGS:
            deleted, _ = SettingsRecord.objects.all().delete()
            return deleted > 0
        self._check_table(table)
        deleted, _ = LocalRecord.objects.filter(
            table=table, record_id=record_id,
        ).delete()
        return deleted > 0

    def clear(self, table: str) -> int:
        if table == TABLE_SETTINGS:
            deleted, _ = SettingsRecord.objects.all().delete()
            return deleted
        self._check_table(table)
        deleted, _ = LocalRecord.objects.filter(table=table).delete()
        return deleted

    def count(self, table: str) -> int:
        if table == TABLE_SETTINGS:
            return SettingsRecord.objects.count()
        self._check_table(table)
        return LocalRecord.objects.filter(table=table).count()

    def is_empty(self) -> bool:
        return (
            not LocalRecord.objects.exists()
            and not SettingsRecord.objects.exists()
        )

    # ── settings singleton ───────────────────────────────────

    def get_settings(self) -> Optional[dict]:
        row = SettingsRecord.objects.values_list("data", flat=True).first()
        return dict(row) if row is not None else None

    def put_settings(self, record: Any) -> None:
        data = as_record(record)
        # A remote row may carry its own addressing id; locally there is none.
        data.pop("id", None)
        SettingsRecord.objects.update_or_create(
            singleton=True,
            defaults={"data": data},
        )

    # ── multi-table operations ───────────────────────────────

    def snapshot(self) -> Snapshot:
        return {table: self.all(table) for table in ALL_TABLES}

    def replace_all(self, snapshot: Mapping[str, List[dict]]) -> Dict[str, int]:
        """
        Clear and bulk-insert every table present in `snapshot`.
        Tables absent from the mapping are left untouched.

        All-or-nothing: one transaction for all tables.
        Returns record counts written per table.
        """
        validate_snapshot(snapshot)
        written: Dict[str, int] = {}

        with transaction.atomic():
            for table in ALL_TABLES:
                if table not in snapshot:
                    continue
                records = snapshot[table]
                self.clear(table)
                if table == TABLE_SETTINGS:
                    if records:
                        self.put_settings(records[0])
                    written[table] = len(records)
                    continue
                # Last occurrence of an id wins, first-occurrence order kept.
                by_id: Dict[str, dict] = {}
                for record in records:
                    by_id[record["id"]] = dict(record)
                LocalRecord.objects.bulk_create([
                    LocalRecord(table=table, record_id=rid, data=data)
                    for rid, data in by_id.items()
                ])
                written[table] = len(by_id)

        logger.info(f"Local tables replaced: {written}")
        return written

    def wipe(self) -> None:
        """Administrative wipe of all six tables."""
        with transaction.atomic():
            LocalRecord.objects.all().delete()
            SettingsRecord.objects.all().delete()
        logger.warning("Local store wiped (all tables cleared).")

    # ── typed readers ────────────────────────────────────────

    def rooms(self) -> List[Room]:
        return [Room.from_dict(r) for r in self.all(TABLE_ROOMS)]

    def guests(self) -> List[Guest]:
        return [Guest.from_dict(r) for r in self.all(TABLE_GUESTS)]

    def bookings(self) -> List[Booking]:
        return [Booking.from_dict(r) for r in self.all(TABLE_BOOKINGS)]

    def transactions(self) -> List[Transaction]:
        return [Transaction.from_dict(r) for r in self.all(TABLE_TRANSACTIONS)]

    def groups(self) -> List[GroupProfile]:
        return [GroupProfile.from_dict(r) for r in self.all(TABLE_GROUPS)]

    def settings(self) -> Optional[HotelSettings]:
        data = self.get_settings()
        return HotelSettings.from_dict(data) if data is not None else None
