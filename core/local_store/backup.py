"""
HotelSphere Local Store — Backup / Restore
============================================
Full-snapshot export and import of all six tables as one JSON document.

Document shape:
    {"version": 1, "exported_at": "...",
     "rooms": [...], "guests": [...], "bookings": [...],
     "transactions": [...], "settings": [...], "groups": [...]}

Import replaces only the tables present in the document, in one
transaction. Purely local: nothing is pushed to the replica.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Union

from core.local_store.errors import InvalidSnapshotError
from core.local_store.store import LocalStore, validate_snapshot_records
from core.primitives.hotel import ALL_TABLES

logger = logging.getLogger("hotelsphere.store")

BACKUP_VERSION = 1


def backup_filename(day: date) -> str:
    return f"hotelsphere_backup_{day.isoformat()}.json"


def export_snapshot(
    store: LocalStore,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> Dict[str, Any]:
    document: Dict[str, Any] = {
        "version": BACKUP_VERSION,
        "exported_at": clock().isoformat(),
    }
    document.update(store.snapshot())
    return document


def import_snapshot(store: LocalStore, document: Mapping[str, Any]) -> Dict[str, int]:
    if not isinstance(document, Mapping):
        raise InvalidSnapshotError("backup must be a JSON object.")
    version = document.get("version", BACKUP_VERSION)
    if version != BACKUP_VERSION:
        raise InvalidSnapshotError(f"unsupported backup version {version!r}.")

    tables = {t: document[t] for t in ALL_TABLES if t in document}
    if not tables:
        raise InvalidSnapshotError("backup contains none of the known tables.")
    validate_snapshot_records(tables)

    written = store.replace_all(tables)
    logger.info(f"Backup restored: {written}")
    return written


def write_backup(store: LocalStore, path: Union[str, Path]) -> Path:
    target = Path(path)
    if target.is_dir():
        target = target / backup_filename(date.today())
    target.write_text(
        json.dumps(export_snapshot(store), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return target


def read_backup(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidSnapshotError(f"not valid JSON ({exc.msg}).") from exc
