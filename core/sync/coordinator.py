"""
HotelSphere Sync — Coordinator
================================
Keeps the local store in eventual agreement with the hosted replica.

Three flows:
1. bootstrap()      cold-start reconciliation (once per session)
2. push()           outbound upsert after every local mutation
3. apply_change()   inbound realtime change → local store

Bootstrap precedence:
    replica has settings   → remote wins: all six tables replaced
    local store has data   → local used as-is
    both empty             → default settings + seed rooms, both stores

Failure semantics:
- The replica being unreachable never fails a local operation.
  It flips the sync health indicator to ERROR and the caller carries on.
- A failed push is NOT rolled back locally and NOT retried.
  Divergence is repaired by the next bootstrap or force_resync().
- No conflict detection: the ConflictPolicy decides (last writer wins).
- Replica data that does not load as its entity never reaches the
  local store: an inbound change is dropped, a snapshot is refused
  (health ERROR, local data kept).

Remote-wins replacement is a saga: a durable marker is written before
any local table changes and cleared only after all six are replaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from django.db import transaction

from core.local_store.errors import LocalStoreError
from core.local_store.store import (
    LocalStore,
    as_record,
    validate_record,
    validate_snapshot_records,
)
from core.primitives.hotel import (
    ALL_TABLES,
    TABLE_ROOMS,
    TABLE_SETTINGS,
)
from core.sync.errors import (
    InvalidRemoteSnapshotError,
    SyncError,
    UnsupportedTableError,
)
from core.sync.health import SyncHealth, get_sync_health
from core.sync.models import clear_marker, load_marker, save_marker
from core.sync.policy import ConflictPolicy, LastWriterWins
from core.sync.seed import default_settings, seed_rooms
from integration.adapters import (
    IntegrationError,
    ReplicaUnavailableError,
    SchemaMismatchError,
)
from integration.realtime import ChangeEvent, ChangeType, RealtimeChannel
from integration.replica import RemoteReplica

logger = logging.getLogger("hotelsphere.sync")


class BootstrapSource(Enum):
    REMOTE = "REMOTE"
    LOCAL = "LOCAL"
    SEED = "SEED"


@dataclass(frozen=True)
class BootstrapResult:
    source: BootstrapSource
    counts: Dict[str, int] = field(default_factory=dict)
    replica_reachable: bool = True
    recovered_interrupted: bool = False

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "counts": dict(self.counts),
            "replica_reachable": self.replica_reachable,
            "recovered_interrupted": self.recovered_interrupted,
        }


class EmptyReplicaError(SyncError):
    """Forced resync against a replica that holds no settings record."""

    def __init__(self):
        super().__init__(
            "Replica holds no settings record. Refusing to replace "
            "local data with an empty snapshot."
        )


class SyncCoordinator:
    """
    Orchestrates local store ⇄ replica agreement.

    Collaborators are injected; health defaults to the process-wide
    indicator so every coordinator in the process reports to one place.
    """

    def __init__(
        self,
        store: LocalStore,
        replica: RemoteReplica,
        *,
        policy: Optional[ConflictPolicy] = None,
        health: Optional[SyncHealth] = None,
    ) -> None:
        self._store = store
        self._replica = replica
        self._policy = policy or LastWriterWins()
        self._health = health or get_sync_health()

    @property
    def health(self) -> SyncHealth:
        return self._health

    @property
    def store(self) -> LocalStore:
        return self._store

    # ── failure bookkeeping ──────────────────────────────────

    def _record_failure(self, operation: str, exc: Exception) -> None:
        if isinstance(exc, SchemaMismatchError):
            logger.warning(
                f"{operation}: {exc} Remediation: {exc.remediation}"
            )
        else:
            logger.error(f"{operation} failed: {exc}", exc_info=True)
        self._health.mark_error(f"{operation}: {exc}")

    # ══════════════════════════════════════════════════════════
    # BOOTSTRAP
    # ══════════════════════════════════════════════════════════

    def bootstrap(self) -> BootstrapResult:
        marker = load_marker()
        interrupted = marker is not None
        if interrupted:
            logger.warning(
                f"Previous replacement did not finish "
                f"(reason: {marker.reason}). Retrying from the replica."
            )

        # ── Step 1: does the replica hold the truth? ──────────
        reachable = True
        remote_settings = None
        try:
            remote_settings = self._replica.fetch_settings()
        except IntegrationError as exc:
            reachable = False
            self._record_failure("bootstrap", exc)

        snapshot_rejected = False
        if remote_settings:
            try:
                counts = self._replace_from_replica(
                    "recovery" if interrupted else "bootstrap",
                )
            except IntegrationError as exc:
                reachable = False
                self._record_failure("bootstrap", exc)
            except LocalStoreError as exc:
                snapshot_rejected = True
                self._record_failure("bootstrap", exc)
            else:
                self._health.mark_ok()
                logger.info(f"Bootstrap: remote snapshot applied {counts}")
                return BootstrapResult(
                    source=BootstrapSource.REMOTE,
                    counts=counts,
                    recovered_interrupted=interrupted,
                )

        # ── Step 2: local data, used as-is ───────────────────
        if not self._store.is_empty():
            if interrupted and reachable:
                # Replacement is atomic, so local tables are consistent;
                # the replica no longer has anything usable to retry from.
                clear_marker()
                logger.warning(
                    "Nothing to retry from the replica; leftover bootstrap "
                    "marker cleared."
                )
            elif interrupted:
                logger.error(
                    "Interrupted bootstrap cannot be retried while the "
                    "replica is unreachable. Marker kept for next launch."
                )
            if reachable and not snapshot_rejected:
                self._health.mark_ok()
            logger.info("Bootstrap: using local data")
            return BootstrapResult(
                source=BootstrapSource.LOCAL,
                counts=self._counts(),
                replica_reachable=reachable,
                recovered_interrupted=False,
            )

        # ── Step 3: first run anywhere ───────────────────────
        settings = default_settings()
        rooms = seed_rooms()
        with transaction.atomic():
            self._store.put_settings(settings)
            self._store.bulk_put(TABLE_ROOMS, rooms)
        if interrupted:
            clear_marker()

        # The replica holds data it could not load; the seed stays local.
        if reachable and not snapshot_rejected:
            self.push(TABLE_SETTINGS, [settings])
            self.push(TABLE_ROOMS, rooms)
        logger.info(f"Bootstrap: seeded {len(rooms)} rooms and default settings")
        return BootstrapResult(
            source=BootstrapSource.SEED,
            counts=self._counts(),
            replica_reachable=reachable,
        )

    def force_resync(self) -> BootstrapResult:
        """
        Remote-wins replacement on demand.

        Raises:
            ReplicaUnavailableError:    replica cannot be read (local untouched)
            EmptyReplicaError:          replica holds no settings (local untouched)
            InvalidRemoteSnapshotError: snapshot does not load (local untouched)
        """
        try:
            remote_settings = self._replica.fetch_settings()
            if not remote_settings:
                raise EmptyReplicaError()
            counts = self._replace_from_replica("resync")
        except IntegrationError as exc:
            self._record_failure("force_resync", exc)
            if isinstance(exc, ReplicaUnavailableError):
                raise
            raise ReplicaUnavailableError(
                f"Resync aborted: {exc}", system_id=exc.system_id,
            ) from exc
        except LocalStoreError as exc:
            self._record_failure("force_resync", exc)
            raise InvalidRemoteSnapshotError(str(exc)) from exc

        self._health.mark_ok()
        logger.info(f"Forced resync applied {counts}")
        return BootstrapResult(source=BootstrapSource.REMOTE, counts=counts)

    def _replace_from_replica(self, reason: str) -> Dict[str, int]:
        """
        Remote-wins replacement. The snapshot is validated before the
        marker is written. On a LocalStoreError local tables are untouched
        and no marker is left behind.
        """
        fetched = self._replica.fetch_snapshot()
        snapshot = {table: list(fetched.get(table) or []) for table in ALL_TABLES}
        try:
            validate_snapshot_records(snapshot)
        except LocalStoreError:
            clear_marker()
            raise
        counts = {table: len(records) for table, records in snapshot.items()}

        save_marker(reason, counts)
        try:
            self._store.replace_all(snapshot)
        except LocalStoreError:
            # replace_all is atomic: nothing was written.
            clear_marker()
            raise
        clear_marker()
        return counts

    def _counts(self) -> Dict[str, int]:
        return {table: self._store.count(table) for table in ALL_TABLES}

    # ══════════════════════════════════════════════════════════
    # OUTBOUND
    # ══════════════════════════════════════════════════════════

    def push(self, table: str, records: Iterable[Any]) -> bool:
        """
        Upsert exactly the changed records to the replica.
        Returns False on failure; the local write always stands.
        """
        if table not in ALL_TABLES:
            raise UnsupportedTableError(table)
        items = [as_record(r) for r in records]
        if not items:
            return True
        try:
            self._replica.upsert(table, items)
        except IntegrationError as exc:
            self._record_failure(f"push {table}", exc)
            return False
        self._health.mark_ok()
        logger.debug(f"Pushed {len(items)} record(s) to '{table}'")
        return True

    def push_delete(self, table: str, record_id: str) -> bool:
        if table not in ALL_TABLES:
            raise UnsupportedTableError(table)
        try:
            self._replica.delete(table, record_id)
        except IntegrationError as exc:
            self._record_failure(f"delete {table}/{record_id}", exc)
            return False
        self._health.mark_ok()
        return True

    # ══════════════════════════════════════════════════════════
    # INBOUND
    # ══════════════════════════════════════════════════════════

    def apply_change(self, event: ChangeEvent) -> bool:
        """
        Apply one replica change to the local store.

        Idempotent: applying the same INSERT/UPDATE twice leaves the
        same state as applying it once. Returns True if applied.
        """
        table = event.table
        if table not in ALL_TABLES:
            logger.warning(f"Ignoring change for unknown table '{table}'")
            return False

        if event.change_type == ChangeType.DELETE:
            if table == TABLE_SETTINGS:
                logger.warning("Ignoring DELETE of the settings singleton")
                return False
            record_id = event.record_id
            if not record_id:
                logger.warning(f"Ignoring DELETE without id on '{table}'")
                return False
            self._store.delete(table, record_id)
            return True

        remote = dict(event.new or {})
        if table == TABLE_SETTINGS:
            if not self._loads(table, remote):
                return False
            self._store.put_settings(remote)
            return True

        record_id = remote.get("id")
        if not record_id:
            logger.warning(f"Ignoring {event.change_type.value} without id on '{table}'")
            return False
        local = self._store.get(table, record_id)
        merged = self._policy.resolve(local, remote)
        if not self._loads(table, merged):
            return False
        self._store.put(table, merged)
        return True

    def _loads(self, table: str, record: dict) -> bool:
        try:
            validate_record(table, record)
        except LocalStoreError as exc:
            logger.warning(f"Dropped inbound change: {exc}")
            return False
        return True

    def subscribe(self, channel: RealtimeChannel) -> None:
        """Route every table's change feed into apply_change."""
        for table in ALL_TABLES:
            channel.subscribe(table, self.apply_change)

    # ══════════════════════════════════════════════════════════
    # STATUS
    # ══════════════════════════════════════════════════════════

    def status(self) -> dict:
        marker = load_marker()
        return {
            "health": self._health.to_dict(),
            "bootstrap_pending": marker is not None,
            "counts": self._counts(),
        }
