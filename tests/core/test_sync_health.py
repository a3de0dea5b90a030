"""
Tests — Sync Health Indicator
"""

from __future__ import annotations

from datetime import datetime, timezone

from core.sync import LastWriterWins, SyncHealth, SyncState, get_sync_health

T1 = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


class TestSyncHealth:
    def test_starts_ok(self):
        health = SyncHealth()
        assert health.state == SyncState.OK
        assert health.reason is None

    def test_error_then_ok(self):
        health = SyncHealth(clock=lambda: T1)
        health.mark_error("push rooms: offline")
        assert not health.is_ok()
        assert health.reason == "push rooms: offline"
        assert health.last_error_at == T1

        health.mark_ok()
        assert health.is_ok()
        assert health.reason is None
        assert health.last_ok_at == T1
        assert health.last_error_at == T1

    def test_to_dict(self):
        health = SyncHealth(clock=lambda: T1)
        health.mark_error("boom")
        assert health.to_dict() == {
            "state": "ERROR",
            "reason": "boom",
            "last_error_at": T1.isoformat(),
            "last_ok_at": None,
        }

    def test_process_wide_indicator_is_shared(self):
        assert get_sync_health() is get_sync_health()


class TestLastWriterWins:
    def test_remote_replaces_local(self):
        local = {"id": "101", "status": "DIRTY", "price": 1}
        remote = {"id": "101", "status": "VACANT"}
        assert LastWriterWins().resolve(local, remote) == remote

    def test_result_is_a_copy(self):
        remote = {"id": "101"}
        merged = LastWriterWins().resolve(None, remote)
        merged["id"] = "999"
        assert remote["id"] == "101"
