"""
Tests — Sync Wiring
=====================
Replica configuration read from Django settings, and the objects built from it.
"""

from __future__ import annotations

import json

import httpx
import pytest
from django.core.exceptions import ImproperlyConfigured

from core.local_store.store import LocalStore
from core.sync.coordinator import BootstrapSource
from core.sync.wiring import (
    build_coordinator,
    build_listener,
    replica_config_from_settings,
)


def test_config_read_from_settings(settings) -> None:
    settings.HOTELSPHERE_REPLICA = {"URL": "https://demo.supabase.co", "KEY": "k", "TIMEOUT": "3"}
    config = replica_config_from_settings()
    assert config.url == "https://demo.supabase.co"
    assert config.api_key == "k"
    assert config.timeout == 3.0


def test_missing_url_is_improperly_configured(settings) -> None:
    settings.HOTELSPHERE_REPLICA = {"URL": "", "KEY": ""}
    with pytest.raises(ImproperlyConfigured):
        build_coordinator()


@pytest.mark.django_db
def test_built_coordinator_bootstraps_over_http(settings) -> None:
    settings.HOTELSPHERE_REPLICA = {"URL": "https://demo.supabase.co", "KEY": "k", "TIMEOUT": 3}

    def unreachable(request):
        raise httpx.ConnectError("offline", request=request)

    coordinator = build_coordinator(transport=httpx.MockTransport(unreachable))
    result = coordinator.bootstrap()

    assert result.source == BootstrapSource.SEED
    assert result.replica_reachable is False
    coordinator.health.mark_ok()


def test_listener_requires_replica_url(settings) -> None:
    settings.HOTELSPHERE_REPLICA = {"URL": "https://demo.supabase.co", "KEY": "k"}
    coordinator = build_coordinator()
    settings.HOTELSPHERE_REPLICA = {"URL": "", "KEY": ""}
    with pytest.raises(ImproperlyConfigured):
        build_listener(coordinator)


@pytest.mark.django_db
def test_built_listener_applies_changes_locally(settings) -> None:
    settings.HOTELSPHERE_REPLICA = {"URL": "https://demo.supabase.co", "KEY": "k", "TIMEOUT": 3}
    frame = json.dumps({
        "topic": "realtime:public",
        "event": "postgres_changes",
        "payload": {"data": {
            "table": "rooms", "type": "INSERT",
            "record": {"id": "501", "number": "501", "floor": 5, "type": "Suite",
                       "status": "VACANT", "price": 30000},
            "old_record": None,
        }},
        "ref": None,
    })

    class OneFrameSocket:
        def __init__(self):
            self.sent = []

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return False

        def send(self, data):
            self.sent.append(json.loads(data))

        def recv(self, timeout=None):
            return frame

    socket = OneFrameSocket()
    store = LocalStore()
    coordinator = build_coordinator(store=store)
    listener = build_listener(coordinator, connect=lambda url, **options: socket)

    assert listener.listen(max_messages=1) == 1
    assert socket.sent[0]["event"] == "phx_join"
    assert store.get("rooms", "501")["number"] == "501"
