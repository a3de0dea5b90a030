"""
HotelSphere Sync — Wiring
===========================
Builds the replica adapter, coordinator and change-feed listener from
Django settings.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from core.local_store.store import LocalStore
from core.sync.coordinator import SyncCoordinator
from integration.adapters import ReplicaConfig
from integration.realtime import RealtimeChannel
from integration.realtime.client import RealtimeListener
from integration.replica.postgrest import PostgrestReplica


def replica_config_from_settings() -> ReplicaConfig:
    conf = getattr(settings, "HOTELSPHERE_REPLICA", {}) or {}
    return ReplicaConfig(
        url=conf.get("URL", ""),
        api_key=conf.get("KEY", ""),
        timeout=float(conf.get("TIMEOUT", 10)),
    )


def _required_config() -> ReplicaConfig:
    config = replica_config_from_settings()
    if not config.enabled:
        raise ImproperlyConfigured(
            "HOTELSPHERE_REPLICA_URL is not set; no replica to sync with."
        )
    return config


def build_coordinator(
    store: Optional[LocalStore] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> SyncCoordinator:
    return SyncCoordinator(
        store or LocalStore(),
        PostgrestReplica(_required_config(), transport=transport),
    )


def build_listener(
    coordinator: SyncCoordinator,
    connect: Optional[Callable[..., Any]] = None,
) -> RealtimeListener:
    """Change-feed listener whose every table routes into coordinator.apply_change."""
    channel = RealtimeChannel()
    coordinator.subscribe(channel)
    return RealtimeListener(_required_config(), channel, connect=connect)
