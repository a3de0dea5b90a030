"""
HotelSphere Integration Layer — Public API
============================================
Controlled gateway to the hosted replica.

Doctrine: The replica NEVER writes directly to local data.
Outbound: local write → push through the sync coordinator → replica
Inbound:  replica change message → realtime channel → sync coordinator
"""

from integration.adapters import (
    IntegrationError,
    ReplicaConfig,
    ReplicaRequestError,
    ReplicaUnavailableError,
    SchemaMismatchError,
    TransientError,
    ValidationError,
    classify_error_payload,
)
from integration.realtime import ChangeEvent, ChangeType, RealtimeChannel
from integration.replica import REMOTE_SETTINGS_ID, InMemoryReplica, RemoteReplica

__all__ = [
    # Adapters
    "ReplicaConfig",
    "classify_error_payload",
    # Errors
    "IntegrationError",
    "ValidationError",
    "TransientError",
    "ReplicaUnavailableError",
    "SchemaMismatchError",
    "ReplicaRequestError",
    # Replica
    "REMOTE_SETTINGS_ID",
    "RemoteReplica",
    "InMemoryReplica",
    # Realtime
    "ChangeType",
    "ChangeEvent",
    "RealtimeChannel",
]
