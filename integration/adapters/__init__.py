"""
HotelSphere Integration — Adapter Utilities
=============================================
Shared infrastructure for the replica and realtime adapters.

Doctrine: Adapters are stateless translators.
The hosted replica NEVER writes directly to local data.
Everything it sends flows through the sync coordinator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


# ══════════════════════════════════════════════════════════════
# ERROR HIERARCHY
# ══════════════════════════════════════════════════════════════

class IntegrationError(Exception):
    """Base error for all integration failures."""

    def __init__(self, message: str, system_id: str = "", retryable: bool = False):
        super().__init__(message)
        self.system_id = system_id
        self.retryable = retryable


class ValidationError(IntegrationError):
    """External message failed validation (bad payload, missing fields)."""

    def __init__(self, message: str, system_id: str = ""):
        super().__init__(message, system_id=system_id, retryable=False)


class TransientError(IntegrationError):
    """Temporary failure — retryable with backoff."""

    def __init__(self, message: str, system_id: str = ""):
        super().__init__(message, system_id=system_id, retryable=True)


class ReplicaUnavailableError(TransientError):
    """Replica could not be reached (network, timeout, 5xx)."""
    pass


class SchemaMismatchError(IntegrationError):
    """
    Replica rejected a write because a table or column is missing.

    Not retryable: the remote schema must be migrated first.
    """

    def __init__(
        self,
        table: str,
        code: str,
        detail: str = "",
        system_id: str = "",
    ):
        self.table = table
        self.code = code
        self.detail = detail
        super().__init__(
            f"Replica schema mismatch on '{table}' ({code}): {detail}",
            system_id=system_id,
            retryable=False,
        )

    @property
    def remediation(self) -> str:
        return (
            f"Add the missing column/table for '{self.table}' to the "
            f"replica schema, then run a forced resync."
        )


class ReplicaRequestError(IntegrationError):
    """Replica answered with a non-retryable error (4xx other than schema)."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: str = "",
        system_id: str = "",
    ):
        super().__init__(message, system_id=system_id, retryable=False)
        self.status_code = status_code
        self.code = code


# Error codes in a replica error payload that mean the schema is behind.
MISSING_COLUMN_CODES = frozenset({"PGRST204", "42703"})
MISSING_TABLE_CODES = frozenset({"PGRST205", "42P01"})
SCHEMA_ERROR_CODES = MISSING_COLUMN_CODES | MISSING_TABLE_CODES


def classify_error_payload(
    table: str,
    status_code: int,
    payload: Optional[Dict[str, Any]],
    system_id: str = "",
) -> IntegrationError:
    """Map an error response of the replica to the integration hierarchy."""
    payload = payload or {}
    code = str(payload.get("code") or "")
    message = str(payload.get("message") or payload.get("hint") or "")

    if code in SCHEMA_ERROR_CODES:
        return SchemaMismatchError(table, code, message, system_id=system_id)
    if status_code >= 500:
        return ReplicaUnavailableError(
            f"Replica returned {status_code} for '{table}': {message}",
            system_id=system_id,
        )
    return ReplicaRequestError(
        f"Replica rejected request on '{table}' ({status_code}): {message}",
        status_code=status_code,
        code=code,
        system_id=system_id,
    )


# ══════════════════════════════════════════════════════════════
# ADAPTER CONFIGURATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ReplicaConfig:
    """
    Connection settings for the hosted replica.

    An empty url means "no replica configured" (offline mode).
    """

    url: str = ""
    api_key: str = ""
    timeout: float = 10.0
    system_id: str = "replica"

    def __post_init__(self):
        if self.url and not self.url.startswith(("http://", "https://")):
            raise ValueError("replica url must start with http:// or https://.")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive.")

    @property
    def enabled(self) -> bool:
        return bool(self.url)
