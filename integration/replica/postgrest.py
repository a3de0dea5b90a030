"""
HotelSphere Integration — PostgREST Replica
=============================================
RemoteReplica over the PostgREST / Supabase REST dialect.

    GET    /rest/v1/{table}?select=*
    POST   /rest/v1/{table}?on_conflict=id
           Prefer: resolution=merge-duplicates,return=minimal
    DELETE /rest/v1/{table}?id=eq.{record_id}

Failure mapping:
    transport error / timeout / 5xx   → ReplicaUnavailableError
    PGRST204, 42703 (missing column)  → SchemaMismatchError
    PGRST205, 42P01 (missing table)   → SchemaMismatchError
    any other 4xx                     → ReplicaRequestError
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

import httpx

from core.primitives.hotel import ALL_TABLES, TABLE_SETTINGS
from integration.adapters import (
    ReplicaConfig,
    ReplicaUnavailableError,
    classify_error_payload,
)
from integration.replica import REMOTE_SETTINGS_ID, check_table, strip_settings_id

logger = logging.getLogger("hotelsphere.replica")

UPSERT_PREFER = "resolution=merge-duplicates,return=minimal"


class PostgrestReplica:
    """Blocking httpx client for the hosted replica."""

    def __init__(
        self,
        config: ReplicaConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not config.enabled:
            raise ValueError("PostgrestReplica requires a replica url.")
        self._config = config
        self._client = httpx.Client(
            base_url=config.url.rstrip("/") + "/rest/v1",
            timeout=config.timeout,
            transport=transport,
            headers={
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    @property
    def system_id(self) -> str:
        return self._config.system_id

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> PostgrestReplica:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── transport ────────────────────────────────────────────

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[list] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        check_table(table, self.system_id)
        try:
            response = self._client.request(
                method, f"/{table}", params=params, json=json, headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise ReplicaUnavailableError(
                f"Replica timed out on {method} '{table}'.",
                system_id=self.system_id,
            ) from exc
        except httpx.TransportError as exc:
            raise ReplicaUnavailableError(
                f"Replica unreachable on {method} '{table}': {exc}",
                system_id=self.system_id,
            ) from exc

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {"message": response.text}
            if not isinstance(payload, dict):
                payload = {"message": str(payload)}
            raise classify_error_payload(
                table, response.status_code, payload, system_id=self.system_id,
            )
        return response

    # ── protocol ─────────────────────────────────────────────

    def select(self, table: str) -> List[dict]:
        response = self._request("GET", table, params={"select": "*"})
        rows = response.json() or []
        if table == TABLE_SETTINGS:
            return [strip_settings_id(r) for r in rows]
        return rows

    def upsert(self, table: str, records: Iterable[dict]) -> None:
        items = [dict(r) for r in records]
        if not items:
            return
        if table == TABLE_SETTINGS:
            for record in items:
                record["id"] = REMOTE_SETTINGS_ID
        self._request(
            "POST",
            table,
            params={"on_conflict": "id"},
            json=items,
            headers={"Prefer": UPSERT_PREFER},
        )
        logger.debug(f"Upserted {len(items)} record(s) into '{table}'")

    def delete(self, table: str, record_id: str) -> None:
        if table == TABLE_SETTINGS:
            record_id = REMOTE_SETTINGS_ID
        self._request("DELETE", table, params={"id": f"eq.{record_id}"})

    def fetch_settings(self) -> Optional[dict]:
        response = self._request(
            "GET",
            TABLE_SETTINGS,
            params={"select": "*", "id": f"eq.{REMOTE_SETTINGS_ID}"},
        )
        rows = response.json() or []
        return strip_settings_id(rows[0]) if rows else None

    def fetch_snapshot(self) -> Dict[str, List[dict]]:
        return {table: self.select(table) for table in ALL_TABLES}
