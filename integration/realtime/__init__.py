"""
HotelSphere Integration — Realtime Change Feed
================================================
Routes replica change messages to subscribed handlers.

Message shape (either spelling is accepted):
    {"table": "rooms",
     "eventType" | "type": "INSERT" | "UPDATE" | "DELETE",
     "new" | "record": {...},
     "old" | "old_record": {...}}

Delivery behavior:
1. Parse the message into a ChangeEvent (bad messages are logged, dropped)
2. Look up handlers by table
3. Execute handlers sequentially
4. Catch handler exceptions per handler, log, continue

A handler failure must NOT break delivery to other handlers.
The channel carries no delivery guarantee: no ordering across
tables, no replay of missed messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from core.primitives.hotel import ALL_TABLES
from integration.adapters import ValidationError
from integration.realtime.errors import (
    DuplicateHandlerError,
    RealtimeError,
    UnknownChannelTableError,
)

logger = logging.getLogger("hotelsphere.realtime")


class ChangeType(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# ══════════════════════════════════════════════════════════════
# CHANGE EVENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChangeEvent:
    """
    One row-level change published by the replica.

    INSERT/UPDATE carry the full new record; DELETE carries at least
    the id of the removed record in `old`.
    """

    table: str
    change_type: ChangeType
    new: Optional[Dict[str, Any]] = None
    old: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if not self.table or not isinstance(self.table, str):
            raise ValueError("table must be a non-empty string.")
        if not isinstance(self.change_type, ChangeType):
            raise ValueError("change_type must be ChangeType enum.")
        if self.change_type == ChangeType.DELETE:
            if not self.old:
                raise ValueError("DELETE change requires the old record.")
        elif self.new is None:
            raise ValueError(f"{self.change_type.value} change requires the new record.")

    @property
    def record_id(self) -> Optional[str]:
        source = self.old if self.change_type == ChangeType.DELETE else self.new
        return (source or {}).get("id")

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> ChangeEvent:
        if not isinstance(message, dict):
            raise ValidationError("Change message must be a JSON object.")
        raw_type = message.get("eventType") or message.get("type")
        try:
            change_type = ChangeType(str(raw_type).upper())
        except ValueError:
            raise ValidationError(f"Unknown change type {raw_type!r}.")
        new = message.get("new") or message.get("record")
        old = message.get("old") or message.get("old_record")
        try:
            return cls(
                table=message.get("table") or "",
                change_type=change_type,
                new=dict(new) if new else None,
                old=dict(old) if old else None,
            )
        except ValueError as exc:
            raise ValidationError(f"Malformed change message: {exc}") from exc


# ══════════════════════════════════════════════════════════════
# CHANNEL
# ══════════════════════════════════════════════════════════════

Handler = Callable[[ChangeEvent], Any]


class RealtimeChannel:
    """
    In-process fan-out of replica change messages, keyed by table.

    A transport (websocket client, in-memory replica) calls
    `deliver(message)` for every message it receives.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = Lock()

    def subscribe(self, table: str, handler: Handler) -> None:
        if table not in ALL_TABLES:
            raise UnknownChannelTableError(table)
        if not callable(handler):
            raise RealtimeError(f"Handler must be callable, got {type(handler)}.")

        handler_name = getattr(handler, "__qualname__", str(handler))
        with self._lock:
            handlers = self._handlers.setdefault(table, [])
            # Bound methods compare equal, not identical, across lookups.
            if any(existing == handler for existing in handlers):
                raise DuplicateHandlerError(table, handler_name)
            handlers.append(handler)

        logger.info(f"Realtime handler subscribed: {handler_name} → {table}")

    def unsubscribe_all(self) -> None:
        with self._lock:
            self._handlers.clear()

    def handlers_for(self, table: str) -> List[Handler]:
        with self._lock:
            return list(self._handlers.get(table, []))

    def is_subscribed(self, table: str) -> bool:
        with self._lock:
            return bool(self._handlers.get(table))

    def deliver(self, message: Dict[str, Any]) -> dict:
        """
        Parse and dispatch one message.

        Returns:
            {'table', 'change_type', 'handlers_notified',
             'handlers_failed', 'failures', 'rejected'}

        This method NEVER raises.
        """
        result = {
            "table": None,
            "change_type": None,
            "handlers_notified": 0,
            "handlers_failed": 0,
            "failures": [],
            "rejected": None,
        }

        try:
            event = ChangeEvent.from_message(message)
        except ValidationError as exc:
            result["rejected"] = str(exc)
            logger.warning(f"Dropped realtime message: {exc}")
            return result

        result["table"] = event.table
        result["change_type"] = event.change_type.value

        handlers = self.handlers_for(event.table)
        if not handlers:
            logger.debug(f"No realtime handlers for table '{event.table}'")
            return result

        for handler in handlers:
            handler_name = getattr(handler, "__qualname__", str(handler))
            try:
                handler(event)
                result["handlers_notified"] += 1
            except Exception as exc:
                result["handlers_failed"] += 1
                result["failures"].append({
                    "handler": handler_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Realtime handler failed: {handler_name} for "
                    f"{event.change_type.value} on '{event.table}' "
                    f"(id: {event.record_id}): {exc}",
                    exc_info=True,
                )
                # Continue to next handler

        return result


__all__ = [
    "ChangeType",
    "ChangeEvent",
    "RealtimeChannel",
    "RealtimeError",
    "UnknownChannelTableError",
    "DuplicateHandlerError",
]
