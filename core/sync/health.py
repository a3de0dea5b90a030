"""
HotelSphere Sync — Health Indicator
=====================================
Process-wide sync status shown to staff:
  OK ⇄ ERROR

Any replica failure flips to ERROR with its reason.
The next successful replica call flips back to OK.
The indicator never blocks local writes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional


class SyncState(Enum):
    OK = "OK"
    ERROR = "ERROR"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncHealth:
    """
    Current sync state and the reason for the last failure.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._state = SyncState.OK
        self._reason: Optional[str] = None
        self._last_error_at: Optional[datetime] = None
        self._last_ok_at: Optional[datetime] = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def last_error_at(self) -> Optional[datetime]:
        return self._last_error_at

    @property
    def last_ok_at(self) -> Optional[datetime]:
        return self._last_ok_at

    def is_ok(self) -> bool:
        return self._state == SyncState.OK

    def mark_error(self, reason: str) -> None:
        self._state = SyncState.ERROR
        self._reason = reason
        self._last_error_at = self._clock()

    def mark_ok(self) -> None:
        self._state = SyncState.OK
        self._reason = None
        self._last_ok_at = self._clock()

    def to_dict(self) -> dict:
        return {
            "state": self._state.value,
            "reason": self._reason,
            "last_error_at": self._last_error_at.isoformat() if self._last_error_at else None,
            "last_ok_at": self._last_ok_at.isoformat() if self._last_ok_at else None,
        }


_process_health = SyncHealth()


def get_sync_health() -> SyncHealth:
    """The process-wide indicator, shared by every coordinator by default."""
    return _process_health
