"""
HotelSphere Front Desk — Write Results
========================================
Every booking write returns a result per booking.

Rejections are explanations, not exceptions:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Traceable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


class ReasonCode:
    """Known rejection codes. Convention: SCREAMING_SNAKE_CASE."""

    GUEST_NOT_FOUND = "GUEST_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    BOOKING_NOT_ACTIVE = "BOOKING_NOT_ACTIVE"
    BALANCE_OUTSTANDING = "BALANCE_OUTSTANDING"


@dataclass(frozen=True)
class Accepted:
    record_id: str

    @property
    def accepted(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {"record_id": self.record_id, "accepted": True}


@dataclass(frozen=True)
class Rejected:
    record_id: str
    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")
        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")
        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    @property
    def accepted(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "accepted": False,
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


WriteResult = Union[Accepted, Rejected]
