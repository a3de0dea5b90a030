"""
HotelSphere Core Config — Hotel Settings
==========================================
The single configuration object of a property: branding, tax rate,
agent commissions, room-type vocabulary and role passwords.

Doctrine: configuration is data, not a magic row.
Consumers receive a HotelSettings instance explicitly; they never look
it up by key. The single-instance constraint is enforced by the local
store (one settings row, database-level unique constraint).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple


DEFAULT_ROOM_TYPES: Tuple[str, ...] = (
    "DELUXE ROOM", "BUDGET ROOM", "STANDARD ROOM", "AC FAMILY ROOM",
)

ROLES: Tuple[str, ...] = (
    "SUPERADMIN", "ADMIN", "RECEPTIONIST", "ACCOUNTANT", "SUPERVISOR",
)


# ══════════════════════════════════════════════════════════════
# AGENT COMMISSION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AgentCommission:
    """Booking agent and its commission percentage."""

    name: str
    commission: float = 0.0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("agent name must be non-empty.")
        if not 0 <= self.commission <= 100:
            raise ValueError(
                f"commission must be between 0 and 100, got {self.commission}."
            )

    def to_dict(self) -> dict:
        return {"name": self.name, "commission": self.commission}

    @classmethod
    def from_dict(cls, data: dict) -> AgentCommission:
        return cls(name=data["name"], commission=data.get("commission", 0))


# ══════════════════════════════════════════════════════════════
# HOTEL SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HotelSettings:
    """
    Property-wide configuration.

    tax_rate is a flat percentage (12 means 12%) applied by the folio
    engine after discount. There are no per-item tax classes.
    """

    name: str
    address: str = ""
    tax_rate: float = 0.0
    currency: str = "INR"
    gst_number: str = ""
    hsn_code: str = ""
    upi_id: str = ""
    license_number: str = ""
    logo: str = ""
    signature: str = ""
    agents: Tuple[AgentCommission, ...] = ()
    room_types: Tuple[str, ...] = DEFAULT_ROOM_TYPES
    role_passwords: Dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("hotel name must be non-empty.")
        if not 0 <= self.tax_rate <= 100:
            raise ValueError(
                f"tax_rate must be between 0 and 100, got {self.tax_rate}."
            )
        if not self.currency or len(self.currency) != 3:
            raise ValueError("currency must be 3-letter ISO code.")
        unknown = set(self.role_passwords) - set(ROLES)
        if unknown:
            raise ValueError(f"unknown roles in role_passwords: {sorted(unknown)}.")

    def compute_tax(self, amount: int) -> int:
        """Tax on a minor-unit amount, rounded half-up to a whole minor unit."""
        rate = Decimal(str(self.tax_rate))
        tax = Decimal(amount) * rate / Decimal(100)
        return int(tax.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    def agent(self, name: str) -> Optional[AgentCommission]:
        for agent in self.agents:
            if agent.name == name:
                return agent
        return None

    def with_changes(self, **changes: Any) -> HotelSettings:
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "tax_rate": self.tax_rate,
            "currency": self.currency,
            "gst_number": self.gst_number,
            "hsn_code": self.hsn_code,
            "upi_id": self.upi_id,
            "license_number": self.license_number,
            "logo": self.logo,
            "signature": self.signature,
            "agents": [a.to_dict() for a in self.agents],
            "room_types": list(self.room_types),
            "role_passwords": dict(self.role_passwords),
        }

    @classmethod
    def from_dict(cls, data: dict) -> HotelSettings:
        optional = {
            k: data[k]
            for k in (
                "address", "currency", "gst_number", "hsn_code", "upi_id",
                "license_number", "logo", "signature",
            )
            if data.get(k) is not None
        }
        return cls(
            name=data["name"],
            tax_rate=float(data.get("tax_rate") or 0),
            agents=tuple(AgentCommission.from_dict(a) for a in data.get("agents") or ()),
            room_types=tuple(data.get("room_types") or DEFAULT_ROOM_TYPES),
            role_passwords=dict(data.get("role_passwords") or {}),
            **optional,
        )
