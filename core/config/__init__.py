"""
HotelSphere Core Config — Public API
======================================
Admin-configurable hotel settings (tax, branding, agents).
Doctrine: no tax rate or branding hardcoded in engine logic.
"""

from core.config.hotel import (
    AgentCommission,
    DEFAULT_ROOM_TYPES,
    HotelSettings,
    ROLES,
)

__all__ = [
    "AgentCommission",
    "DEFAULT_ROOM_TYPES",
    "HotelSettings",
    "ROLES",
]
