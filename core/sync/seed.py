"""
HotelSphere Sync — First-Run Seed
===================================
Default settings and room list written when neither the replica nor
the local store holds any data. Prices are in minor units (paise).
"""

from __future__ import annotations

from typing import List, Tuple

from core.config.hotel import AgentCommission, HotelSettings
from core.primitives.hotel import Room, RoomStatus

DELUXE = "DELUXE ROOM"
BUDGET = "BUDGET ROOM"
STANDARD = "STANDARD ROOM"
AC_FAMILY = "AC FAMILY ROOM"

ROOM_PRICES = {
    DELUXE: 290000,
    BUDGET: 200000,
    STANDARD: 250000,
    AC_FAMILY: 410000,
}

# (number, floor, type)
SEED_LAYOUT: Tuple[Tuple[str, int, str], ...] = (
    ("101", 1, DELUXE), ("102", 1, DELUXE), ("103", 1, BUDGET),
    ("104", 1, BUDGET), ("105", 1, BUDGET), ("106", 1, BUDGET),
    ("107", 1, BUDGET), ("108", 1, AC_FAMILY), ("109", 1, BUDGET),
    ("110", 1, BUDGET),
    ("201", 2, BUDGET), ("202", 2, BUDGET), ("203", 2, BUDGET),
    ("204", 2, BUDGET), ("205", 2, STANDARD), ("206", 2, STANDARD),
    ("207", 2, STANDARD), ("208", 2, BUDGET), ("209", 2, STANDARD),
    ("210", 2, DELUXE), ("211", 2, STANDARD),
    ("301", 3, BUDGET), ("302", 3, BUDGET), ("303", 3, BUDGET),
)


def default_settings() -> HotelSettings:
    return HotelSettings(
        name="HotelSphere Pro",
        address="Suite 101, Enterprise Tower, Metro City",
        upi_id="hotel@upi",
        agents=(
            AgentCommission("Direct", 0),
            AgentCommission("Booking.com", 15),
            AgentCommission("Expedia", 18),
        ),
        room_types=(DELUXE, BUDGET, STANDARD, AC_FAMILY),
    )


def seed_rooms() -> List[Room]:
    return [
        Room(
            id=number,
            number=number,
            floor=floor,
            type=room_type,
            price=ROOM_PRICES[room_type],
            status=RoomStatus.VACANT,
        )
        for number, floor, room_type in SEED_LAYOUT
    ]
