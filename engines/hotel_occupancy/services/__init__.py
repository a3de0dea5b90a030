"""
HotelSphere Hotel Occupancy Engine — Effective Room Status
============================================================
Engine: hotel_occupancy
Scope:  Derives what a room IS on a given day from the booking set.
        Stored OCCUPIED/RESERVED is never trusted; housekeeping
        states (DIRTY, REPAIR, MANAGEMENT, STAFF_BLOCK) are.

Precedence (first match wins):
  1. ACTIVE booking covering the day     → OCCUPIED
  2. RESERVED booking covering the day   → RESERVED
  3. stored housekeeping status          → that status
  4. otherwise                           → VACANT

Pure functions. Nothing here writes; completing a booking must set
the stored room status itself.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from core.primitives.hotel import (
    HOUSEKEEPING_STATUSES,
    Booking,
    BookingStatus,
    DateLike,
    Room,
    RoomStatus,
)


def find_covering_booking(
    room_id: str,
    bookings: Iterable[Booking],
    day: DateLike,
    statuses: Iterable[BookingStatus] = (BookingStatus.ACTIVE, BookingStatus.RESERVED),
) -> Optional[Booking]:
    """First booking of the room, in one of `statuses`, whose stay covers `day`.
    ACTIVE is preferred over RESERVED when both cover the day."""
    wanted = tuple(statuses)
    candidates = [
        b for b in bookings
        if b.room_id == room_id and b.status in wanted and b.covers(day)
    ]
    for status in wanted:
        for booking in candidates:
            if booking.status == status:
                return booking
    return None


def resolve_effective_status(
    room: Room,
    bookings: Iterable[Booking],
    reference_date: DateLike,
) -> RoomStatus:
    bookings = list(bookings)
    if find_covering_booking(room.id, bookings, reference_date, (BookingStatus.ACTIVE,)):
        return RoomStatus.OCCUPIED
    if find_covering_booking(room.id, bookings, reference_date, (BookingStatus.RESERVED,)):
        return RoomStatus.RESERVED
    if room.status in HOUSEKEEPING_STATUSES:
        return room.status
    return RoomStatus.VACANT


def occupancy_summary(
    rooms: Iterable[Room],
    bookings: Iterable[Booking],
    day: DateLike,
) -> Dict[str, int]:
    """Dashboard counters: one per effective status plus TOTAL."""
    bookings = list(bookings)
    summary = {status.value: 0 for status in RoomStatus}
    total = 0
    for room in rooms:
        summary[resolve_effective_status(room, bookings, day).value] += 1
        total += 1
    summary["TOTAL"] = total
    return summary


def _number_key(room: Room):
    return (0, int(room.number)) if room.number.isdigit() else (1, room.number)


def rooms_by_floor(rooms: Iterable[Room]) -> Dict[int, List[Room]]:
    """Floors ascending, rooms within a floor by number."""
    floors: Dict[int, List[Room]] = {}
    for room in rooms:
        floors.setdefault(room.floor, []).append(room)
    return OrderedDict(
        (floor, sorted(floors[floor], key=_number_key))
        for floor in sorted(floors)
    )
