"""
HotelSphere Front Desk — Policies
"""
from __future__ import annotations
from typing import Optional

from core.primitives.hotel import Booking, BookingStatus
from engines.hotel_folio.services import Folio


def guest_must_exist_policy(booking: Booking, store) -> Optional[str]:
    if not booking.guest_id or store.get("guests", booking.guest_id) is None:
        return (f"booking '{booking.id}' references guest "
                f"'{booking.guest_id}' which does not exist.")
    return None


def room_must_exist_policy(room_id: str, store) -> Optional[str]:
    if store.get("rooms", room_id) is None:
        return f"room '{room_id}' not found."
    return None


def booking_must_be_active_policy(booking: Booking) -> Optional[str]:
    if booking.status != BookingStatus.ACTIVE:
        return (f"booking '{booking.id}' is {booking.status.value} "
                f"; only ACTIVE stays can check out.")
    return None


def checkout_balance_policy(folio: Folio) -> Optional[str]:
    """Advisory: a positive balance needs an explicit force to check out."""
    if folio.balance > 0:
        return (f"pending balance of {folio.balance} on "
                f"{', '.join(folio.booking_ids)}; settle or force checkout.")
    return None
