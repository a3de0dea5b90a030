"""HotelSphere Front Desk — Request Commands"""
from __future__ import annotations
from dataclasses import dataclass

from core.primitives.hotel import BookingStatus, RoomStatus, as_date

DEFAULT_PAYMENT_METHOD = "Cash"

# Stored room status that follows a group-wide booking status change.
GROUP_ROOM_STATUS = {
    BookingStatus.ACTIVE: RoomStatus.OCCUPIED,
    BookingStatus.COMPLETED: RoomStatus.DIRTY,
}


@dataclass(frozen=True)
class CombinedPaymentRequest:
    booking_id: str
    amount:     int
    method:     str
    date:       str

    def __post_init__(self):
        if not self.booking_id: raise ValueError("booking_id must be non-empty.")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise ValueError("amount must be positive integer.")
        if not self.method: raise ValueError("method must be non-empty.")
        as_date(self.date)


@dataclass(frozen=True)
class CheckoutRequest:
    booking_id: str
    today:      str
    settle:     bool = False
    force:      bool = False
    combined:   bool = False
    method:     str = DEFAULT_PAYMENT_METHOD

    def __post_init__(self):
        if not self.booking_id: raise ValueError("booking_id must be non-empty.")
        if not self.method:     raise ValueError("method must be non-empty.")
        as_date(self.today)


@dataclass(frozen=True)
class ShiftRoomRequest:
    booking_id:  str
    new_room_id: str

    def __post_init__(self):
        if not self.booking_id:  raise ValueError("booking_id must be non-empty.")
        if not self.new_room_id: raise ValueError("new_room_id must be non-empty.")


@dataclass(frozen=True)
class GroupStatusRequest:
    group_id: str
    status:   BookingStatus

    def __post_init__(self):
        if not self.group_id: raise ValueError("group_id must be non-empty.")
        if not isinstance(self.status, BookingStatus):
            raise ValueError("status must be BookingStatus enum.")

    @property
    def room_status(self) -> RoomStatus:
        return GROUP_ROOM_STATUS.get(self.status, RoomStatus.VACANT)
