"""
HotelSphere Hotel Primitives — Front-Desk Entities
====================================================
Rooms, guests, bookings (with their charges and payments), group
profiles and accounting transactions.

RULES:
- Entities are immutable snapshots (frozen dataclasses)
- Every entity carries an opaque string id, unique within its table
- All amounts use integer minor units (paise/cents) — NO floats
- Dates are ISO-8601 strings ("YYYY-MM-DD"); timestamps are ISO datetimes
- The dict form (to_dict / from_dict) is the storage and wire format

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


# ══════════════════════════════════════════════════════════════
# TABLES
# ══════════════════════════════════════════════════════════════

TABLE_ROOMS = "rooms"
TABLE_GUESTS = "guests"
TABLE_BOOKINGS = "bookings"
TABLE_TRANSACTIONS = "transactions"
TABLE_SETTINGS = "settings"
TABLE_GROUPS = "groups"

ENTITY_TABLES: Tuple[str, ...] = (
    TABLE_ROOMS,
    TABLE_GUESTS,
    TABLE_BOOKINGS,
    TABLE_TRANSACTIONS,
    TABLE_GROUPS,
)

# Settings last: it is the marker of a populated store.
ALL_TABLES: Tuple[str, ...] = ENTITY_TABLES + (TABLE_SETTINGS,)


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class RoomStatus(Enum):
    """
    Stored room status.

    Only the housekeeping states are authoritative. OCCUPIED and
    RESERVED may be stale; the effective status is derived from
    bookings at render time.
    """
    VACANT = "VACANT"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"
    DIRTY = "DIRTY"
    REPAIR = "REPAIR"
    MANAGEMENT = "MANAGEMENT"
    STAFF_BLOCK = "STAFF_BLOCK"


HOUSEKEEPING_STATUSES: FrozenSet[RoomStatus] = frozenset({
    RoomStatus.DIRTY,
    RoomStatus.REPAIR,
    RoomStatus.MANAGEMENT,
    RoomStatus.STAFF_BLOCK,
})


class BookingStatus(Enum):
    RESERVED = "RESERVED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Bookings move forward only. Identity transitions are always allowed.
ALLOWED_BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.RESERVED: frozenset({
        BookingStatus.ACTIVE, BookingStatus.CANCELLED,
    }),
    BookingStatus.ACTIVE: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class TransactionType(Enum):
    RECEIPT = "RECEIPT"
    PAYMENT = "PAYMENT"
    JOURNAL = "JOURNAL"
    DEBIT_NOTE = "DEBIT_NOTE"
    CREDIT_NOTE = "CREDIT_NOTE"
    REFUND = "REFUND"


VALID_ACCOUNT_GROUPS = frozenset({
    "Capital", "Fixed Asset", "Current Asset",
    "Direct Expense", "Indirect Expense",
    "Direct Income", "Indirect Income",
    "Current Liability", "Operating",
})

VALID_GROUP_TYPES = frozenset({
    "Tour", "Corporate", "Wedding", "School", "Religious", "Sports",
})
VALID_BILLING_PREFERENCES = frozenset({"Single", "Split", "Mixed"})
VALID_GROUP_STATUSES = frozenset({"ACTIVE", "CLOSED"})


# ══════════════════════════════════════════════════════════════
# ERRORS
# ══════════════════════════════════════════════════════════════

class InvalidTransitionError(ValueError):
    """Booking status change that moves the lifecycle backwards."""

    def __init__(self, booking_id: str, current: BookingStatus, target: BookingStatus):
        self.booking_id = booking_id
        self.current = current
        self.target = target
        super().__init__(
            f"Booking '{booking_id}' cannot move from "
            f"{current.value} to {target.value}."
        )


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

DateLike = Union[date, str]


def as_date(value: DateLike) -> date:
    """Accept a date or an ISO string (a datetime string is cut to its date)."""
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError(f"Expected ISO date, got {value!r}.")
    return date.fromisoformat(value[:10])


def _require_id(value: str, label: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{label} must be a non-empty string.")


def _require_amount(value: int, label: str, *, allow_zero: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(
            f"{label} must be int (minor units), got {type(value).__name__}."
        )
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"{label} must be {'non-negative' if allow_zero else 'positive'}.")


def _pick(data: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    return {k: data[k] for k in keys if k in data and data[k] is not None}


# ══════════════════════════════════════════════════════════════
# ROOM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoomInventoryItem:
    id: str
    name: str
    quantity: int = 1

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict) -> RoomInventoryItem:
        return cls(id=data["id"], name=data.get("name", ""),
                   quantity=data.get("quantity", 1))


@dataclass(frozen=True)
class Room:
    id: str
    number: str
    floor: int
    type: str
    price: int
    status: RoomStatus = RoomStatus.VACANT
    current_booking_id: Optional[str] = None
    inventory: Tuple[RoomInventoryItem, ...] = ()

    def __post_init__(self):
        _require_id(self.id, "room id")
        _require_amount(self.price, "room price")
        if not isinstance(self.status, RoomStatus):
            raise ValueError("status must be RoomStatus enum.")

    def with_status(
        self, status: RoomStatus, current_booking_id: Optional[str] = None,
    ) -> Room:
        return replace(self, status=status, current_booking_id=current_booking_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "floor": self.floor,
            "type": self.type,
            "price": self.price,
            "status": self.status.value,
            "current_booking_id": self.current_booking_id,
            "inventory": [i.to_dict() for i in self.inventory],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Room:
        return cls(
            id=data["id"],
            number=str(data.get("number", data["id"])),
            floor=int(data.get("floor", 0)),
            type=data.get("type", ""),
            price=data.get("price", 0),
            status=RoomStatus(data.get("status", RoomStatus.VACANT.value)),
            current_booking_id=data.get("current_booking_id"),
            inventory=tuple(
                RoomInventoryItem.from_dict(i) for i in data.get("inventory") or ()
            ),
        )


# ══════════════════════════════════════════════════════════════
# GUEST
# ══════════════════════════════════════════════════════════════

_GUEST_FIELDS = (
    "name", "phone", "email", "address", "city", "state",
    "nationality", "id_number", "gstin",
)


@dataclass(frozen=True)
class Guest:
    """
    Guest identity and KYC data.

    phone is the natural lookup key for repeat visits; id stays primary.
    Passport/visa (C-Form) and document references live in `extra`.
    """
    id: str
    name: str
    phone: str
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    nationality: str = ""
    id_number: str = ""
    gstin: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        _require_id(self.id, "guest id")

    def merged_with(self, newer: Guest) -> Guest:
        """Overlay the non-empty fields of `newer` onto this guest."""
        data = self.to_dict()
        incoming = newer.to_dict()
        for key in _GUEST_FIELDS:
            if incoming.get(key):
                data[key] = incoming[key]
        data["extra"] = {**self.extra, **newer.extra}
        return Guest.from_dict(data)

    def to_dict(self) -> dict:
        data = {"id": self.id}
        for key in _GUEST_FIELDS:
            data[key] = getattr(self, key)
        data["extra"] = dict(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Guest:
        return cls(
            id=data["id"],
            **{k: data.get(k) or "" for k in _GUEST_FIELDS},
            extra=dict(data.get("extra") or {}),
        )


# ══════════════════════════════════════════════════════════════
# CHARGE / PAYMENT (append-only within a booking)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Charge:
    id: str
    description: str
    amount: int
    date: str

    def __post_init__(self):
        _require_id(self.id, "charge id")
        _require_amount(self.amount, "charge amount")

    def to_dict(self) -> dict:
        return {"id": self.id, "description": self.description,
                "amount": self.amount, "date": self.date}

    @classmethod
    def from_dict(cls, data: dict) -> Charge:
        return cls(id=data["id"], description=data.get("description", ""),
                   amount=data["amount"], date=data.get("date", ""))


@dataclass(frozen=True)
class Payment:
    id: str
    amount: int
    method: str
    date: str
    remarks: str = ""

    def __post_init__(self):
        _require_id(self.id, "payment id")
        _require_amount(self.amount, "payment amount")

    def to_dict(self) -> dict:
        return {"id": self.id, "amount": self.amount, "method": self.method,
                "date": self.date, "remarks": self.remarks}

    @classmethod
    def from_dict(cls, data: dict) -> Payment:
        return cls(id=data["id"], amount=data["amount"],
                   method=data.get("method", ""), date=data.get("date", ""),
                   remarks=data.get("remarks", ""))


# ══════════════════════════════════════════════════════════════
# BOOKING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Booking:
    """
    A date-ranged stay of one guest in one room.

    check_in_date/check_out_date are inclusive when deciding whether
    the booking covers a day. base_price is the nightly price and
    discount a booking-level lump sum, both in minor units.
    """
    id: str
    room_id: str
    guest_id: str
    check_in_date: str
    check_out_date: str
    status: BookingStatus = BookingStatus.RESERVED
    booking_no: str = ""
    group_id: Optional[str] = None
    check_in_time: str = ""
    check_out_time: str = ""
    charges: Tuple[Charge, ...] = ()
    payments: Tuple[Payment, ...] = ()
    base_price: int = 0
    discount: int = 0
    purpose: str = ""
    meal_plan: str = ""
    agent: str = ""
    adults: int = 1
    children: int = 0
    extra_bed: bool = False

    def __post_init__(self):
        _require_id(self.id, "booking id")
        _require_id(self.room_id, "room_id")
        if not isinstance(self.status, BookingStatus):
            raise ValueError("status must be BookingStatus enum.")
        _require_amount(self.base_price, "base_price")
        _require_amount(self.discount, "discount")
        as_date(self.check_in_date)
        as_date(self.check_out_date)

    def covers(self, day: DateLike) -> bool:
        d = as_date(day)
        return as_date(self.check_in_date) <= d <= as_date(self.check_out_date)

    def with_status(self, status: BookingStatus) -> Booking:
        if status != self.status and status not in ALLOWED_BOOKING_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.id, self.status, status)
        return replace(self, status=status)

    def with_charge(self, charge: Charge) -> Booking:
        return replace(self, charges=self.charges + (charge,))

    def with_payment(self, payment: Payment) -> Booking:
        return replace(self, payments=self.payments + (payment,))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "booking_no": self.booking_no,
            "room_id": self.room_id,
            "guest_id": self.guest_id,
            "group_id": self.group_id,
            "check_in_date": self.check_in_date,
            "check_in_time": self.check_in_time,
            "check_out_date": self.check_out_date,
            "check_out_time": self.check_out_time,
            "status": self.status.value,
            "charges": [c.to_dict() for c in self.charges],
            "payments": [p.to_dict() for p in self.payments],
            "base_price": self.base_price,
            "discount": self.discount,
            "purpose": self.purpose,
            "meal_plan": self.meal_plan,
            "agent": self.agent,
            "adults": self.adults,
            "children": self.children,
            "extra_bed": self.extra_bed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Booking:
        return cls(
            id=data["id"],
            room_id=data["room_id"],
            guest_id=data.get("guest_id") or "",
            check_in_date=data["check_in_date"],
            check_out_date=data["check_out_date"],
            status=BookingStatus(data.get("status", BookingStatus.RESERVED.value)),
            group_id=data.get("group_id"),
            charges=tuple(Charge.from_dict(c) for c in data.get("charges") or ()),
            payments=tuple(Payment.from_dict(p) for p in data.get("payments") or ()),
            **_pick(
                data, "booking_no", "check_in_time", "check_out_time",
                "base_price", "discount", "purpose", "meal_plan", "agent",
                "adults", "children", "extra_bed",
            ),
        )


# ══════════════════════════════════════════════════════════════
# GROUP PROFILE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GroupProfile:
    id: str
    group_name: str
    group_type: str
    head_name: str
    phone: str
    email: str = ""
    org_name: str = ""
    gst_number: str = ""
    billing_preference: str = "Single"
    status: str = "ACTIVE"

    def __post_init__(self):
        _require_id(self.id, "group id")
        if self.group_type not in VALID_GROUP_TYPES:
            raise ValueError(f"group_type must be one of {sorted(VALID_GROUP_TYPES)}.")
        if self.billing_preference not in VALID_BILLING_PREFERENCES:
            raise ValueError(
                f"billing_preference must be one of {sorted(VALID_BILLING_PREFERENCES)}."
            )
        if self.status not in VALID_GROUP_STATUSES:
            raise ValueError(f"status must be one of {sorted(VALID_GROUP_STATUSES)}.")

    def to_dict(self) -> dict:
        return {
            "id": self.id, "group_name": self.group_name,
            "group_type": self.group_type, "head_name": self.head_name,
            "phone": self.phone, "email": self.email,
            "org_name": self.org_name, "gst_number": self.gst_number,
            "billing_preference": self.billing_preference,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> GroupProfile:
        return cls(
            id=data["id"],
            group_name=data.get("group_name", ""),
            group_type=data.get("group_type", "Tour"),
            head_name=data.get("head_name", ""),
            phone=data.get("phone", ""),
            **_pick(data, "email", "org_name", "gst_number",
                    "billing_preference", "status"),
        )


# ══════════════════════════════════════════════════════════════
# TRANSACTION (append-only ledger entry)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    type: TransactionType
    account_group: str
    ledger: str
    amount: int
    description: str = ""
    reference_id: Optional[str] = None
    entity_name: Optional[str] = None

    def __post_init__(self):
        _require_id(self.id, "transaction id")
        if not isinstance(self.type, TransactionType):
            raise ValueError("type must be TransactionType enum.")
        if self.account_group not in VALID_ACCOUNT_GROUPS:
            raise ValueError(
                f"account_group must be one of {sorted(VALID_ACCOUNT_GROUPS)}."
            )
        _require_amount(self.amount, "transaction amount")
        as_date(self.date)

    def to_dict(self) -> dict:
        return {
            "id": self.id, "date": self.date, "type": self.type.value,
            "account_group": self.account_group, "ledger": self.ledger,
            "amount": self.amount, "description": self.description,
            "reference_id": self.reference_id, "entity_name": self.entity_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Transaction:
        return cls(
            id=data["id"],
            date=data["date"],
            type=TransactionType(data["type"]),
            account_group=data["account_group"],
            ledger=data.get("ledger", ""),
            amount=data["amount"],
            description=data.get("description", ""),
            reference_id=data.get("reference_id"),
            entity_name=data.get("entity_name"),
        )


ENTITY_TYPES = {
    TABLE_ROOMS: Room,
    TABLE_GUESTS: Guest,
    TABLE_BOOKINGS: Booking,
    TABLE_TRANSACTIONS: Transaction,
    TABLE_GROUPS: GroupProfile,
}
