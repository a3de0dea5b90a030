"""
HotelSphere Reporting — Booking Registers
===========================================
Date-scoped booking registers and the daily front-office summary.

Registers are filters over the bookings table:
- arrivals:   checked in on the day and still ACTIVE
- departures: COMPLETED with check-out on the day
- in-house:   stay covers the day and not CANCELLED (police / C-Form list)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from core.primitives.hotel import Booking, BookingStatus, DateLike, Transaction, as_date
from engines.accounting.services import collection_total


@dataclass(frozen=True)
class DailySummary:
    date: str
    collection: int
    check_ins: int
    check_outs: int

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "collection": self.collection,
            "check_ins": self.check_ins,
            "check_outs": self.check_outs,
        }


def check_in_register(bookings: Iterable[Booking], day: DateLike) -> List[Booking]:
    d = as_date(day)
    return [
        b for b in bookings
        if as_date(b.check_in_date) == d and b.status == BookingStatus.ACTIVE
    ]


def check_out_register(bookings: Iterable[Booking], day: DateLike) -> List[Booking]:
    d = as_date(day)
    return [
        b for b in bookings
        if as_date(b.check_out_date) == d and b.status == BookingStatus.COMPLETED
    ]


def in_house_register(bookings: Iterable[Booking], day: DateLike) -> List[Booking]:
    return [
        b for b in bookings
        if b.status != BookingStatus.CANCELLED and b.covers(day)
    ]


def daily_summary(
    bookings: Iterable[Booking],
    transactions: Iterable[Transaction],
    day: DateLike,
) -> DailySummary:
    # Arrivals here count every booking starting on the day, whatever its status.
    d = as_date(day)
    bookings = list(bookings)
    return DailySummary(
        date=d.isoformat(),
        collection=collection_total(transactions, d),
        check_ins=sum(1 for b in bookings if as_date(b.check_in_date) == d),
        check_outs=len(check_out_register(bookings, d)),
    )
