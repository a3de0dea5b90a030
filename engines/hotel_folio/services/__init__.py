"""
HotelSphere Hotel Folio Engine — Bill Computation
===================================================
Engine: hotel_folio
Scope:  Turns one or more bookings into a billable total.

Line items, per booking in scope, in fixed order:
  RENT  (base_price × nights, id "{booking_id}:RENT")
  each Charge, chronologically (id = charge id)

Totals pipeline (order matters for rounding and tax-on-discount):
  sub_total      = Σ item amounts
  after_discount = max(0, sub_total − Σ booking discounts)
  tax            = after_discount × tax_rate / 100   (half-up, minor units)
  gross_total    = after_discount + tax
  balance        = gross_total − Σ payments

Modes:
  single    one booking
  combined  triggering booking + every other ACTIVE booking of the guest
  split     only caller-selected items; discount only for a non-empty
            selection; unknown item ids simply match nothing

The engine reports balances. It never refuses a status transition.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.config.hotel import HotelSettings
from core.primitives.hotel import Booking, BookingStatus, Payment, as_date
from engines.hotel_folio.allocation import allocate_largest_remainder

RENT_SUFFIX = ":RENT"
DISTRIBUTED_REMARK = "Distributed share of combined payment"


class FolioMode(Enum):
    SINGLE = "SINGLE"
    COMBINED = "COMBINED"
    SPLIT = "SPLIT"


class LineItemKind(Enum):
    RENT = "RENT"
    CHARGE = "CHARGE"


@dataclass(frozen=True)
class LineItem:
    id: str
    booking_id: str
    kind: LineItemKind
    description: str
    amount: int
    date: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id, "booking_id": self.booking_id,
            "kind": self.kind.value, "description": self.description,
            "amount": self.amount, "date": self.date,
        }


@dataclass(frozen=True)
class Allocation:
    """One booking's share of a combined payment."""
    booking_id: str
    amount: int

    def to_payment(self, payment_id: str, method: str, date: str) -> Payment:
        return Payment(
            id=payment_id, amount=self.amount, method=method,
            date=date, remarks=DISTRIBUTED_REMARK,
        )


@dataclass(frozen=True)
class Folio:
    mode: FolioMode
    booking_ids: Tuple[str, ...]
    items: Tuple[LineItem, ...]
    sub_total: int
    discount: int
    after_discount: int
    tax: int
    gross_total: int
    total_payments: int
    balance: int
    # booking_id → that booking's own single-mode balance
    booking_balances: Tuple[Tuple[str, int], ...] = ()

    @property
    def can_check_out(self) -> bool:
        return self.balance <= 0

    def balance_of(self, booking_id: str) -> int:
        return dict(self.booking_balances).get(booking_id, 0)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "booking_ids": list(self.booking_ids),
            "items": [i.to_dict() for i in self.items],
            "sub_total": self.sub_total,
            "discount": self.discount,
            "after_discount": self.after_discount,
            "tax": self.tax,
            "gross_total": self.gross_total,
            "total_payments": self.total_payments,
            "balance": self.balance,
            "booking_balances": dict(self.booking_balances),
        }


def nights(booking: Booking) -> int:
    """Whole days between check-in and check-out, never fewer than 1."""
    days = (as_date(booking.check_out_date) - as_date(booking.check_in_date)).days
    return max(1, abs(days))


class FolioEngine:
    def __init__(self, settings: HotelSettings):
        self._settings = settings

    @property
    def settings(self) -> HotelSettings:
        return self._settings

    # ── items ────────────────────────────────────────────────

    def line_items(self, booking: Booking) -> List[LineItem]:
        n = nights(booking)
        items = [LineItem(
            id=f"{booking.id}{RENT_SUFFIX}",
            booking_id=booking.id,
            kind=LineItemKind.RENT,
            description=f"Room rent ({n} night{'s' if n != 1 else ''})",
            amount=booking.base_price * n,
            date=booking.check_in_date,
        )]
        for charge in sorted(booking.charges, key=lambda c: c.date):
            items.append(LineItem(
                id=charge.id,
                booking_id=booking.id,
                kind=LineItemKind.CHARGE,
                description=charge.description,
                amount=charge.amount,
                date=charge.date,
            ))
        return items

    # ── pipeline ─────────────────────────────────────────────

    def _compute(
        self,
        mode: FolioMode,
        scope: Sequence[Booking],
        items: Sequence[LineItem],
        *,
        apply_discount: bool = True,
    ) -> Folio:
        sub_total = sum(item.amount for item in items)
        discount = sum(b.discount for b in scope) if apply_discount else 0
        after_discount = max(0, sub_total - discount)
        tax = self._settings.compute_tax(after_discount)
        gross_total = after_discount + tax
        total_payments = sum(p.amount for b in scope for p in b.payments)
        return Folio(
            mode=mode,
            booking_ids=tuple(b.id for b in scope),
            items=tuple(items),
            sub_total=sub_total,
            discount=discount,
            after_discount=after_discount,
            tax=tax,
            gross_total=gross_total,
            total_payments=total_payments,
            balance=gross_total - total_payments,
            booking_balances=tuple(
                (b.id, self._own_balance(b)) for b in scope
            ) if mode != FolioMode.SINGLE else (),
        )

    def _own_balance(self, booking: Booking) -> int:
        return self.single(booking).balance

    # ── modes ────────────────────────────────────────────────

    def single(self, booking: Booking) -> Folio:
        folio = self._compute(FolioMode.SINGLE, [booking], self.line_items(booking))
        # A single folio is its own per-booking breakdown.
        return replace(folio, booking_balances=((booking.id, folio.balance),))

    def combined_scope(self, booking: Booking, bookings: Iterable[Booking]) -> List[Booking]:
        scope = [booking]
        for other in bookings:
            if (
                other.id != booking.id
                and other.guest_id == booking.guest_id
                and other.status == BookingStatus.ACTIVE
            ):
                scope.append(other)
        return scope

    def combined(self, booking: Booking, bookings: Iterable[Booking]) -> Folio:
        scope = self.combined_scope(booking, bookings)
        items = [item for b in scope for item in self.line_items(b)]
        return self._compute(FolioMode.COMBINED, scope, items)

    def split(self, bookings: Iterable[Booking], selected_item_ids: Iterable[str]) -> Folio:
        selection = set(selected_item_ids)
        bookings = list(bookings)
        items: List[LineItem] = []
        owners: Dict[str, Booking] = {}
        for booking in bookings:
            for item in self.line_items(booking):
                if item.id in selection:
                    items.append(item)
                    owners.setdefault(booking.id, booking)
        scope = list(owners.values())
        return self._compute(
            FolioMode.SPLIT, scope, items, apply_discount=bool(selection),
        )

    # ── payments ─────────────────────────────────────────────

    def distribute_payment(self, amount: int, folio: Folio) -> List[Allocation]:
        """
        Share `amount` across the folio's bookings in proportion to
        their own outstanding balances. Exact: Σ shares == amount.
        """
        balances = folio.booking_balances or tuple(
            (bid, folio.balance) for bid in folio.booking_ids[:1]
        )
        return [
            Allocation(booking_id, share)
            for booking_id, share in allocate_largest_remainder(amount, balances)
        ]

    @staticmethod
    def can_check_out(folio: Folio) -> bool:
        return folio.can_check_out


def find_booking(bookings: Iterable[Booking], booking_id: str) -> Optional[Booking]:
    for booking in bookings:
        if booking.id == booking_id:
            return booking
    return None
