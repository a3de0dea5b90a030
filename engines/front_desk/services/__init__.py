"""
HotelSphere Front Desk — Application Service
==============================================
Front-desk operations over the local store.

Every mutation:
  1. validates (policies → Rejected results, dataclass checks → ValueError)
  2. writes the local store (immediately visible to local reads)
  3. asks the sync coordinator to push exactly the changed records

A failed push never undoes step 2; the sync health indicator shows it.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from core.config.hotel import HotelSettings
from core.local_store.store import LocalStore
from core.primitives.hotel import (
    TABLE_BOOKINGS,
    TABLE_GROUPS,
    TABLE_GUESTS,
    TABLE_ROOMS,
    TABLE_SETTINGS,
    TABLE_TRANSACTIONS,
    Booking,
    BookingStatus,
    Charge,
    DateLike,
    GroupProfile,
    Guest,
    InvalidTransitionError,
    Payment,
    Room,
    RoomStatus,
    Transaction,
    TransactionType,
    as_date,
)
from core.sync.coordinator import SyncCoordinator
from engines.front_desk.commands import (
    DEFAULT_PAYMENT_METHOD,
    CheckoutRequest,
    CombinedPaymentRequest,
    GroupStatusRequest,
    ShiftRoomRequest,
)
from engines.front_desk.errors import RecordNotFoundError, SettingsMissingError
from engines.front_desk.policies import (
    booking_must_be_active_policy,
    checkout_balance_policy,
    guest_must_exist_policy,
    room_must_exist_policy,
)
from engines.front_desk.results import Accepted, ReasonCode, Rejected, WriteResult
from engines.hotel_folio.services import Folio, FolioEngine

logger = logging.getLogger("hotelsphere.frontdesk")

WALK_IN_GUEST = "Walk-in Guest"
DEFAULT_LEDGER = "Cash Account"
SETTLEMENT_REMARK = "Settlement at checkout"


def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


@dataclass(frozen=True)
class CheckInResult:
    guest: Guest
    results: Tuple[WriteResult, ...]
    rooms: Tuple[Room, ...] = ()

    @property
    def accepted_ids(self) -> Tuple[str, ...]:
        return tuple(r.record_id for r in self.results if r.accepted)

    @property
    def rejected(self) -> Tuple[Rejected, ...]:
        return tuple(r for r in self.results if not r.accepted)


@dataclass(frozen=True)
class CheckoutResult:
    """
    Outcome of the checkout gate.

    `rejected` holds one Rejected per booking that blocked (or failed)
    completion; `notice` repeats the first rejection message, or the
    pending-balance advisory on a forced checkout.
    """
    completed: bool
    folio: Folio
    notice: Optional[str] = None
    settled: int = 0
    rejected: Tuple[Rejected, ...] = ()


class FrontDeskService:
    def __init__(
        self,
        store: LocalStore,
        coordinator: SyncCoordinator,
        *,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self._sync = coordinator
        self._new_id = id_factory or (lambda: uuid.uuid4().hex[:12])

    # ── helpers ──────────────────────────────────────────────

    def settings(self) -> HotelSettings:
        settings = self._store.settings()
        if settings is None:
            raise SettingsMissingError()
        return settings

    def folio_engine(self) -> FolioEngine:
        return FolioEngine(self.settings())

    def _save(self, table: str, records: Sequence) -> bool:
        records = list(records)
        if not records:
            return True
        self._store.bulk_put(table, records)
        return self._sync.push(table, records)

    def _booking(self, booking_id: str) -> Booking:
        data = self._store.get(TABLE_BOOKINGS, booking_id)
        if data is None:
            raise RecordNotFoundError(TABLE_BOOKINGS, booking_id)
        return Booking.from_dict(data)

    def _room(self, room_id: str) -> Optional[Room]:
        data = self._store.get(TABLE_ROOMS, room_id)
        return Room.from_dict(data) if data is not None else None

    def _folio_for(self, booking: Booking, combined: bool) -> Folio:
        engine = self.folio_engine()
        if combined:
            return engine.combined(booking, self._store.bookings())
        return engine.single(booking)

    # ══════════════════════════════════════════════════════════
    # GUESTS & CHECK-IN
    # ══════════════════════════════════════════════════════════

    def find_guest_by_phone(self, phone: str) -> Optional[Guest]:
        wanted = _digits(phone)
        if not wanted:
            return None
        for guest in self._store.guests():
            if _digits(guest.phone) == wanted:
                return guest
        return None

    def save_guest(self, guest: Guest) -> Guest:
        existing = self._store.get(TABLE_GUESTS, guest.id)
        if existing is not None:
            guest = Guest.from_dict(existing).merged_with(guest)
        self._save(TABLE_GUESTS, [guest])
        return guest

    def save_check_in(
        self,
        guest: Guest,
        bookings: Iterable[Booking],
        today: DateLike,
    ) -> CheckInResult:
        guest = self.save_guest(guest)
        bookings = [replace(b, guest_id=guest.id) for b in bookings]
        results = self.write_bookings(bookings)

        accepted = {r.record_id for r in results if r.accepted}
        rooms: List[Room] = []
        for booking in bookings:
            if booking.id not in accepted or not booking.covers(today):
                continue
            if booking.status not in (BookingStatus.ACTIVE, BookingStatus.RESERVED):
                continue
            room = self._room(booking.room_id)
            status = (RoomStatus.OCCUPIED if booking.status == BookingStatus.ACTIVE
                      else RoomStatus.RESERVED)
            rooms.append(room.with_status(status, booking.id))
        self._save(TABLE_ROOMS, rooms)

        logger.info(
            f"Check-in saved for guest {guest.id}: "
            f"{len(accepted)} booking(s) accepted, "
            f"{len(results) - len(accepted)} rejected"
        )
        return CheckInResult(guest=guest, results=tuple(results), rooms=tuple(rooms))

    # ══════════════════════════════════════════════════════════
    # BOOKINGS
    # ══════════════════════════════════════════════════════════

    def write_bookings(self, bookings: Iterable[Booking]) -> List[WriteResult]:
        """
        Store and push every booking that passes the referential guards.
        Each booking gets its own Accepted / Rejected result.
        """
        results: List[WriteResult] = []
        accepted: List[Booking] = []
        for booking in bookings:
            rejection = self._referential_rejection(booking)
            if rejection is not None:
                results.append(rejection)
                logger.warning(f"Booking rejected: {rejection.message}")
                continue
            results.append(Accepted(booking.id))
            accepted.append(booking)

        self._save(TABLE_BOOKINGS, accepted)
        return results

    def _referential_rejection(self, booking: Booking) -> Optional[Rejected]:
        reason = guest_must_exist_policy(booking, self._store)
        if reason:
            return Rejected(booking.id, ReasonCode.GUEST_NOT_FOUND,
                            reason, "guest_must_exist_policy")
        reason = room_must_exist_policy(booking.room_id, self._store)
        if reason:
            return Rejected(booking.id, ReasonCode.ROOM_NOT_FOUND,
                            reason, "room_must_exist_policy")
        return None

    def update_booking(self, booking: Booking, today: DateLike) -> WriteResult:
        """
        Store an edited booking. When its stay covers today the stored
        room status follows: COMPLETED → DIRTY, ACTIVE → OCCUPIED.

        Raises InvalidTransitionError for a backwards status change.
        """
        stored = self._store.get(TABLE_BOOKINGS, booking.id)
        if stored is None:
            return Rejected(booking.id, ReasonCode.BOOKING_NOT_FOUND,
                            f"booking '{booking.id}' not found.", "booking_must_exist")
        Booking.from_dict(stored).with_status(booking.status)

        [result] = self.write_bookings([booking])
        if not result.accepted or not booking.covers(today):
            return result

        room = self._room(booking.room_id)
        if room is None:
            return result
        if booking.status == BookingStatus.COMPLETED:
            self._save(TABLE_ROOMS, [room.with_status(RoomStatus.DIRTY)])
        elif booking.status == BookingStatus.ACTIVE:
            self._save(TABLE_ROOMS, [room.with_status(RoomStatus.OCCUPIED, booking.id)])
        return result

    def post_charge(self, booking_id: str, charge: Charge) -> Booking:
        booking = self._booking(booking_id).with_charge(charge)
        self._save(TABLE_BOOKINGS, [booking])
        return booking

    def post_payment(self, booking_id: str, payment: Payment) -> Booking:
        booking = self._booking(booking_id).with_payment(payment)
        self._save(TABLE_BOOKINGS, [booking])
        self._save(TABLE_TRANSACTIONS, [self._receipt_for(booking, payment)])
        return booking

    def _receipt_for(self, booking: Booking, payment: Payment) -> Transaction:
        guest = self._store.get(TABLE_GUESTS, booking.guest_id)
        name = (guest or {}).get("name") or WALK_IN_GUEST
        room = self._room(booking.room_id)
        number = room.number if room else booking.room_id
        return Transaction(
            id=f"TX-PAY-{payment.id}",
            date=as_date(payment.date).isoformat(),
            type=TransactionType.RECEIPT,
            account_group="Direct Income",
            ledger=payment.method or DEFAULT_LEDGER,
            amount=payment.amount,
            description=f"Payment from {name} (Room {number})",
            reference_id=booking.id,
            entity_name=name,
        )

    def post_combined_payment(
        self,
        booking_id: str,
        amount: int,
        method: str,
        today: DateLike,
    ) -> List[Payment]:
        """Spread one payment over the guest's combined folio, one Payment per share."""
        request = CombinedPaymentRequest(booking_id, amount, method, as_date(today).isoformat())
        booking = self._booking(request.booking_id)
        engine = self.folio_engine()
        folio = engine.combined(booking, self._store.bookings())

        payments: List[Payment] = []
        for allocation in engine.distribute_payment(request.amount, folio):
            payment = allocation.to_payment(self._new_id(), request.method, request.date)
            self.post_payment(allocation.booking_id, payment)
            payments.append(payment)

        if not payments:
            logger.warning(
                f"Combined payment of {amount} for {booking_id} not recorded: "
                f"no booking in scope has an outstanding balance"
            )
        return payments

    def check_out(
        self,
        booking_id: str,
        today: DateLike,
        settle: bool = False,
        force: bool = False,
        combined: bool = False,
        method: str = DEFAULT_PAYMENT_METHOD,
    ) -> CheckoutResult:
        """
        Complete the stay (or, combined, every ACTIVE stay in scope).

        settle=True first posts a payment equal to the outstanding balance.
        A positive balance without settle or force leaves the bookings
        untouched. So does any in-scope stay whose guest or room record is
        missing: nothing is settled or completed and its Rejected is
        returned.
        """
        request = CheckoutRequest(
            booking_id, as_date(today).isoformat(), settle, force, combined, method,
        )
        booking = self._booking(request.booking_id)
        folio = self._folio_for(booking, request.combined)

        reason = booking_must_be_active_policy(booking)
        if reason:
            return self._blocked(folio, (Rejected(
                booking.id, ReasonCode.BOOKING_NOT_ACTIVE,
                reason, "booking_must_be_active_policy",
            ),))

        departing = self._departing(folio)
        blocked = tuple(
            r for r in (self._referential_rejection(b) for b in departing) if r
        )
        if blocked:
            return self._blocked(folio, blocked)

        settled = 0
        if request.settle and folio.balance > 0:
            settled = folio.balance
            if request.combined:
                self.post_combined_payment(booking.id, settled, request.method, request.today)
            else:
                self.post_payment(booking.id, Payment(
                    id=self._new_id(), amount=settled, method=request.method,
                    date=request.today, remarks=SETTLEMENT_REMARK,
                ))
            folio = self._folio_for(self._booking(booking.id), request.combined)

        notice = checkout_balance_policy(folio)
        if notice and not request.force:
            return self._blocked(folio, (Rejected(
                booking.id, ReasonCode.BALANCE_OUTSTANDING,
                notice, "checkout_balance_policy",
            ),), settled=settled)

        failed = []
        for scoped in self._departing(folio):
            result = self.update_booking(
                scoped.with_status(BookingStatus.COMPLETED), request.today,
            )
            if not result.accepted:
                failed.append(result)
        if failed:
            return self._blocked(folio, tuple(failed), settled=settled)

        logger.info(
            f"Checked out {', '.join(folio.booking_ids)} "
            f"(balance {folio.balance}, settled {settled})"
        )
        return CheckoutResult(completed=True, folio=folio, notice=notice, settled=settled)

    def _departing(self, folio: Folio) -> List[Booking]:
        """ACTIVE bookings of the folio, read fresh from the store."""
        scoped = [self._booking(bid) for bid in folio.booking_ids]
        return [b for b in scoped if b.status == BookingStatus.ACTIVE]

    @staticmethod
    def _blocked(
        folio: Folio, rejected: Tuple[Rejected, ...], settled: int = 0,
    ) -> CheckoutResult:
        for rejection in rejected:
            logger.warning(f"Checkout blocked: {rejection.message}")
        return CheckoutResult(
            completed=False, folio=folio, notice=rejected[0].message,
            settled=settled, rejected=rejected,
        )

    # ══════════════════════════════════════════════════════════
    # ROOMS & GROUPS
    # ══════════════════════════════════════════════════════════

    def shift_room(self, booking_id: str, new_room_id: str) -> WriteResult:
        request = ShiftRoomRequest(booking_id, new_room_id)
        booking = self._booking(request.booking_id)
        reason = room_must_exist_policy(request.new_room_id, self._store)
        if reason:
            return Rejected(booking.id, ReasonCode.ROOM_NOT_FOUND,
                            reason, "room_must_exist_policy")

        old_room = self._room(booking.room_id)
        new_room = self._room(request.new_room_id)
        self._save(TABLE_BOOKINGS, [replace(booking, room_id=request.new_room_id)])

        rooms = [new_room.with_status(RoomStatus.OCCUPIED, booking.id)]
        if old_room is not None and old_room.id != new_room.id:
            rooms.insert(0, old_room.with_status(RoomStatus.DIRTY))
        self._save(TABLE_ROOMS, rooms)

        logger.info(f"Booking {booking.id} shifted {booking.room_id} → {new_room.id}")
        return Accepted(booking.id)

    def bulk_group_status(self, group_id: str, status: BookingStatus) -> List[Booking]:
        """
        Move every booking of the group to `status`. Bookings that cannot
        make the transition are skipped. Their rooms follow:
        ACTIVE → OCCUPIED, COMPLETED → DIRTY, anything else → VACANT.
        """
        request = GroupStatusRequest(group_id, status)
        changed: List[Booking] = []
        for booking in self._store.bookings():
            if booking.group_id != request.group_id:
                continue
            try:
                changed.append(booking.with_status(request.status))
            except InvalidTransitionError as exc:
                logger.warning(f"Group {group_id}: skipped {exc}")
        self._save(TABLE_BOOKINGS, changed)

        by_room = {b.room_id: b.id for b in changed}
        keeps_booking = request.status == BookingStatus.ACTIVE
        rooms = [
            room.with_status(request.room_status,
                             by_room[room.id] if keeps_booking else None)
            for room in self._store.rooms()
            if room.id in by_room
        ]
        self._save(TABLE_ROOMS, rooms)
        return changed

    def set_room_status(self, room_id: str, status: RoomStatus) -> Room:
        room = self._room(room_id)
        if room is None:
            raise RecordNotFoundError(TABLE_ROOMS, room_id)
        keep = status in (RoomStatus.OCCUPIED, RoomStatus.RESERVED)
        room = room.with_status(status, room.current_booking_id if keep else None)
        self._save(TABLE_ROOMS, [room])
        return room

    def delete_room(self, room_id: str) -> bool:
        """Remove locally, then on the replica. Returns the replica outcome."""
        if not self._store.delete(TABLE_ROOMS, room_id):
            raise RecordNotFoundError(TABLE_ROOMS, room_id)
        return self._sync.push_delete(TABLE_ROOMS, room_id)

    def save_group(self, group: GroupProfile) -> bool:
        return self._save(TABLE_GROUPS, [group])

    def record_transaction(self, transaction: Transaction) -> bool:
        return self._save(TABLE_TRANSACTIONS, [transaction])

    def save_settings(self, settings: HotelSettings) -> bool:
        self._store.put_settings(settings)
        return self._sync.push(TABLE_SETTINGS, [settings])
