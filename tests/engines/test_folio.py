"""
HotelSphere Folio Engine Tests
================================
Tests cover:
- Night count floor
- Totals pipeline (the Room 101 scenario)
- Combined scope (same guest, ACTIVE stays)
- Split selection (zero selection, dangling ids)
- Proportional payment distribution (exact, largest remainder)
"""

import pytest

from core.config.hotel import HotelSettings
from core.primitives.hotel import Booking, BookingStatus, Charge, Payment
from engines.hotel_folio.allocation import allocate_largest_remainder
from engines.hotel_folio.services import (
    DISTRIBUTED_REMARK,
    FolioEngine,
    FolioMode,
    LineItemKind,
    find_booking,
    nights,
)

SETTINGS = HotelSettings(name="HotelSphere Pro", tax_rate=12)
NO_TAX = HotelSettings(name="HotelSphere Pro", tax_rate=0)


def booking(bid="B1", guest_id="G1", room_id="101", status=BookingStatus.ACTIVE,
            check_in="2024-01-01", check_out="2024-01-03", base_price=2000,
            charges=(), payments=(), discount=0):
    return Booking(
        id=bid, room_id=room_id, guest_id=guest_id,
        check_in_date=check_in, check_out_date=check_out, status=status,
        base_price=base_price, charges=tuple(charges), payments=tuple(payments),
        discount=discount,
    )


def room_101():
    return booking(
        charges=[Charge("C1", "Laundry", 150, "2024-01-02")],
        discount=50,
    )


# ══════════════════════════════════════════════════════════════
# NIGHTS
# ══════════════════════════════════════════════════════════════


class TestNights:
    def test_two_nights(self):
        assert nights(booking()) == 2

    def test_same_day_counts_one_night(self):
        assert nights(booking(check_out="2024-01-01")) == 1

    def test_reversed_dates_use_absolute_difference(self):
        assert nights(booking(check_in="2024-01-05", check_out="2024-01-02")) == 3

    def test_same_day_rent_is_one_night(self):
        folio = FolioEngine(NO_TAX).single(booking(check_out="2024-01-01"))
        assert folio.sub_total == 2000


# ══════════════════════════════════════════════════════════════
# SINGLE
# ══════════════════════════════════════════════════════════════


class TestSingleFolio:
    def test_room_101_scenario(self):
        folio = FolioEngine(SETTINGS).single(room_101())
        assert folio.sub_total == 4150
        assert folio.after_discount == 4100
        assert folio.tax == 492
        assert folio.gross_total == 4592
        assert folio.balance == 4592
        assert not folio.can_check_out

    def test_full_payment_clears_balance(self):
        paid = room_101().with_payment(Payment("P1", 4592, "Cash", "2024-01-03"))
        folio = FolioEngine(SETTINGS).single(paid)
        assert folio.balance == 0
        assert FolioEngine.can_check_out(folio)

    def test_line_item_order_rent_then_charges_by_date(self):
        b = booking(charges=[
            Charge("C2", "Dinner", 400, "2024-01-02"),
            Charge("C1", "Tea", 50, "2024-01-01"),
        ])
        items = FolioEngine(SETTINGS).line_items(b)
        assert [i.id for i in items] == ["B1:RENT", "C1", "C2"]
        assert items[0].kind == LineItemKind.RENT
        assert items[0].amount == 4000

    def test_discount_never_drives_total_negative(self):
        folio = FolioEngine(SETTINGS).single(booking(base_price=100, discount=10000))
        assert folio.after_discount == 0
        assert folio.tax == 0
        assert folio.gross_total == 0

    def test_overpayment_gives_negative_balance(self):
        b = booking(base_price=100, check_out="2024-01-02",
                    payments=[Payment("P1", 500, "Cash", "2024-01-01")])
        folio = FolioEngine(NO_TAX).single(b)
        assert folio.balance == -400
        assert folio.can_check_out

    def test_single_breakdown_is_itself(self):
        folio = FolioEngine(SETTINGS).single(room_101())
        assert folio.balance_of("B1") == 4592

    def test_to_dict(self):
        data = FolioEngine(SETTINGS).single(room_101()).to_dict()
        assert data["mode"] == "SINGLE"
        assert data["items"][0]["kind"] == "RENT"
        assert data["booking_balances"] == {"B1": 4592}


# ══════════════════════════════════════════════════════════════
# COMBINED
# ══════════════════════════════════════════════════════════════


class TestCombinedFolio:
    def _bookings(self):
        return [
            booking("B1", room_id="101"),
            booking("B2", room_id="102", base_price=1000),
            booking("B3", room_id="103", status=BookingStatus.COMPLETED),
            booking("B4", room_id="104", status=BookingStatus.RESERVED),
            booking("B5", room_id="105", guest_id="G2"),
        ]

    def test_scope_is_trigger_plus_active_stays_of_guest(self):
        bookings = self._bookings()
        scope = FolioEngine(SETTINGS).combined_scope(bookings[0], bookings)
        assert [b.id for b in scope] == ["B1", "B2"]

    def test_trigger_included_even_if_not_active(self):
        bookings = self._bookings()
        scope = FolioEngine(SETTINGS).combined_scope(bookings[2], bookings)
        assert [b.id for b in scope] == ["B3", "B1", "B2"]

    def test_totals_and_breakdown(self):
        bookings = self._bookings()
        folio = FolioEngine(NO_TAX).combined(bookings[0], bookings)
        assert folio.mode == FolioMode.COMBINED
        assert folio.sub_total == 4000 + 2000
        assert dict(folio.booking_balances) == {"B1": 4000, "B2": 2000}

    def test_payments_of_all_bookings_count(self):
        bookings = self._bookings()
        bookings[1] = bookings[1].with_payment(Payment("P1", 2000, "UPI", "2024-01-02"))
        folio = FolioEngine(NO_TAX).combined(bookings[0], bookings)
        assert folio.balance == 4000


# ══════════════════════════════════════════════════════════════
# SPLIT
# ══════════════════════════════════════════════════════════════


class TestSplitFolio:
    def test_only_selected_items_billed(self):
        b = room_101()
        folio = FolioEngine(SETTINGS).split([b], ["C1"])
        assert folio.sub_total == 150
        assert folio.discount == 50
        assert folio.after_discount == 100
        assert folio.tax == 12

    def test_empty_selection_is_zero_with_no_discount(self):
        folio = FolioEngine(SETTINGS).split([room_101()], [])
        assert folio.sub_total == 0
        assert folio.discount == 0
        assert folio.gross_total == 0
        assert folio.balance == 0

    def test_dangling_ids_give_zero_without_error(self):
        folio = FolioEngine(SETTINGS).split([room_101()], ["NOPE", "B9:RENT"])
        assert folio.items == ()
        assert folio.gross_total == 0
        assert folio.booking_ids == ()

    def test_selection_across_bookings(self):
        b1 = booking("B1")
        b2 = booking("B2", room_id="102", base_price=1000)
        folio = FolioEngine(NO_TAX).split([b1, b2], ["B1:RENT", "B2:RENT"])
        assert folio.sub_total == 6000
        assert folio.booking_ids == ("B1", "B2")


# ══════════════════════════════════════════════════════════════
# PAYMENT DISTRIBUTION
# ══════════════════════════════════════════════════════════════


class TestDistributePayment:
    def _combined(self):
        bookings = [
            booking("B1", base_price=500, check_out="2024-01-03"),
            booking("B2", room_id="102", base_price=250, check_out="2024-01-03"),
        ]
        return FolioEngine(NO_TAX).combined(bookings[0], bookings)

    def test_shares_are_proportional_and_exact(self):
        allocations = FolioEngine(NO_TAX).distribute_payment(1000, self._combined())
        assert [(a.booking_id, a.amount) for a in allocations] == [("B1", 667), ("B2", 333)]

    @pytest.mark.parametrize("amount", [1, 7, 999, 1500])
    def test_sum_equals_amount(self, amount):
        allocations = FolioEngine(NO_TAX).distribute_payment(amount, self._combined())
        assert sum(a.amount for a in allocations) == amount

    def test_no_share_exceeds_balance(self):
        folio = self._combined()
        for a in FolioEngine(NO_TAX).distribute_payment(1499, folio):
            assert a.amount <= folio.balance_of(a.booking_id)

    def test_settled_booking_receives_nothing(self):
        bookings = [
            booking("B1", base_price=500),
            booking("B2", room_id="102", base_price=250,
                    payments=[Payment("P0", 500, "Cash", "2024-01-01")]),
        ]
        folio = FolioEngine(NO_TAX).combined(bookings[0], bookings)
        allocations = FolioEngine(NO_TAX).distribute_payment(300, folio)
        assert [(a.booking_id, a.amount) for a in allocations] == [("B1", 300)]

    def test_allocation_becomes_tagged_payment(self):
        [first, _] = FolioEngine(NO_TAX).distribute_payment(1000, self._combined())
        payment = first.to_payment("P9", "UPI", "2024-01-03")
        assert payment.amount == 667
        assert payment.remarks == DISTRIBUTED_REMARK


class TestAllocateLargestRemainder:
    def test_ties_go_to_earlier_key(self):
        assert allocate_largest_remainder(1, [("a", 1), ("b", 1)]) == [("a", 1)]

    def test_non_positive_weights_skipped(self):
        assert allocate_largest_remainder(10, [("a", 0), ("b", -5), ("c", 3)]) == [("c", 10)]

    def test_no_positive_weight_allocates_nothing(self):
        assert allocate_largest_remainder(10, [("a", 0)]) == []

    def test_float_amount_rejected(self):
        with pytest.raises(TypeError):
            allocate_largest_remainder(10.5, [("a", 1)])

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            allocate_largest_remainder(-1, [("a", 1)])


def test_find_booking():
    bookings = [booking("B1"), booking("B2")]
    assert find_booking(bookings, "B2").id == "B2"
    assert find_booking(bookings, "B9") is None
