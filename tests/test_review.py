from datetime import datetime
from types import SimpleNamespace

import pytest

from exambooking import db
from exambooking.exceptions import BookingNotFound, InvalidStatus, InvalidTransition
from exambooking.models import Booking, ExamRound
from exambooking.review import (
    compute_stats, filter_by_status, list_bookings, lookup_booking, search_bookings, update_status,
)

from conftest import add_booking, add_round


def _row(status, price=750, code="EX000001", name="Jane Doe", email="jane@example.com"):
    return SimpleNamespace(
        payment_status=status, price=price, booking_code=code, full_name=name, email=email,
    )


# --------------------------
# Filtering, search and stats
# --------------------------
def test_filter_pending_keeps_original_order():
    rows = [
        _row("pending", code="A"),
        _row("verified", code="B"),
        _row("pending", code="C"),
        _row("rejected", code="D"),
    ]
    assert [r.booking_code for r in filter_by_status(rows, "pending")] == ["A", "C"]


@pytest.mark.parametrize("status", [None, "", "all"])
def test_filter_all_returns_everything(status):
    rows = [_row("pending"), _row("verified")]
    assert filter_by_status(rows, status) == rows


def test_filter_rejects_unknown_status():
    with pytest.raises(InvalidStatus):
        filter_by_status([_row("pending")], "paid")


def test_search_matches_code_name_and_email():
    rows = [
        _row("pending", code="EX000001", name="Somchai Jaidee", email="somchai@example.com"),
        _row("pending", code="EX000002", name="Jane Doe", email="jane@example.org"),
    ]
    assert search_bookings(rows, "somchai") == [rows[0]]
    assert search_bookings(rows, "ex000002") == [rows[1]]
    assert search_bookings(rows, "EXAMPLE.ORG") == [rows[1]]
    assert search_bookings(rows, "  ") == rows


def test_stats_count_statuses_and_sum_verified_revenue():
    rows = [
        _row("verified", price=750),
        _row("verified", price=375),
        _row("pending", price=750),
        _row("rejected", price=375),
    ]
    assert compute_stats(rows) == {
        "total": 4,
        "pending": 1,
        "verified": 2,
        "rejected": 1,
        "revenue": 1125,
    }


def test_stats_on_empty_list():
    assert compute_stats([]) == {"total": 0, "pending": 0, "verified": 0, "rejected": 0, "revenue": 0}


# --------------------------
# Status transitions
# --------------------------
def test_verifying_stamps_confirmation_time(ctx):
    booking = add_booking(add_round())

    updated = update_status(booking.id, "verified")

    assert updated.payment_status == "verified"
    assert updated.confirmed_at is not None


def test_rejecting_leaves_confirmation_unset(ctx):
    booking = add_booking(add_round())

    updated = update_status(booking.id, "rejected")

    assert updated.payment_status == "rejected"
    assert updated.confirmed_at is None


def test_resolved_booking_cannot_be_reviewed_again(ctx):
    booking = add_booking(add_round(), payment_status="verified")

    with pytest.raises(InvalidTransition):
        update_status(booking.id, "rejected")
    assert db.session.get(Booking, booking.id).payment_status == "verified"


def test_pending_is_not_a_review_outcome(ctx):
    booking = add_booking(add_round())
    with pytest.raises(InvalidStatus):
        update_status(booking.id, "pending")


def test_unknown_booking(ctx):
    with pytest.raises(BookingNotFound):
        update_status(12345, "verified")


def test_review_does_not_change_seat_counts(ctx):
    exam_round = add_round(max_seats=10, current_seats=4)
    booking = add_booking(exam_round)

    update_status(booking.id, "rejected")

    assert db.session.get(ExamRound, exam_round.id).current_seats == 4


# --------------------------
# Listing and lookup
# --------------------------
def test_list_bookings_newest_first(ctx):
    exam_round = add_round()
    older = add_booking(exam_round, full_name="Older", created_at=datetime(2026, 10, 1, 9, 0))
    newer = add_booking(exam_round, full_name="Newer", created_at=datetime(2026, 10, 2, 9, 0))

    assert [b.id for b in list_bookings()] == [newer.id, older.id]


def test_lookup_booking_needs_matching_email(ctx):
    booking = add_booking(add_round(), email="jane@example.com")

    assert lookup_booking(booking.booking_code.lower(), "JANE@example.com").id == booking.id
    assert lookup_booking(booking.booking_code, "someone@example.com") is None
    assert lookup_booking("EX999999", "jane@example.com") is None
    assert lookup_booking("", "") is None
