from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from . import db
from .exceptions import BookingNotFound, InvalidStatus, InvalidTransition
from .models import Booking, PAYMENT_STATUSES, PENDING, REJECTED, VERIFIED, utcnow

ALL = 'all'
REVIEW_OUTCOMES = (VERIFIED, REJECTED)


# ==========================================================
# LISTING
# ==========================================================
def list_bookings():
    """All bookings with their round, newest first."""
    return db.session.execute(
        db.select(Booking)
        .options(joinedload(Booking.exam_round))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    ).unique().scalars().all()


def filter_by_status(bookings, status=None):
    """Bookings whose payment_status equals ``status``, in their original order."""
    if not status or status == ALL:
        return list(bookings)
    if status not in PAYMENT_STATUSES:
        raise InvalidStatus(f"Unknown status: {status!r}")
    return [b for b in bookings if b.payment_status == status]


def search_bookings(bookings, term=None):
    """Case-insensitive match on booking code, name or email."""
    term = (term or '').strip().lower()
    if not term:
        return list(bookings)
    return [
        b for b in bookings
        if term in (b.booking_code or '').lower()
        or term in (b.full_name or '').lower()
        or term in (b.email or '').lower()
    ]


def compute_stats(bookings):
    bookings = list(bookings)
    verified = [b for b in bookings if b.payment_status == VERIFIED]
    return {
        'total': len(bookings),
        'pending': sum(1 for b in bookings if b.payment_status == PENDING),
        'verified': len(verified),
        'rejected': sum(1 for b in bookings if b.payment_status == REJECTED),
        'revenue': sum(b.price for b in verified),
    }


# ==========================================================
# STATUS UPDATES
# ==========================================================
def update_status(booking_id, status):
    """Resolve a pending booking as verified or rejected."""
    if status not in REVIEW_OUTCOMES:
        raise InvalidStatus(f"Status must be one of {', '.join(REVIEW_OUTCOMES)}.")

    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFound(f"Booking {booking_id} not found.")
    if booking.payment_status != PENDING:
        raise InvalidTransition(
            f"Booking {booking.booking_code} is already {booking.payment_status}."
        )

    booking.payment_status = status
    booking.confirmed_at = utcnow() if status == VERIFIED else None
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not update booking %s", booking_id)
        raise

    current_app.logger.info("Booking %s marked %s", booking.booking_code, status)
    return booking


# ==========================================================
# APPLICANT LOOKUP
# ==========================================================
def lookup_booking(code, email):
    code = (code or '').strip().upper()
    email = (email or '').strip().lower()
    if not code or not email:
        return None
    booking = db.session.execute(
        db.select(Booking).where(Booking.booking_code == code)
    ).scalars().first()
    if booking is None or (booking.email or '').lower() != email:
        return None
    return booking
