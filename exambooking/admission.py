import os
import re
import time

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from . import db
from .catalog import get_round
from .exceptions import (
    ApplicationInvalid,
    BookingNotSaved,
    RoundFull,
    RoundNotFound,
    StorageError,
    UploadFailed,
)
from .models import (
    APPLICANT_CATEGORIES,
    BOOKING_CODE_PREFIX,
    GENERAL_CATEGORY,
    INTERNAL_CATEGORIES,
    PAYMENT_METHODS,
    PENDING,
    TRANSFER,
    VERIFIED,
    WALKIN,
    Booking,
    ExamRound,
)
from .storage import get_file_store

# --------------------------
# Pricing (THB)
# --------------------------
INTERNAL_PRICE = 375
STANDARD_PRICE = 750

ID_CARD = 'id-card'
PAYMENT_SLIP = 'payment-slip'

ALLOWED_EVIDENCE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'heic'}

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _clean(s) -> str:
    return (s or '').strip()


def _has_file(f) -> bool:
    return f is not None and bool(getattr(f, 'filename', None))


def _extension(filename) -> str:
    # Read from the raw name; secure_filename drops non-ASCII stems along with the dot
    return os.path.splitext(filename or '')[1].lstrip('.').lower()


def _max_length(column_name) -> int:
    return Booking.__table__.c[column_name].type.length


def is_internal(category) -> bool:
    return category in INTERNAL_CATEGORIES


def price_for(category) -> int:
    """Exam fee for an applicant category."""
    if category in INTERNAL_CATEGORIES:
        return INTERNAL_PRICE
    if category == GENERAL_CATEGORY:
        return STANDARD_PRICE
    raise ApplicationInvalid([f"Unknown applicant category: {category!r}"])


def initial_status(payment_method) -> str:
    # Walk-in payers settle at the venue, so there is no slip to review
    return VERIFIED if payment_method == WALKIN else PENDING


# ==========================================================
# VALIDATION (no storage or database access)
# ==========================================================
def validate_application(round_id, user_type, full_name, email, phone,
                         payment_method, id_card=None, payment_slip=None):
    """Check required fields and return the cleaned values.

    Raises ApplicationInvalid listing every problem found.
    """
    errors = []

    round_id = _clean(str(round_id) if round_id is not None else '')
    user_type = _clean(user_type)
    full_name = _clean(full_name)
    email = _clean(email).lower()
    phone = _clean(phone)
    payment_method = _clean(payment_method)

    if not round_id:
        errors.append('Please choose an exam round.')
    elif not round_id.isdigit():
        errors.append('Invalid exam round selection.')

    if user_type not in APPLICANT_CATEGORIES:
        errors.append('Please choose a valid applicant type.')

    if not full_name:
        errors.append('Full name is required.')
    elif len(full_name) > _max_length('full_name'):
        errors.append(f"Full name must be at most {_max_length('full_name')} characters.")
    if not email:
        errors.append('Email is required.')
    elif not EMAIL_RE.match(email):
        errors.append('Please enter a valid email address.')
    elif len(email) > _max_length('email'):
        errors.append(f"Email must be at most {_max_length('email')} characters.")
    if not phone:
        errors.append('Phone number is required.')
    elif len(phone) > _max_length('phone'):
        errors.append(f"Phone number must be at most {_max_length('phone')} characters.")

    if payment_method not in PAYMENT_METHODS:
        errors.append('Please choose a payment method.')

    if is_internal(user_type):
        if not _has_file(id_card):
            errors.append('Please attach a photo of your staff or student ID card.')
        elif _extension(id_card.filename) not in ALLOWED_EVIDENCE_EXTENSIONS:
            errors.append('ID card must be an image file.')

    if payment_method == TRANSFER:
        if not _has_file(payment_slip):
            errors.append('Please attach your payment slip.')
        elif _extension(payment_slip.filename) not in ALLOWED_EVIDENCE_EXTENSIONS:
            errors.append('Payment slip must be an image file.')

    if errors:
        raise ApplicationInvalid(errors)

    return {
        'round_id': int(round_id),
        'user_type': user_type,
        'full_name': full_name,
        'email': email,
        'phone': phone,
        'payment_method': payment_method,
    }


# ==========================================================
# EVIDENCE UPLOADS
# ==========================================================
def evidence_key(doc_type, email, filename, now=None):
    """Storage key: <doc-type>/<email>-<epoch millis>.<ext>"""
    millis = int((now if now is not None else time.time()) * 1000)
    owner = secure_filename(email) or 'applicant'
    return f"{doc_type}/{owner}-{millis}.{_extension(filename)}"


def _upload_evidence(store, doc_type, email, file, uploaded):
    key = evidence_key(doc_type, email, file.filename)
    store.upload(key, file)
    uploaded.append(key)
    return store.public_url(key)


def _discard_uploads(store, keys):
    """Remove files stored for an admission that did not complete."""
    for key in keys:
        try:
            store.delete(key)
        except StorageError:
            current_app.logger.exception("Could not remove orphaned upload %s", key)


# ==========================================================
# PERSISTENCE
# ==========================================================
def _claim_seat(round_id) -> bool:
    """Take one seat if the round is still active and below capacity."""
    result = db.session.execute(
        update(ExamRound)
        .where(
            ExamRound.id == round_id,
            ExamRound.is_active.is_(True),
            ExamRound.current_seats < ExamRound.max_seats,
        )
        .values(current_seats=ExamRound.current_seats + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _insert_booking(data, price, id_card_url, payment_slip_url):
    """Claim a seat and insert the booking in one transaction."""
    if not _claim_seat(data['round_id']):
        db.session.rollback()
        raise RoundFull('Sorry, this round is already full.')

    booking = Booking(
        exam_round_id=data['round_id'],
        user_type=data['user_type'],
        full_name=data['full_name'],
        email=data['email'],
        phone=data['phone'],
        price=price,
        payment_method=data['payment_method'],
        payment_status=initial_status(data['payment_method']),
        id_card_url=id_card_url,
        payment_slip_url=payment_slip_url,
    )
    db.session.add(booking)
    db.session.flush()

    booking.booking_code = f"{BOOKING_CODE_PREFIX}{booking.id:06d}"
    db.session.commit()
    return booking


# ==========================================================
# ADMISSION
# ==========================================================
def admit(round_id, user_type, full_name, email, phone, payment_method,
          id_card=None, payment_slip=None):
    """Admit one applicant into an exam round and return the new Booking."""
    data = validate_application(
        round_id, user_type, full_name, email, phone,
        payment_method, id_card=id_card, payment_slip=payment_slip,
    )

    # 1) Re-check availability at submission time
    exam_round = get_round(data['round_id'], refresh=True)
    if exam_round is None or not exam_round.is_active:
        raise RoundNotFound('This exam round is no longer available.')
    if exam_round.current_seats >= exam_round.max_seats:
        current_app.logger.info("Round %s is full, rejecting %s", exam_round.id, data['email'])
        raise RoundFull('Sorry, this round is already full.')

    # 2) Price by category
    price = price_for(data['user_type'])

    # 3) Evidence uploads
    store = get_file_store()
    uploaded = []
    id_card_url = None
    payment_slip_url = None
    try:
        if is_internal(data['user_type']):
            id_card_url = _upload_evidence(store, ID_CARD, data['email'], id_card, uploaded)
        if data['payment_method'] == TRANSFER:
            payment_slip_url = _upload_evidence(
                store, PAYMENT_SLIP, data['email'], payment_slip, uploaded
            )
    except StorageError as e:
        current_app.logger.exception("Evidence upload failed for %s", data['email'])
        _discard_uploads(store, uploaded)
        raise UploadFailed('Could not upload your documents. Please try again.') from e

    # 4) Seat claim + insert
    try:
        booking = _insert_booking(data, price, id_card_url, payment_slip_url)
    except RoundFull:
        current_app.logger.info("Round %s filled up during submission", data['round_id'])
        _discard_uploads(store, uploaded)
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Could not save booking for %s", data['email'])
        _discard_uploads(store, uploaded)
        raise BookingNotSaved('Something went wrong. Please try again.') from e

    current_app.logger.info(
        "Booking %s created (round=%s, status=%s)",
        booking.booking_code, booking.exam_round_id, booking.payment_status,
    )
    return booking
