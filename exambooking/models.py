from datetime import datetime, timezone

from flask_login import UserMixin
from exambooking import db

# --------------------------
# Enumerations (stored as plain strings)
# --------------------------
MORNING = 'Morning'
AFTERNOON = 'Afternoon'
TIME_SLOTS = (MORNING, AFTERNOON)
TIME_SLOT_LABELS = {
    MORNING: '09:00-12:00',
    AFTERNOON: '13:00-16:00',
}

INTERNAL_CATEGORIES = ('tg', 'wingspan', 'intern')
GENERAL_CATEGORY = 'general'
APPLICANT_CATEGORIES = INTERNAL_CATEGORIES + (GENERAL_CATEGORY,)
CATEGORY_LABELS = {
    'tg': 'TG Staff',
    'wingspan': 'Outsourced Staff (Wingspan)',
    'intern': 'Intern',
    'general': 'General Public',
}

TRANSFER = 'transfer'
WALKIN = 'walkin'
PAYMENT_METHODS = (TRANSFER, WALKIN)

PENDING = 'pending'
VERIFIED = 'verified'
REJECTED = 'rejected'
PAYMENT_STATUSES = (PENDING, VERIFIED, REJECTED)

BOOKING_CODE_PREFIX = 'EX'


def utcnow():
    return datetime.now(timezone.utc)


class ExamRound(db.Model):
    __tablename__ = 'exam_rounds'

    id = db.Column(db.Integer, primary_key=True)
    exam_date = db.Column(db.Date, nullable=False, index=True)
    exam_time = db.Column(db.String(20), nullable=False)
    max_seats = db.Column(db.Integer, nullable=False)
    current_seats = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    bookings = db.relationship('Booking', back_populates='exam_round', lazy=True)

    __table_args__ = (
        db.CheckConstraint('max_seats > 0', name='ck_exam_rounds_max_seats_positive'),
        db.CheckConstraint(
            'current_seats >= 0 AND current_seats <= max_seats',
            name='ck_exam_rounds_seats_in_range',
        ),
    )

    @property
    def available_seats(self):
        return max(self.max_seats - (self.current_seats or 0), 0)

    @property
    def is_full(self):
        return self.available_seats <= 0

    @property
    def slot_label(self):
        return TIME_SLOT_LABELS.get(self.exam_time, self.exam_time)

    def __repr__(self):
        return f"<ExamRound {self.exam_date} {self.exam_time} ({self.current_seats}/{self.max_seats})>"


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    # Assigned from the row id right after insert, inside the same transaction
    booking_code = db.Column(db.String(20), unique=True, nullable=True)

    exam_round_id = db.Column(db.Integer, db.ForeignKey('exam_rounds.id'), nullable=False, index=True)
    exam_round = db.relationship('ExamRound', back_populates='bookings', lazy='joined')

    user_type = db.Column(db.String(20), nullable=False)
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(150), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)
    price = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(20), nullable=False)
    payment_status = db.Column(db.String(20), nullable=False, default=PENDING, index=True)

    id_card_url = db.Column(db.String(500), nullable=True)
    payment_slip_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    confirmed_at = db.Column(db.DateTime, nullable=True)

    @property
    def category_label(self):
        return CATEGORY_LABELS.get(self.user_type, self.user_type)

    def __repr__(self):
        return f"<Booking {self.booking_code} ({self.payment_status})>"


class Staff(db.Model, UserMixin):
    __tablename__ = 'staff'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Staff {self.email}>"
