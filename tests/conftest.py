"""
Test configuration and fixtures.

- ``app``: application on an in-memory SQLite database with a temporary
  upload folder and CSRF disabled
- ``ctx``: the same app with an application context pushed, for calling the
  workflows directly
- ``client``: test client (do not combine with ``ctx`` in one test)
"""
import io
from datetime import date

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from exambooking import create_app, db
from exambooking.models import Booking, ExamRound, Staff
from exambooking.storage import LocalFileStore


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "WTF_CSRF_ENABLED": False,
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


class RecordingFileStore(LocalFileStore):
    """LocalFileStore that remembers every call made to it."""

    def __init__(self, root, public_base_url="/files", fail_on=None):
        super().__init__(root, public_base_url)
        self.calls = []
        self.fail_on = fail_on

    def upload(self, key, file):
        self.calls.append(("upload", key))
        if self.fail_on and key.startswith(self.fail_on):
            from exambooking.exceptions import StorageError
            raise StorageError(f"simulated failure for {key}")
        return super().upload(key, file)

    def delete(self, key):
        self.calls.append(("delete", key))
        return super().delete(key)


@pytest.fixture
def recording_store(app, tmp_path):
    store = RecordingFileStore(str(tmp_path / "recorded"))
    app.extensions["file_store"] = store
    return store


def image_upload(filename="evidence.png", data=b"\x89PNG\r\n\x1a\nfake-image"):
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type="image/png")


def add_round(max_seats=30, current_seats=0, is_active=True,
              exam_date=date(2026, 12, 1), exam_time="Morning"):
    exam_round = ExamRound(
        exam_date=exam_date,
        exam_time=exam_time,
        max_seats=max_seats,
        current_seats=current_seats,
        is_active=is_active,
    )
    db.session.add(exam_round)
    db.session.commit()
    return exam_round


def add_staff(email="officer@example.com", password="s3cret", name="Exam Officer"):
    staff = Staff(email=email, name=name, password_hash=generate_password_hash(password))
    db.session.add(staff)
    db.session.commit()
    return staff


def add_booking(exam_round, payment_status="pending", price=750, full_name="Jane Doe",
                email="jane@example.com", user_type="general", payment_method="transfer",
                created_at=None):
    booking = Booking(
        exam_round_id=exam_round.id,
        user_type=user_type,
        full_name=full_name,
        email=email,
        phone="0812345678",
        price=price,
        payment_method=payment_method,
        payment_status=payment_status,
    )
    if created_at is not None:
        booking.created_at = created_at
    db.session.add(booking)
    db.session.flush()
    booking.booking_code = f"EX{booking.id:06d}"
    db.session.commit()
    return booking
