from flask import current_app
from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .models import ExamRound, MORNING


class CatalogResult:
    """Rounds returned by a catalog read.

    ``ok`` is False when the read itself failed, so callers can tell a failed
    fetch apart from an empty catalog.
    """

    def __init__(self, rounds=None, error=None):
        self.rounds = list(rounds or [])
        self.error = error

    @property
    def ok(self):
        return self.error is None

    def __iter__(self):
        return iter(self.rounds)

    def __len__(self):
        return len(self.rounds)

    def __repr__(self):
        if not self.ok:
            return f"<CatalogResult error={self.error!r}>"
        return f"<CatalogResult {len(self.rounds)} rounds>"


def _ordered(query):
    # Morning before afternoon on the same date
    slot_order = case((ExamRound.exam_time == MORNING, 0), else_=1)
    return query.order_by(ExamRound.exam_date.asc(), slot_order, ExamRound.id.asc())


def list_active_rounds():
    """Active rounds in ascending exam date order."""
    try:
        rounds = db.session.execute(
            _ordered(db.select(ExamRound).where(ExamRound.is_active.is_(True)))
        ).scalars().all()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Could not load active exam rounds")
        return CatalogResult(error=str(e))
    return CatalogResult(rounds)


def list_all_rounds():
    """Every round, including inactive ones (operator view)."""
    try:
        rounds = db.session.execute(_ordered(db.select(ExamRound))).scalars().all()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Could not load exam rounds")
        return CatalogResult(error=str(e))
    return CatalogResult(rounds)


def get_round(round_id, refresh=False):
    """Load one round by id. ``refresh`` re-reads seat counts from the database."""
    try:
        rid = int(round_id)
    except (TypeError, ValueError):
        return None
    return db.session.get(ExamRound, rid, populate_existing=refresh)
