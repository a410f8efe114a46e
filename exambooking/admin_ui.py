from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from . import db
from .catalog import list_all_rounds
from .exceptions import InvalidStatus, ReviewError
from .models import PAYMENT_STATUSES
from .review import ALL, compute_stats, filter_by_status, list_bookings, search_bookings, update_status

admin_ui = Blueprint("admin_ui", __name__)

VIEW_MODE = "admin"


# ==========================================================
# OPERATOR DASHBOARD
# ==========================================================
@admin_ui.route("/", methods=["GET"])
@login_required
def dashboard():
    """Booking review screen: stats, rounds overview and the booking list."""
    status = request.args.get("status") or ALL
    search_term = (request.args.get("q") or "").strip()

    try:
        bookings = list_bookings()
    except SQLAlchemyError:
        db.session.rollback()
        bookings = []
        flash("Error loading bookings. Please try again.", "error")
        current_app.logger.exception("Admin dashboard error")

    try:
        shown = filter_by_status(bookings, status)
    except InvalidStatus:
        flash("Unknown status filter.", "error")
        status = ALL
        shown = list(bookings)
    shown = search_bookings(shown, search_term)

    rounds = list_all_rounds()
    if not rounds.ok:
        flash("Error loading exam rounds.", "error")

    return render_template(
        "admin_dashboard.html",
        view_mode=VIEW_MODE,
        stats=compute_stats(bookings),
        bookings=shown,
        rounds=rounds,
        status=status,
        statuses=(ALL,) + PAYMENT_STATUSES,
        search_term=search_term,
    )


# ==========================================================
# REVIEW A BOOKING
# ==========================================================
@admin_ui.route("/bookings/<int:booking_id>/status", methods=["POST"])
@login_required
def set_booking_status(booking_id):
    status = (request.form.get("status") or "").strip()
    try:
        booking = update_status(booking_id, status)
        flash(f"Booking {booking.booking_code} marked {booking.payment_status}.", "success")
    except ReviewError as e:
        flash(str(e), "error")
    except SQLAlchemyError:
        flash("Error updating booking. Please try again.", "error")

    return redirect(url_for(
        "admin_ui.dashboard",
        status=request.form.get("return_status") or None,
        q=request.form.get("return_q") or None,
    ))
