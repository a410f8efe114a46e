from flask import (
    Blueprint, abort, current_app, flash, redirect, render_template, request,
    send_from_directory, url_for,
)
from werkzeug.exceptions import RequestEntityTooLarge

from .admission import INTERNAL_PRICE, STANDARD_PRICE, admit
from .catalog import list_active_rounds
from .exceptions import (
    AdmissionError, ApplicationInvalid, RoundFull, RoundNotFound, StorageError,
)
from .models import (
    APPLICANT_CATEGORIES, CATEGORY_LABELS, INTERNAL_CATEGORIES, TRANSFER, WALKIN,
)
from .review import lookup_booking
from .storage import get_file_store

booking_ui = Blueprint("booking_ui", __name__)

VIEW_MODE = "applicant"


# ==========================================================
# BOOKING FORM
# ==========================================================
@booking_ui.route("/", methods=["GET"])
def booking_form():
    catalog = list_active_rounds()
    if not catalog.ok:
        flash("Could not load exam rounds. Please refresh the page.", "error")

    return render_template(
        "booking_form.html",
        view_mode=VIEW_MODE,
        catalog=catalog,
        categories=[(c, CATEGORY_LABELS[c]) for c in APPLICANT_CATEGORIES],
        internal_categories=INTERNAL_CATEGORIES,
        internal_price=INTERNAL_PRICE,
        standard_price=STANDARD_PRICE,
        payment_methods=[(TRANSFER, "Bank transfer"), (WALKIN, "Pay at the venue")],
    )


# ==========================================================
# SUBMIT BOOKING
# ==========================================================
@booking_ui.route("/book", methods=["POST"])
def submit_booking():
    form = request.form
    try:
        booking = admit(
            round_id=form.get("exam_round_id"),
            user_type=form.get("user_type"),
            full_name=form.get("full_name"),
            email=form.get("email"),
            phone=form.get("phone"),
            payment_method=form.get("payment_method"),
            id_card=request.files.get("id_card"),
            payment_slip=request.files.get("payment_slip"),
        )
    except ApplicationInvalid as e:
        for message in e.errors:
            flash(message, "error")
        return redirect(url_for("booking_ui.booking_form"))
    except (RoundFull, RoundNotFound) as e:
        flash(str(e), "error")
        return redirect(url_for("booking_ui.booking_form"))
    except AdmissionError as e:
        # Upload and insert failures are already logged by admit()
        flash("Something went wrong with your booking. Please try again.", "error")
        current_app.logger.warning("Booking submission failed: %s", e)
        return redirect(url_for("booking_ui.booking_form"))

    return render_template("booking_success.html", view_mode=VIEW_MODE, booking=booking)


@booking_ui.errorhandler(RequestEntityTooLarge)
def upload_too_large(e):
    limit_mb = (current_app.config.get("MAX_CONTENT_LENGTH") or 0) / (1024 * 1024)
    flash(f"Your files are too large. Please keep uploads under {limit_mb:.0f} MB.", "error")
    return redirect(url_for("booking_ui.booking_form"))


# ==========================================================
# BOOKING STATUS LOOKUP
# ==========================================================
@booking_ui.route("/booking/status", methods=["GET"])
def booking_status():
    code = (request.args.get("code") or "").strip()
    email = (request.args.get("email") or "").strip()
    booking = None

    if code or email:
        booking = lookup_booking(code, email)
        if booking is None:
            flash("No booking matches that code and email.", "error")

    return render_template(
        "booking_status.html", view_mode=VIEW_MODE, booking=booking, code=code, email=email
    )


# ==========================================================
# UPLOADED FILES
# ==========================================================
@booking_ui.route("/files/<path:key>", methods=["GET"])
def uploaded_file(key):
    store = get_file_store()
    try:
        if not store.exists(key):
            abort(404)
    except StorageError:
        abort(404)
    return send_from_directory(store.root, key)
