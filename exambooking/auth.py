from flask import Blueprint, request, redirect, url_for, render_template, flash, session
from flask_login import current_user, login_required, logout_user, login_user
from werkzeug.security import check_password_hash

from .models import Staff

auth = Blueprint('auth', __name__)


def _email_lower(s: str) -> str:
    return (s or '').strip().lower()


def _safe_next(target):
    # Only allow local redirects after login
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('admin_ui.dashboard')


@auth.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('admin_ui.dashboard'))

    if request.method == 'POST':
        email = _email_lower(request.form.get('email'))
        password = request.form.get('password') or ''
        remember = bool(request.form.get('remember'))

        user = Staff.query.filter_by(email=email).first()
        if not user or not check_password_hash(user.password_hash, password):
            flash('Invalid email or password.', 'error')
            return render_template('login.html', view_mode='admin'), 401

        login_user(user, remember=remember)
        flash('Login successful.', 'success')
        return redirect(_safe_next(request.args.get('next')))

    return render_template('login.html', view_mode='admin')


@auth.route('/logout', methods=['POST', 'GET'])
@login_required
def logout():
    logout_user()
    session.clear()
    flash('You have been logged out.', 'info')
    return redirect(url_for('booking_ui.booking_form'))
