import click
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from . import db
from .models import ExamRound, Staff, TIME_SLOTS


def register_commands(app):

    @app.cli.command("create-staff")
    @click.argument("email")
    @click.argument("name")
    @click.password_option()
    def create_staff(email, name, password):
        """Create an operator account that can review bookings."""
        staff = Staff(
            email=email.strip().lower(),
            name=name.strip(),
            password_hash=generate_password_hash(password),
        )
        db.session.add(staff)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException(f"{staff.email} is already registered.")
        click.echo(f"Created staff account {staff.email}")

    @app.cli.command("add-round")
    @click.argument("exam_date", type=click.DateTime(formats=["%Y-%m-%d"]))
    @click.argument("exam_time", type=click.Choice(TIME_SLOTS, case_sensitive=False))
    @click.option("--max-seats", type=click.IntRange(min=1), required=True)
    @click.option("--inactive", is_flag=True, help="Create the round hidden from applicants.")
    def add_round(exam_date, exam_time, max_seats, inactive):
        """Open a new exam round."""
        slot = next(s for s in TIME_SLOTS if s.lower() == exam_time.lower())
        exam_round = ExamRound(
            exam_date=exam_date.date(),
            exam_time=slot,
            max_seats=max_seats,
            current_seats=0,
            is_active=not inactive,
        )
        db.session.add(exam_round)
        db.session.commit()
        click.echo(f"Created round {exam_round.id}: {exam_round.exam_date} {slot} ({max_seats} seats)")
