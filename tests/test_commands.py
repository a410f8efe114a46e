from datetime import date

from exambooking.models import ExamRound, Staff


def test_add_round(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["add-round", "2026-12-01", "morning", "--max-seats", "20"])

    assert result.exit_code == 0, result.output
    with app.app_context():
        exam_round = ExamRound.query.one()
        assert exam_round.exam_date == date(2026, 12, 1)
        assert exam_round.exam_time == "Morning"
        assert exam_round.max_seats == 20
        assert exam_round.current_seats == 0
        assert exam_round.is_active


def test_add_inactive_round(app):
    result = app.test_cli_runner().invoke(
        args=["add-round", "2026-12-01", "Afternoon", "--max-seats", "5", "--inactive"]
    )

    assert result.exit_code == 0, result.output
    with app.app_context():
        assert ExamRound.query.one().is_active is False


def test_create_staff(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-staff", "Officer@Example.com", "Exam Officer"], input="pw\npw\n")
    assert result.exit_code == 0, result.output

    duplicate = runner.invoke(args=["create-staff", "officer@example.com", "Again"], input="pw\npw\n")
    assert duplicate.exit_code != 0
    assert "already registered" in duplicate.output

    with app.app_context():
        staff = Staff.query.one()
        assert staff.email == "officer@example.com"
        assert staff.password_hash != "pw"
