from cli import check_database
from extensions import db
from services import payments


def test_check_database_without_payments_table(engine):
    lines = []

    check_database(engine, echo=lines.append)

    assert "payments table DOES NOT EXIST" in lines
    assert lines[-1] == "All tables in database:"


def test_check_database_reports_schema_and_recent_rows(ctx):
    for n in range(6):
        payments.create_payment(
            amount=100 + n,
            customer_name=f"Fan {n}",
            customer_email=f"fan{n}@example.com",
            customer_phone="0800000000",
            reference_no=f"{n:012d}",
        )
    lines = []

    check_database(db.engine, echo=lines.append)

    assert "payments table EXISTS" in lines
    assert "  - reference_no (TEXT) NOT NULL" in lines
    assert "Total records: 6" in lines
    recent = [line for line in lines if line.startswith("  [")]
    assert len(recent) == 5
    assert recent[0].startswith("  [6] 000000000005 - Fan 5")
    assert "  - payments (6 records)" in lines


def test_migrate_status_command(app):
    result = app.test_cli_runner().invoke(args=["migrate", "status"])

    assert result.exit_code == 0
    assert "Total migrations: 5" in result.output
    assert "Pending: 0" in result.output
    assert "0005_email_verifications" in result.output


def test_migrate_down_refuses_irreversible_migration(app):
    runner = app.test_cli_runner()

    assert runner.invoke(args=["migrate", "down"]).exit_code == 0
    result = runner.invoke(args=["migrate", "down"])

    assert result.exit_code != 0
    assert "not reversible" in result.output


def test_maintenance_commands(app, ctx):
    payments.create_payment(
        amount=100,
        customer_name="Fan",
        customer_email="fan@example.com",
        customer_phone="0800000000",
        expire_date="2000-01-01 00:00:00",
    )
    runner = app.test_cli_runner()

    assert "Expired 1 payment(s)" in runner.invoke(args=["expire-payments"]).output
    assert "Deleted 0 expired verification(s)" in runner.invoke(args=["cleanup-verifications"]).output
    assert "Payments written to" in runner.invoke(args=["export-payments"]).output
    assert "Database check complete" in runner.invoke(args=["check-db"]).output


def test_migrate_down_rejects_non_positive_steps(app):
    result = app.test_cli_runner().invoke(args=["migrate", "down", "--steps", "-1", "--force"])

    assert result.exit_code == 2
    assert "--steps" in result.output
    with app.app_context():
        from migrations import MigrationRunner

        assert set(MigrationRunner(db.engine).applied()) == {1, 2, 3, 4, 5}
