import logging

import click
import sqlalchemy as sa
from flask.cli import AppGroup
from sqlalchemy.exc import SQLAlchemyError

from errors import MigrationError
from extensions import db
from migrations import MigrationRunner


migrate_cli = AppGroup("migrate", help="Apply, roll back or inspect schema migrations.")


def _configure_logging():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@migrate_cli.command("up")
@click.option("--target", type=int, default=None, help="Stop after this version.")
def migrate_up(target):
    """Run pending migrations."""
    _configure_logging()
    try:
        applied = MigrationRunner(db.engine).upgrade(target=target)
    except MigrationError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Applied {len(applied)} migration(s)")


@migrate_cli.command("down")
@click.option("--steps", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--force", is_flag=True, help="Also roll back irreversible migrations.")
def migrate_down(steps, force):
    """Roll back the most recent migrations."""
    _configure_logging()
    try:
        reverted = MigrationRunner(db.engine).downgrade(steps=steps, force=force)
    except MigrationError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Rolled back {len(reverted)} migration(s)")


@migrate_cli.command("status")
def migrate_status():
    """Show applied and pending migrations."""
    rows = MigrationRunner(db.engine).status()
    applied = [row for row in rows if row.applied]
    click.echo(f"Total migrations: {len(rows)}")
    click.echo(f"Executed: {len(applied)}")
    click.echo(f"Pending: {len(rows) - len(applied)}")
    for row in rows:
        if row.missing_file:
            state = "applied, file missing"
        else:
            state = f"applied {row.applied_at}" if row.applied else "pending"
        click.echo(f"  {row.name} ({state})")


def check_database(engine, echo=click.echo):
    """Print payments schema, counts and recent rows. Best effort: never raises."""
    try:
        inspector = sa.inspect(engine)
        if inspector.has_table("payments"):
            echo("payments table EXISTS")
            echo("Table schema:")
            for column in inspector.get_columns("payments"):
                flags = " ".join(
                    flag
                    for flag, on in (("NOT NULL", not column["nullable"]), ("PRIMARY KEY", column.get("primary_key")))
                    if on
                )
                echo(f"  - {column['name']} ({column['type']}) {flags}".rstrip())

            with engine.connect() as conn:
                count = conn.execute(sa.text("SELECT COUNT(*) FROM payments")).scalar()
                echo(f"Total records: {count}")
                if count:
                    echo("Recent 5 payments:")
                    recent = conn.execute(
                        sa.text(
                            "SELECT id, reference_no, customer_name, amount, status, created_at "
                            "FROM payments ORDER BY id DESC LIMIT 5"
                        )
                    ).mappings()
                    for p in recent:
                        echo(
                            f"  [{p['id']}] {p['reference_no']} - {p['customer_name']} - "
                            f"{p['amount']} - {p['status']} - {p['created_at'] or 'N/A'}"
                        )
                else:
                    echo("No payment records found in database")
        else:
            echo("payments table DOES NOT EXIST")
            echo("Run migrations: flask migrate up")
    except SQLAlchemyError as exc:
        echo(f"Error checking database: {exc}")

    try:
        echo("All tables in database:")
        with engine.connect() as conn:
            for table_name in sorted(sa.inspect(engine).get_table_names()):
                count = conn.execute(sa.text(f'SELECT COUNT(*) FROM "{table_name}"')).scalar()
                echo(f"  - {table_name} ({count} records)")
    except SQLAlchemyError as exc:
        echo(f"Error listing tables: {exc}")


def register_cli(app):
    app.cli.add_command(migrate_cli)

    @app.cli.command("check-db")
    def check_db():
        """Inspect the payments table and record counts."""
        check_database(db.engine)
        click.echo("Database check complete")

    @app.cli.command("cleanup-verifications")
    def cleanup_verifications():
        """Delete expired email verifications."""
        from services.verifications import delete_expired

        click.echo(f"Deleted {delete_expired()} expired verification(s)")

    @app.cli.command("expire-payments")
    def expire_payments():
        """Mark pending payments past their expire date as expired."""
        from services.payments import expire_overdue

        click.echo(f"Expired {expire_overdue()} payment(s)")

    @app.cli.command("export-payments")
    def export_payments():
        """Write all payments to the configured Excel file."""
        from services.excel_export import write_payments_to_excel

        click.echo(f"Payments written to {write_payments_to_excel()}")
