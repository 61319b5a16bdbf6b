"""Payment images per day set, special ticket images

Version: 0003
Create Date: 2025-08-21

Replaces the single ``stadiums.payment_image`` with one
``stadium_payment_images`` row per day set and backfills it from the legacy
column. Adds ``special_tickets.image``, which downgrade keeps.
"""
import json
import logging

from alembic import op
import sqlalchemy as sa

from migrations.schema import add_column_if_missing, column_names, create_table_if_missing, drop_table_if_exists


version = 3
reversible = False

ALL_DAYS = [0, 1, 2, 3, 4, 5, 6]

logger = logging.getLogger(__name__)


def parse_schedule_days(raw):
    """Decode a ``schedule_days`` value; ``None``/empty means every day."""
    if not raw:
        return list(ALL_DAYS)
    days = json.loads(raw)
    if not isinstance(days, list) or not all(isinstance(d, int) and 0 <= d <= 6 for d in days):
        raise ValueError(f"schedule_days must be a list of weekdays 0-6, got {raw!r}")
    return days


def backfill_payment_images(conn):
    """Copy legacy ``stadiums.payment_image`` values; returns rows inserted."""
    if "payment_image" not in column_names("stadiums"):
        return 0

    stadiums = conn.execute(
        sa.text(
            "SELECT id, payment_image FROM stadiums "
            "WHERE payment_image IS NOT NULL AND payment_image != ''"
        )
    ).mappings().all()

    inserted = 0
    for stadium in stadiums:
        existing = conn.execute(
            sa.text("SELECT 1 FROM stadium_payment_images WHERE stadium_id = :sid AND image = :image"),
            {"sid": stadium["id"], "image": stadium["payment_image"]},
        ).first()
        if existing:
            continue

        raw = conn.execute(
            sa.text("SELECT schedule_days FROM stadiums_extended WHERE id = :sid"),
            {"sid": stadium["id"]},
        ).scalar()
        try:
            days = parse_schedule_days(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping payment image for stadium %s: %s", stadium["id"], exc)
            continue

        conn.execute(
            sa.text("INSERT INTO stadium_payment_images (stadium_id, image, days) VALUES (:sid, :image, :days)"),
            {"sid": stadium["id"], "image": stadium["payment_image"], "days": json.dumps(days)},
        )
        inserted += 1

    if inserted:
        logger.info("Migrated %d payment image(s) to stadium_payment_images", inserted)
    return inserted


def upgrade():
    create_table_if_missing(
        "stadium_payment_images",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("days", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Text(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.Column("updated_at", sa.Text(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sqlite_autoincrement=True,
    )

    add_column_if_missing("special_tickets", sa.Column("image", sa.Text()))

    backfill_payment_images(op.get_bind())


def downgrade():
    drop_table_if_exists("stadium_payment_images")
