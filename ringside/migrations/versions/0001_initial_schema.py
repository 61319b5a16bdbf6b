"""Initial schema

Version: 0001
Create Date: 2025-06-02

Base tables for bookings, tickets and the editable site content.
"""
import sqlalchemy as sa

from migrations.schema import create_table_if_missing, drop_table_if_exists


version = 1
reversible = True

TABLES = (
    "bookings",
    "regular_tickets",
    "special_tickets",
    "hero_image",
    "highlights",
    "stadiums_extended",
    "stadium_image_schedules",
    "special_matches",
    "upcoming_fights_background",
    "promptpay_qr",
)


def _created_at():
    return sa.Column("created_at", sa.Text(), server_default=sa.text("(CURRENT_TIMESTAMP)"))


def _updated_at():
    return sa.Column("updated_at", sa.Text(), server_default=sa.text("(CURRENT_TIMESTAMP)"))


def upgrade():
    create_table_if_missing(
        "bookings",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("stadium", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("zone", sa.Text()),
        sa.Column("ticket_id", sa.Text()),
        sa.Column("ticket_type", sa.Text()),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.REAL(), nullable=False),
        sa.Column("payment_start_time", sa.Text()),
        sa.Column("payment_time", sa.Text()),
        sa.Column("payment_slip", sa.Text()),
        sa.Column("payment_date_time", sa.Text()),
        sa.Column("time_diff", sa.Text()),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending"),
    )

    create_table_if_missing(
        "regular_tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.REAL(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Text()),
        sa.Column("match_name", sa.Text()),
        sa.Column("days", sa.Text()),
        _created_at(),
        sqlite_autoincrement=True,
    )

    create_table_if_missing(
        "special_tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.REAL(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        _created_at(),
        sqlite_autoincrement=True,
    )

    # Singleton rows: the CHECK pins the only allowed id to 1
    create_table_if_missing(
        "hero_image",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("image", sa.Text(), nullable=False),
        _updated_at(),
        sa.CheckConstraint("id = 1", name="ck_hero_image_singleton"),
    )

    create_table_if_missing(
        "highlights",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        _created_at(),
        sqlite_autoincrement=True,
    )

    create_table_if_missing(
        "stadiums_extended",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("schedule_days", sa.Text()),
        _updated_at(),
    )

    create_table_if_missing(
        "stadium_image_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("days", sa.Text()),
        sa.Column("name", sa.Text()),
        _created_at(),
        sqlite_autoincrement=True,
    )

    create_table_if_missing(
        "special_matches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("image", sa.Text()),
        _created_at(),
        sqlite_autoincrement=True,
    )

    create_table_if_missing(
        "upcoming_fights_background",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("fallback", sa.Text()),
        _updated_at(),
        sa.CheckConstraint("id = 1", name="ck_upcoming_fights_background_singleton"),
    )

    create_table_if_missing(
        "promptpay_qr",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("qr_image", sa.Text(), nullable=False),
        _updated_at(),
        sa.CheckConstraint("id = 1", name="ck_promptpay_qr_singleton"),
    )


def downgrade():
    for table_name in TABLES:
        drop_table_if_exists(table_name)
