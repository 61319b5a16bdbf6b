"""Payments schema

Version: 0002
Create Date: 2025-07-14

Adds the payments table and links bookings to it through
``bookings.payment_id``. The column is left in place on downgrade.
"""
from alembic import op
import sqlalchemy as sa

from migrations.schema import (
    column_names,
    create_index_if_missing,
    create_table_if_missing,
    drop_index_if_exists,
    drop_table_if_exists,
)


version = 2
reversible = False

INDEXES = (
    ("idx_payments_reference_no", ["reference_no"]),
    ("idx_payments_status", ["status"]),
    ("idx_payments_booking_id", ["booking_id"]),
)


def upgrade():
    create_table_if_missing(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id")),
        sa.Column("order_no", sa.Text()),
        sa.Column("reference_no", sa.Text(), nullable=False, unique=True),
        sa.Column("amount", sa.REAL(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending"),
        sa.Column("qr_code_image", sa.Text()),
        sa.Column("expire_date", sa.Text()),
        sa.Column("order_datetime", sa.Text()),
        sa.Column("customer_name", sa.Text(), nullable=False),
        sa.Column("customer_email", sa.Text(), nullable=False),
        sa.Column("customer_phone", sa.Text(), nullable=False),
        sa.Column("product_detail", sa.Text()),
        sa.Column("merchant_id", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sqlite_autoincrement=True,
    )

    for index_name, columns in INDEXES:
        create_index_if_missing(index_name, "payments", columns)

    if "payment_id" not in column_names("bookings"):
        op.execute("ALTER TABLE bookings ADD COLUMN payment_id INTEGER REFERENCES payments(id)")


def downgrade():
    for index_name, _ in INDEXES:
        drop_index_if_exists(index_name, "payments")
    drop_table_if_exists("payments")
