"""Email verifications

Version: 0005
Create Date: 2025-10-27

Pending booking payloads waiting for the purchaser to confirm their email.
"""
import sqlalchemy as sa

from migrations.schema import create_index_if_missing, create_table_if_missing, drop_index_if_exists, drop_table_if_exists


version = 5
reversible = True

INDEXES = (
    ("idx_email_verifications_verification_id", ["verification_id"]),
    ("idx_email_verifications_email", ["email"]),
    ("idx_email_verifications_expires_at", ["expires_at"]),
)


def upgrade():
    create_table_if_missing(
        "email_verifications",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("verification_id", sa.Text(), nullable=False, unique=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("booking_data", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("verified_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
    )

    for index_name, columns in INDEXES:
        create_index_if_missing(index_name, "email_verifications", columns)


def downgrade():
    for index_name, _ in INDEXES:
        drop_index_if_exists(index_name, "email_verifications")
    drop_table_if_exists("email_verifications")
