"""Daily ticket adjustments

Version: 0004
Create Date: 2025-09-30

Per-date overrides for ticket stock: an enabled flag, a name and a price.
Downgrade cannot remove the added columns.
"""
from alembic import op
import sqlalchemy as sa

from migrations.schema import add_column_if_missing, create_table_if_missing


version = 4
reversible = False


def upgrade():
    # Databases created before migrations existed already have this table
    create_table_if_missing(
        "ticket_quantities_by_date",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stadium_id", sa.Text(), nullable=False),
        sa.Column("ticket_id", sa.Text(), nullable=False),
        sa.Column("ticket_type", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("initial_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.UniqueConstraint("stadium_id", "ticket_id", "ticket_type", "date", name="uq_ticket_quantity_per_date"),
        sqlite_autoincrement=True,
    )

    add_column_if_missing("ticket_quantities_by_date", sa.Column("enabled", sa.Integer(), server_default=sa.text("1")))
    add_column_if_missing("ticket_quantities_by_date", sa.Column("name_override", sa.Text()))
    add_column_if_missing("ticket_quantities_by_date", sa.Column("price_override", sa.REAL()))

    op.execute("UPDATE ticket_quantities_by_date SET enabled = 1 WHERE enabled IS NULL")


def downgrade():
    # SQLite cannot drop these columns without rebuilding the table
    pass
