"""Add ledger posting requests (GL posting outbox)

Revision ID: 20261008_posting_outbox
Revises: 20261001_initial
Create Date: 2026-10-08
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261008_posting_outbox"
down_revision = "20261001_initial"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "ledger_posting_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("business_unit_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_error", sa.String(500), nullable=True),
        sa.Column("journal_entry_id", sa.Integer(), nullable=True),
        sa.Column("requested_by_user_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["business_unit_id"], ["business_units.id"]),
        sa.ForeignKeyConstraint(["journal_entry_id"], ["journal_entries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id", name="uq_ledger_posting_requests_order"),
        sqlite_autoincrement=True,
    )

    with op.batch_alter_table("ledger_posting_requests", schema=None) as batch_op:
        batch_op.create_index("ix_ledger_posting_requests_status", ["status"], unique=False)
        batch_op.create_index("ix_ledger_posting_requests_business_unit_id", ["business_unit_id"], unique=False)


def downgrade():
    with op.batch_alter_table("ledger_posting_requests", schema=None) as batch_op:
        batch_op.drop_index("ix_ledger_posting_requests_business_unit_id")
        batch_op.drop_index("ix_ledger_posting_requests_status")

    op.drop_table("ledger_posting_requests")
