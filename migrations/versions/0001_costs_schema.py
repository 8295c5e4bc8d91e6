"""rooms, expenses, rental payments and payment reminders

Revision ID: 0001_costs_schema
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_costs_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "rooms",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="CAD"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "room_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.String(36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("room_id", "user_id", name="uq_room_member"),
    )
    op.create_index("ix_room_members_room_id", "room_members", ["room_id"])
    op.create_index("ix_room_members_user_id", "room_members", ["user_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_id", sa.String(36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="CAD"),
        sa.Column("paid_by_user_id", sa.String(36), nullable=False),
        sa.Column("created_by_user_id", sa.String(36), nullable=False),
        sa.Column("receipt_path", sa.String(), nullable=True),
        sa.Column("is_cottage_rental", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount_cents >= 0", name="ck_expense_amount_non_negative"),
    )
    op.create_index("ix_expenses_room_id", "expenses", ["room_id"])
    op.create_index(
        "one_cottage_rental_per_room",
        "expenses",
        ["room_id"],
        unique=True,
        postgresql_where=sa.text("is_cottage_rental AND pinned"),
        sqlite_where=sa.text("is_cottage_rental AND pinned"),
    )

    op.create_table(
        "expense_splits",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("expense_id", sa.String(36), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("expense_id", "user_id", name="uq_expense_split_user"),
        sa.CheckConstraint("amount_cents >= 0", name="ck_split_amount_non_negative"),
    )
    op.create_index("ix_expense_splits_expense_id", "expense_splits", ["expense_id"])

    op.create_table(
        "rental_payments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_id", sa.String(36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("room_id", "user_id", name="unique_rental_payment_per_user"),
        sa.CheckConstraint("amount_cents >= 0", name="ck_rental_payment_amount_non_negative"),
    )
    op.create_index("ix_rental_payments_room_id", "rental_payments", ["room_id"])
    op.create_index("ix_rental_payments_user_id", "rental_payments", ["user_id"])

    op.create_table(
        "payment_reminders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("room_id", sa.String(36), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_user_id", sa.String(36), nullable=False),
        sa.Column("to_user_id", sa.String(36), nullable=False),
        sa.Column("reminder_type", sa.String(), nullable=False, server_default="settlement"),
        sa.Column("last_sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "room_id", "from_user_id", "to_user_id", "reminder_type",
            name="unique_reminder_per_pair_per_room_per_type",
        ),
    )
    op.create_index("ix_payment_reminders_room_id", "payment_reminders", ["room_id"])
    op.create_index("ix_payment_reminders_from_user_id", "payment_reminders", ["from_user_id"])
    op.create_index("ix_payment_reminders_to_user_id", "payment_reminders", ["to_user_id"])


def downgrade():
    op.drop_table("payment_reminders")
    op.drop_table("rental_payments")
    op.drop_table("expense_splits")
    op.drop_index("one_cottage_rental_per_room", table_name="expenses")
    op.drop_table("expenses")
    op.drop_table("room_members")
    op.drop_table("rooms")
