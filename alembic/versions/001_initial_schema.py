"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the CarZone tables:
- Cars
- Bookings, with an exclusion constraint on active rental windows
- Payments, with at most one completed payment per booking
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # Needed for "=" on uuid inside a GiST exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # ==================== CARS ====================
    op.create_table(
        "cars",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=False),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("rental_price_daily", sa.Numeric(10, 2), nullable=False),
        sa.Column("sale_price", sa.Numeric(12, 2)),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("customer_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column(
            "car_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("cars.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("booking_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("total_amount > 0", name="ck_bookings_total_amount_positive"),
        sa.CheckConstraint(
            "booking_type <> 'rental' OR (start_date IS NOT NULL AND end_date IS NOT NULL AND start_date < end_date)",
            name="ck_bookings_rental_window",
        ),
    )
    op.create_index("ix_bookings_car_window", "bookings", ["car_id", "start_date", "end_date"])

    # Two active rentals of the same car may not overlap
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_active_window
        EXCLUDE USING gist (
            car_id WITH =,
            tstzrange(start_date, end_date, '[)') WITH &&
        )
        WHERE (booking_type = 'rental' AND status IN ('pending', 'confirmed'))
        """
    )

    # ==================== PAYMENTS ====================
    op.create_table(
        "payments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("gateway_order_id", sa.String(255), unique=True, index=True),
        sa.Column("gateway_payment_id", sa.String(255)),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("refunded_amount", sa.Numeric(12, 2)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("method", sa.String(20), nullable=False),
        sa.Column("transaction_id", sa.String(255)),
        sa.Column("description", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.CheckConstraint(
            "refunded_amount IS NULL OR refunded_amount <= amount",
            name="ck_payments_refund_within_amount",
        ),
    )
    op.create_index(
        "uq_payments_booking_completed",
        "payments",
        ["booking_id"],
        unique=True,
        postgresql_where=sa.text("status = 'completed'"),
    )

    # ==================== AUDIT ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("old_values", postgresql.JSONB),
        sa.Column("new_values", postgresql.JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_index("uq_payments_booking_completed", table_name="payments")
    op.drop_table("payments")
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_active_window")
    op.drop_index("ix_bookings_car_window", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("cars")
