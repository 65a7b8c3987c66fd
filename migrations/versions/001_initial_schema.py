"""Initial schema: users, access tokens, cars, trips and reviews.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone", sa.String(32), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role IN ('passenger', 'driver')", name="ck_users_role"),
    )

    # ── access_tokens ─────────────────────────────────────────────────
    op.create_table(
        "access_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("jti", sa.String(64), unique=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_access_tokens_user", "access_tokens", ["user_id"])

    # ── cars ──────────────────────────────────────────────────────────
    op.create_table(
        "cars",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=False),
        sa.Column("license_plate", sa.String(32), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_cars_user", "cars", ["user_id"])

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "passenger_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "driver_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("start_address", sa.String(255), nullable=False),
        sa.Column("end_address", sa.String(255), nullable=False),
        sa.Column("preferences", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'completed', 'canceled')",
            name="ck_trips_status",
        ),
    )
    op.create_index("idx_trips_status", "trips", ["status"])
    op.create_index("idx_trips_passenger", "trips", ["passenger_id"])
    op.create_index("idx_trips_driver", "trips", ["driver_id"])

    # ── reviews ───────────────────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "driver_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "passenger_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )
    op.create_index("idx_reviews_driver", "reviews", ["driver_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("trips")
    op.drop_table("cars")
    op.drop_table("access_tokens")
    op.drop_table("users")
