"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""
from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

service_type = postgresql.ENUM(
    "plumber",
    "electrician",
    "carpenter",
    "painter",
    "cleaner",
    "driver",
    "mechanic",
    "appliance",
    "pest_control",
    "other",
    name="service_type",
    create_type=False,
)
request_status = postgresql.ENUM(
    "pending",
    "accepted",
    "rejected",
    "in_progress",
    "completed",
    "cancelled",
    name="request_status",
    create_type=False,
)
tracking_status = postgresql.ENUM(
    "en_route", "arrived", "working", "completed", name="tracking_status", create_type=False
)
verification_status = postgresql.ENUM(
    "pending", "verified", "rejected", name="verification_status", create_type=False
)
application_status = postgresql.ENUM(
    "pending", "approved", "rejected", name="application_status", create_type=False
)
review_type = postgresql.ENUM(
    "customer_to_worker", "worker_to_customer", name="review_type", create_type=False
)

ENUMS = (
    service_type,
    request_status,
    tracking_status,
    verification_status,
    application_status,
    review_type,
)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "workers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("profession", service_type, nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("experience", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("hourly_rate", sa.Float(), nullable=False),
        sa.Column("profile_image", sa.String(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verification_status", verification_status, nullable=False),
        sa.Column("application_status", application_status, nullable=False),
        sa.Column("tracking_code", sa.String(length=32), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("pincode", sa.String(length=20), nullable=False),
        sa.Column("service_area", sa.Float(), nullable=False),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("rating_average", sa.Float(), nullable=False),
        sa.Column("rating_count", sa.Integer(), nullable=False),
        sa.Column("completed_jobs", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tracking_code"),
    )
    op.create_index("ix_workers_user_id", "workers", ["user_id"], unique=True)
    op.create_index("ix_workers_profession", "workers", ["profession"])

    op.create_table(
        "service_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=True),
        sa.Column("worker_id", sa.Uuid(), nullable=True),
        sa.Column("service_type", service_type, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("street", sa.String(), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("pincode", sa.String(length=20), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("scheduled_time", sa.String(length=20), nullable=True),
        sa.Column("estimated_duration", sa.Float(), nullable=False),
        sa.Column("estimated_cost", sa.Float(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("status", request_status, nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("customer_rating", sa.Integer(), nullable=True),
        sa.Column("customer_review", sa.Text(), nullable=True),
        sa.Column("worker_rating", sa.Integer(), nullable=True),
        sa.Column("worker_review", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "customer_rating IS NULL OR (customer_rating >= 1 AND customer_rating <= 5)",
            name="customer_rating_range",
        ),
        sa.CheckConstraint(
            "worker_rating IS NULL OR (worker_rating >= 1 AND worker_rating <= 5)",
            name="worker_rating_range",
        ),
        sa.ForeignKeyConstraint(
            ["worker_id"], ["workers.id"], name="fk_service_requests_worker_id"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_service_requests_customer_id", "service_requests", ["customer_id"])
    op.create_index("ix_service_requests_worker_id", "service_requests", ["worker_id"])
    op.create_index("ix_service_requests_service_type", "service_requests", ["service_type"])
    op.create_index("ix_service_requests_status", "service_requests", ["status"])
    op.create_index("ix_service_requests_created_at", "service_requests", ["created_at"])

    op.create_table(
        "trackings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("service_request_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("current_longitude", sa.Float(), nullable=False),
        sa.Column("current_latitude", sa.Float(), nullable=False),
        sa.Column("current_address", sa.String(), nullable=False),
        sa.Column("current_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("destination_longitude", sa.Float(), nullable=False),
        sa.Column("destination_latitude", sa.Float(), nullable=False),
        sa.Column("destination_address", sa.String(), nullable=False),
        sa.Column("status", tracking_status, nullable=False),
        sa.Column("is_live", sa.Boolean(), nullable=False),
        sa.Column("estimated_arrival", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["service_request_id"],
            ["service_requests.id"],
            name="fk_trackings_service_request_id",
        ),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], name="fk_trackings_worker_id"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_trackings_service_request_id", "trackings", ["service_request_id"])
    op.create_index("ix_trackings_worker_id", "trackings", ["worker_id"])
    op.create_index("ix_trackings_is_live", "trackings", ["is_live"])
    op.create_index(
        "uq_trackings_live_service_request",
        "trackings",
        ["service_request_id"],
        unique=True,
        postgresql_where=sa.text("is_live"),
    )

    op.create_table(
        "tracking_points",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tracking_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["tracking_id"], ["trackings.id"], name="fk_tracking_points_tracking_id"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_tracking_points_position", "tracking_points", ["tracking_id", "position"], unique=True
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("service_request_id", sa.Uuid(), nullable=False),
        sa.Column("reviewer_id", sa.Uuid(), nullable=False),
        sa.Column("reviewee_id", sa.Uuid(), nullable=False),
        sa.Column("worker_id", sa.Uuid(), nullable=True),
        sa.Column("review_type", review_type, nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
        sa.ForeignKeyConstraint(
            ["service_request_id"], ["service_requests.id"], name="fk_reviews_service_request_id"
        ),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], name="fk_reviews_worker_id"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "service_request_id", "review_type", name="uq_reviews_request_direction"
        ),
    )
    op.create_index("ix_reviews_service_request_id", "reviews", ["service_request_id"])
    op.create_index("ix_reviews_reviewee_id", "reviews", ["reviewee_id"])
    op.create_index("ix_reviews_worker_id", "reviews", ["worker_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("tracking_points")
    op.drop_table("trackings")
    op.drop_table("service_requests")
    op.drop_table("workers")

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
