"""Initial migration: create users, events, opt-in pool and circle tables

Revision ID: 001_initial
Revises:
Create Date: 2026-03-01 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "app_user",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("is_guest", sa.Boolean(), nullable=False),
        sa.Column("interests", sa.JSON(), nullable=True),
        sa.Column("personality_type", sa.String(), nullable=True),
        sa.Column("cooking_experience", sa.String(), nullable=True),
        sa.Column("dietary_restrictions", sa.String(), nullable=True),
        sa.Column("social_preferences", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "event",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("total_spots", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("matching_status", sa.String(), nullable=False, server_default="open"),
        sa.Column("matching_triggered_at", sa.DateTime(), nullable=True),
        sa.Column("matching_completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # Opt-in pool; created_at order is the matching order
    op.create_table(
        "matching_opt_in",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("partner_id", sa.Integer(), nullable=True),
        sa.Column("hosting_available", sa.Boolean(), nullable=False),
        sa.Column("match_address", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"]),
        sa.ForeignKeyConstraint(["partner_id"], ["app_user.id"]),
        sa.UniqueConstraint("event_id", "user_id", name="uq_opt_in_event_user"),
    )
    op.create_index("ix_matching_opt_in_event_id", "matching_opt_in", ["event_id"])
    op.create_index("ix_matching_opt_in_user_id", "matching_opt_in", ["user_id"])

    op.create_table(
        "circle",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
    )
    op.create_index("ix_circle_event_id", "circle", ["event_id"])

    op.create_table(
        "circle_member",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("circle_id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["circle_id"], ["circle.id"]),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"]),
        sa.UniqueConstraint("event_id", "user_id", name="uq_circle_member_event_user"),
    )
    op.create_index("ix_circle_member_circle_id", "circle_member", ["circle_id"])
    op.create_index("ix_circle_member_event_id", "circle_member", ["event_id"])
    op.create_index("ix_circle_member_user_id", "circle_member", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_circle_member_user_id", table_name="circle_member")
    op.drop_index("ix_circle_member_event_id", table_name="circle_member")
    op.drop_index("ix_circle_member_circle_id", table_name="circle_member")
    op.drop_table("circle_member")
    op.drop_index("ix_circle_event_id", table_name="circle")
    op.drop_table("circle")
    op.drop_index("ix_matching_opt_in_user_id", table_name="matching_opt_in")
    op.drop_index("ix_matching_opt_in_event_id", table_name="matching_opt_in")
    op.drop_table("matching_opt_in")
    op.drop_table("event")
    op.drop_table("app_user")
