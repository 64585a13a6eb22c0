"""Create users, emotion_logs and settings tables.

Revision ID: 20241019_01
Revises:
Create Date: 2024-10-19 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20241019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("profile_picture", sa.String(length=512), nullable=False),
        sa.Column("bio", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "emotion_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("primary_emotion", sa.String(length=50), nullable=False),
        sa.Column("secondary_emotion", sa.String(length=50), nullable=True),
        sa.Column("emotion_intensity", sa.Integer(), nullable=False),
        sa.Column("emotion_duration", sa.Integer(), nullable=False),
        sa.Column("triggers", sa.JSON(), nullable=False),
        sa.Column("physical_sensations", sa.JSON(), nullable=False),
        sa.Column("daily_activities", sa.JSON(), nullable=False),
        sa.Column("location", sa.String(length=100), nullable=False),
        sa.Column("people_involved", sa.JSON(), nullable=False),
        sa.Column("overall_day_rating", sa.Integer(), nullable=False),
        sa.Column("reflection", sa.Text(), nullable=True),
        sa.Column("gratitude", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_emotion_logs_created_at", "emotion_logs", ["created_at"])
    op.create_index(
        "ix_emotion_logs_user_id_created_at",
        "emotion_logs",
        ["user_id", "created_at"],
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_settings_key", "settings", ["key"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_settings_key", table_name="settings")
    op.drop_table("settings")
    op.drop_index("ix_emotion_logs_user_id_created_at", table_name="emotion_logs")
    op.drop_index("ix_emotion_logs_created_at", table_name="emotion_logs")
    op.drop_table("emotion_logs")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
