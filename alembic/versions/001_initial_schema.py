"""Initial schema - profiles, projects, tasks, friendships, messages, notifications, calendar events

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PRIORITY_CHECK = "priority IN ('high', 'moderate', 'low')"


def upgrade() -> None:
    # Profiles
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("experience", sa.Text(), nullable=True),
        sa.Column("resume_url", sa.String(1024), nullable=True),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("linkedin", sa.String(1024), nullable=True),
        sa.Column("github", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
    )
    op.create_index("ix_profiles_username", "profiles", ["username"], unique=True)

    # Projects
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("priority", sa.String(20), nullable=False, server_default="moderate"),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("creator_id", sa.Uuid(), nullable=False),
        sa.Column("team_members", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.ForeignKeyConstraint(["creator_id"], ["profiles.id"], name="fk_projects_creator_id_profiles", ondelete="CASCADE"),
        sa.CheckConstraint(PRIORITY_CHECK, name="ck_projects_priority"),
        sa.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress_range"),
    )
    op.create_index("ix_projects_creator_id", "projects", ["creator_id"])

    # Tasks
    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("priority", sa.String(20), nullable=False, server_default="moderate"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("assigned_to", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
        sa.ForeignKeyConstraint(["assigned_to"], ["profiles.id"], name="fk_tasks_assigned_to_profiles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], name="fk_tasks_project_id_projects", ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], name="fk_tasks_user_id_profiles", ondelete="CASCADE"),
        sa.CheckConstraint(PRIORITY_CHECK, name="ck_tasks_priority"),
        sa.CheckConstraint("status IN ('pending', 'in_progress', 'completed')", name="ck_tasks_status"),
    )
    op.create_index("ix_tasks_assigned_to", "tasks", ["assigned_to"])
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])

    # Friendships
    op.create_table(
        "friendships",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("requester_id", sa.Uuid(), nullable=False),
        sa.Column("addressee_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_friendships"),
        sa.ForeignKeyConstraint(["requester_id"], ["profiles.id"], name="fk_friendships_requester_id_profiles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["addressee_id"], ["profiles.id"], name="fk_friendships_addressee_id_profiles", ondelete="CASCADE"),
        sa.UniqueConstraint("requester_id", "addressee_id", name="uq_friendships_pair"),
        sa.CheckConstraint("requester_id != addressee_id", name="ck_friendships_not_self"),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'declined')", name="ck_friendships_status"),
    )
    op.create_index("ix_friendships_requester_id", "friendships", ["requester_id"])
    op.create_index("ix_friendships_addressee_id", "friendships", ["addressee_id"])
    # One row per unordered pair
    op.create_index(
        "uq_friendships_unordered_pair",
        "friendships",
        [sa.text("LEAST(requester_id, addressee_id)"), sa.text("GREATEST(requester_id, addressee_id)")],
        unique=True,
    )

    # Messages
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=False),
        sa.Column("receiver_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_messages"),
        sa.ForeignKeyConstraint(["sender_id"], ["profiles.id"], name="fk_messages_sender_id_profiles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["profiles.id"], name="fk_messages_receiver_id_profiles", ondelete="CASCADE"),
        sa.CheckConstraint("sender_id != receiver_id", name="ck_messages_not_self"),
    )
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"])
    op.create_index("ix_messages_receiver_id", "messages", ["receiver_id"])

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], name="fk_notifications_user_id_profiles", ondelete="CASCADE"),
        sa.CheckConstraint(
            "type IN ('friend_request', 'task_deadline', 'chat', 'project')", name="ck_notifications_type"
        ),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    # Calendar events
    op.create_table(
        "calendar_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("priority", sa.String(20), nullable=False, server_default="moderate"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_calendar_events"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], name="fk_calendar_events_user_id_profiles", ondelete="CASCADE"),
        sa.CheckConstraint(PRIORITY_CHECK, name="ck_calendar_events_priority"),
    )
    op.create_index("ix_calendar_events_user_id", "calendar_events", ["user_id"])
    op.create_index("ix_calendar_events_date", "calendar_events", ["date"])


def downgrade() -> None:
    op.drop_table("calendar_events")
    op.drop_table("notifications")
    op.drop_table("messages")
    op.drop_table("friendships")
    op.drop_table("tasks")
    op.drop_table("projects")
    op.drop_table("profiles")
