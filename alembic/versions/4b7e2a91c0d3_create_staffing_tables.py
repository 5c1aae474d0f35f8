"""create consultants, projects, assignments (+ no-overlap exclusion)

Revision ID: 4b7e2a91c0d3
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "4b7e2a91c0d3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "consultants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("skills", postgresql.JSONB(), nullable=True),
        sa.Column("hourly_rate", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("availability", sa.String(20), nullable=False, server_default="available"),
        sa.Column("schedule_version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="uq_consultants_email"),
        sa.CheckConstraint(
            "availability IN ('available', 'busy', 'unavailable')",
            name="ck_consultants_availability",
        ),
    )

    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("client", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="planning"),
        sa.Column("budget", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status IN ('planning', 'active', 'completed', 'cancelled')",
            name="ck_projects_status",
        ),
    )

    op.create_table(
        "assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "consultant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("consultants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("start_time < end_time", name="ck_assignments_window"),
        sa.CheckConstraint(
            "status IN ('scheduled', 'active', 'completed', 'cancelled')",
            name="ck_assignments_status",
        ),
    )

    op.create_index(
        "ix_assignments_consultant_window",
        "assignments",
        ["consultant_id", "start_time", "end_time"],
    )
    op.create_index("ix_assignments_project", "assignments", ["project_id"])

    # Backstop for the application lock: no two non-terminal windows of one
    # consultant may overlap ([) ranges, so back-to-back bookings are allowed).
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE assignments
        ADD CONSTRAINT ex_assignments_consultant_no_overlap
        EXCLUDE USING gist (
            consultant_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status NOT IN ('cancelled', 'completed'))
        """
    )


def downgrade() -> None:
    op.execute("ALTER TABLE assignments DROP CONSTRAINT IF EXISTS ex_assignments_consultant_no_overlap")
    op.drop_index("ix_assignments_project", table_name="assignments")
    op.drop_index("ix_assignments_consultant_window", table_name="assignments")
    op.drop_table("assignments")
    op.drop_table("projects")
    op.drop_table("consultants")
