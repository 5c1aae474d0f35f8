# staffing/models/assignment.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing.models.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from staffing.models.consultant import Consultant
    from staffing.models.project import Project


class AssignmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


# Terminal assignments no longer occupy the consultant's time.
TERMINAL_STATUSES = frozenset({AssignmentStatus.completed.value, AssignmentStatus.cancelled.value})


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_assignments_window"),
        CheckConstraint(
            "status IN ('scheduled', 'active', 'completed', 'cancelled')",
            name="ck_assignments_status",
        ),
        Index("ix_assignments_consultant_window", "consultant_id", "start_time", "end_time"),
        Index("ix_assignments_project", "project_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    consultant_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("consultants.id", ondelete="CASCADE"),
        nullable=False,
    )
    project_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    # half-open window [start_time, end_time)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # derived from the window by the store, never written by callers
    hours: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AssignmentStatus.scheduled.value,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    consultant: Mapped[Consultant] = relationship("Consultant", back_populates="assignments")
    project: Mapped[Project] = relationship("Project", back_populates="assignments")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
