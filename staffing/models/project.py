# staffing/models/project.py
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing.models.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from staffing.models.assignment import Assignment


class ProjectStatus(str, enum.Enum):
    planning = "planning"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint(
            "status IN ('planning', 'active', 'completed', 'cancelled')",
            name="ck_projects_status",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    client: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ProjectStatus.planning.value)
    budget: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # rows are removed by ON DELETE CASCADE; passive_deletes keeps the ORM from loading them
    assignments: Mapped[list[Assignment]] = relationship(
        "Assignment",
        back_populates="project",
        cascade="all",
        passive_deletes=True,
        order_by="Assignment.start_time",
    )
