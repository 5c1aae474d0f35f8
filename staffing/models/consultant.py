# staffing/models/consultant.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Float, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing.models.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from staffing.models.assignment import Assignment


class ConsultantAvailability(str, enum.Enum):
    available = "available"
    busy = "busy"
    unavailable = "unavailable"


class Consultant(Base):
    __tablename__ = "consultants"
    __table_args__ = (
        CheckConstraint(
            "availability IN ('available', 'busy', 'unavailable')",
            name="ck_consultants_availability",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    skills: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    hourly_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    availability: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ConsultantAvailability.available.value,
    )

    # Bumped under the scheduling lock: every schedule-affecting write for this
    # consultant updates this row first and holds the row lock until commit.
    schedule_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # rows are removed by ON DELETE CASCADE; passive_deletes keeps the ORM from loading them
    assignments: Mapped[list[Assignment]] = relationship(
        "Assignment",
        back_populates="consultant",
        cascade="all",
        passive_deletes=True,
        order_by="Assignment.start_time",
    )
