# staffing/schemas/assignment.py

from datetime import datetime
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict

from staffing.models.assignment import AssignmentStatus


class AssignmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    consultant_id: UUID
    project_id: UUID
    start_time: AwareDatetime
    end_time: AwareDatetime
    notes: str | None = None


class AssignmentUpdate(BaseModel):
    """Partial update. Only fields present in the body are applied.

    hours is derived from the window and cannot be sent.
    """

    model_config = ConfigDict(extra="forbid")

    consultant_id: UUID | None = None
    project_id: UUID | None = None
    start_time: AwareDatetime | None = None
    end_time: AwareDatetime | None = None
    status: AssignmentStatus | None = None
    notes: str | None = None


class AssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    consultant_id: UUID
    project_id: UUID
    start_time: datetime
    end_time: datetime
    hours: float
    status: AssignmentStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
