# staffing/schemas/project.py

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staffing.models.project import ProjectStatus


class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    client: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.planning
    budget: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    client: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: ProjectStatus | None = None
    budget: float | None = Field(default=None, ge=0)


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    client: str
    description: str | None = None
    start_date: date
    end_date: date
    status: ProjectStatus
    budget: float
    created_at: datetime
    updated_at: datetime


class ProjectPageOut(BaseModel):
    data: list[ProjectRead]
    total: int
    page: int
    total_pages: int
