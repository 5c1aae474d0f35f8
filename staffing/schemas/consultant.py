# staffing/schemas/consultant.py

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from staffing.models.consultant import ConsultantAvailability

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


class ConsultantCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    skills: list[str] | None = None
    hourly_rate: float = Field(default=0.0, ge=0)
    availability: ConsultantAvailability = ConsultantAvailability.available


class ConsultantUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    skills: list[str] | None = None
    hourly_rate: float | None = Field(default=None, ge=0)
    availability: ConsultantAvailability | None = None


class ConsultantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    skills: list[str] | None = None
    hourly_rate: float
    availability: ConsultantAvailability
    created_at: datetime
    updated_at: datetime


class ConsultantPageOut(BaseModel):
    data: list[ConsultantRead]
    total: int
    page: int
    total_pages: int
