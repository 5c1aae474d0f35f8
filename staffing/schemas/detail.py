# staffing/schemas/detail.py
"""Read models that embed related records.

Assignment responses carry their consultant and project; consultant and
project detail responses carry their assignments with the other side embedded.
"""

from pydantic import BaseModel, Field

from staffing.schemas.assignment import AssignmentRead
from staffing.schemas.consultant import ConsultantRead
from staffing.schemas.project import ProjectRead


class AssignmentDetail(AssignmentRead):
    consultant: ConsultantRead
    project: ProjectRead


class ConsultantAssignmentRead(AssignmentRead):
    project: ProjectRead


class ProjectAssignmentRead(AssignmentRead):
    consultant: ConsultantRead


class ConsultantDetail(ConsultantRead):
    assignments: list[ConsultantAssignmentRead] = Field(default_factory=list)


class ProjectDetail(ProjectRead):
    assignments: list[ProjectAssignmentRead] = Field(default_factory=list)


class AssignmentPageOut(BaseModel):
    data: list[AssignmentDetail]
    total: int
    page: int
    total_pages: int = Field(description="ceil(total / limit)")
