from staffing.models.base import Base
from staffing.models.consultant import Consultant, ConsultantAvailability
from staffing.models.project import Project, ProjectStatus
from staffing.models.assignment import Assignment, AssignmentStatus, TERMINAL_STATUSES

__all__ = [
    "Base",
    "Consultant",
    "ConsultantAvailability",
    "Project",
    "ProjectStatus",
    "Assignment",
    "AssignmentStatus",
    "TERMINAL_STATUSES",
]
