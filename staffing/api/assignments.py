# staffing/api/assignments.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from staffing.api.pagination import total_pages
from staffing.core.config import settings
from staffing.core.db import get_db
from staffing.schemas.assignment import AssignmentCreate, AssignmentUpdate
from staffing.schemas.detail import AssignmentDetail, AssignmentPageOut
from staffing.services.assignment_service import AssignmentService


router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", response_model=AssignmentDetail, status_code=status.HTTP_201_CREATED)
def create_assignment(data: AssignmentCreate, db: Session = Depends(get_db)):
    """Create an assignment. 400 SCHEDULE_CONFLICT if the consultant is already booked."""
    row = AssignmentService(db).create_assignment(
        consultant_id=data.consultant_id,
        project_id=data.project_id,
        start_time=data.start_time,
        end_time=data.end_time,
        notes=data.notes,
    )
    return AssignmentDetail.model_validate(row)


@router.get("", response_model=AssignmentPageOut)
def list_assignments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    consultant_id: UUID | None = Query(None),
    project_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
):
    result = AssignmentService(db).list_assignments(
        consultant_id=consultant_id,
        project_id=project_id,
        page=page,
        page_size=limit,
    )
    return AssignmentPageOut(
        data=[AssignmentDetail.model_validate(r) for r in result.items],
        total=result.total,
        page=page,
        total_pages=total_pages(result.total, limit),
    )


@router.get("/{assignment_id}", response_model=AssignmentDetail)
def get_assignment(assignment_id: UUID, db: Session = Depends(get_db)):
    return AssignmentDetail.model_validate(AssignmentService(db).get_assignment(assignment_id))


@router.patch("/{assignment_id}", response_model=AssignmentDetail)
def update_assignment(assignment_id: UUID, data: AssignmentUpdate, db: Session = Depends(get_db)):
    # only fields present in the body; presence of consultant_id/start_time/end_time
    # re-runs the conflict check
    fields = data.model_dump(exclude_unset=True)
    row = AssignmentService(db).update_assignment(assignment_id, fields)
    return AssignmentDetail.model_validate(row)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: UUID, db: Session = Depends(get_db)):
    AssignmentService(db).delete_assignment(assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
