# staffing/api/projects.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from staffing.api.pagination import total_pages
from staffing.core.config import settings
from staffing.core.db import get_db
from staffing.schemas.detail import ProjectDetail
from staffing.schemas.project import (
    ProjectCreate,
    ProjectPageOut,
    ProjectRead,
    ProjectUpdate,
)
from staffing.services.directory_service import ProjectService


router = APIRouter(prefix="/api/projects", tags=["projects"])

# null in a PATCH body clears these; for every other field null means "leave as is"
NULLABLE_FIELDS = {"description"}


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(data: ProjectCreate, db: Session = Depends(get_db)):
    return ProjectRead.model_validate(ProjectService(db).create(data.model_dump()))


@router.get("", response_model=ProjectPageOut)
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    rows, total = ProjectService(db).list(page=page, page_size=limit)
    return ProjectPageOut(
        data=[ProjectRead.model_validate(r) for r in rows],
        total=total,
        page=page,
        total_pages=total_pages(total, limit),
    )


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(project_id: UUID, db: Session = Depends(get_db)):
    """Project with its assignments, earliest start first."""
    return ProjectDetail.model_validate(ProjectService(db).get_detail(project_id))


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(project_id: UUID, data: ProjectUpdate, db: Session = Depends(get_db)):
    fields = {
        k: v
        for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    return ProjectRead.model_validate(ProjectService(db).update(project_id, fields))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: UUID, db: Session = Depends(get_db)):
    ProjectService(db).remove(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
