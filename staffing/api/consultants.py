# staffing/api/consultants.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from staffing.api.pagination import total_pages
from staffing.core.config import settings
from staffing.core.db import get_db
from staffing.schemas.consultant import (
    ConsultantCreate,
    ConsultantPageOut,
    ConsultantRead,
    ConsultantUpdate,
)
from staffing.schemas.detail import ConsultantDetail
from staffing.services.directory_service import ConsultantService


router = APIRouter(prefix="/api/consultants", tags=["consultants"])

# null in a PATCH body clears these; for every other field null means "leave as is"
NULLABLE_FIELDS = {"skills"}


@router.post("", response_model=ConsultantRead, status_code=status.HTTP_201_CREATED)
def create_consultant(data: ConsultantCreate, db: Session = Depends(get_db)):
    return ConsultantRead.model_validate(ConsultantService(db).create(data.model_dump()))


@router.get("", response_model=ConsultantPageOut)
def list_consultants(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    rows, total = ConsultantService(db).list(page=page, page_size=limit)
    return ConsultantPageOut(
        data=[ConsultantRead.model_validate(r) for r in rows],
        total=total,
        page=page,
        total_pages=total_pages(total, limit),
    )


@router.get("/{consultant_id}", response_model=ConsultantDetail)
def get_consultant(consultant_id: UUID, db: Session = Depends(get_db)):
    """Consultant with its assignments, earliest start first."""
    return ConsultantDetail.model_validate(ConsultantService(db).get_detail(consultant_id))


@router.patch("/{consultant_id}", response_model=ConsultantRead)
def update_consultant(consultant_id: UUID, data: ConsultantUpdate, db: Session = Depends(get_db)):
    fields = {
        k: v
        for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    return ConsultantRead.model_validate(ConsultantService(db).update(consultant_id, fields))


@router.delete("/{consultant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_consultant(consultant_id: UUID, db: Session = Depends(get_db)):
    ConsultantService(db).remove(consultant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
