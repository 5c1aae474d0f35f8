# staffing/services/directory_service.py
"""Consultant / project bookkeeping.

Plain CRUD by primary key: validate, persist, no scheduling rules. Deleting a
consultant or project cascades to its assignments at the database level.
"""
from __future__ import annotations

import enum
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from staffing.models.assignment import Assignment
from staffing.models.consultant import Consultant
from staffing.models.project import Project
from staffing.services.assignment_store import check_page
from staffing.services.errors import NotFoundError, ValidationError


def _values(data: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in data.items()}


def _page(db: Session, model, page: int, page_size: int) -> tuple[list[Any], int]:
    check_page(page, page_size)
    total = db.execute(select(func.count()).select_from(model)).scalar_one()
    rows = (
        db.execute(
            select(model)
            .order_by(model.created_at.desc(), model.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        .scalars()
        .all()
    )
    return list(rows), total


class ConsultantService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: dict[str, Any]) -> Consultant:
        consultant = Consultant(**_values(data))
        self.db.add(consultant)
        self._commit()
        return consultant

    def get(self, consultant_id: UUID) -> Consultant:
        consultant = self.db.get(Consultant, consultant_id)
        if consultant is None:
            raise NotFoundError(f"Consultant with ID {consultant_id} not found")
        return consultant

    def get_detail(self, consultant_id: UUID) -> Consultant:
        consultant = self.db.get(
            Consultant,
            consultant_id,
            options=[selectinload(Consultant.assignments).joinedload(Assignment.project)],
            populate_existing=True,
        )
        if consultant is None:
            raise NotFoundError(f"Consultant with ID {consultant_id} not found")
        return consultant

    def list(self, *, page: int = 1, page_size: int = 10) -> tuple[list[Consultant], int]:
        return _page(self.db, Consultant, page, page_size)

    def update(self, consultant_id: UUID, data: dict[str, Any]) -> Consultant:
        consultant = self.get(consultant_id)
        for field, value in _values(data).items():
            setattr(consultant, field, value)
        self._commit()
        return consultant

    def remove(self, consultant_id: UUID) -> None:
        consultant = self.get(consultant_id)
        self.db.delete(consultant)
        self.db.commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # consultants.email is the only unique column
            raise ValidationError("Consultant with this email already exists", field="email") from e


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: dict[str, Any]) -> Project:
        if data["start_date"] > data["end_date"]:
            raise ValidationError("end_date must not be before start_date", field="end_date")
        project = Project(**_values(data))
        self.db.add(project)
        self.db.commit()
        return project

    def get(self, project_id: UUID) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found")
        return project

    def get_detail(self, project_id: UUID) -> Project:
        project = self.db.get(
            Project,
            project_id,
            options=[selectinload(Project.assignments).joinedload(Assignment.consultant)],
            populate_existing=True,
        )
        if project is None:
            raise NotFoundError(f"Project with ID {project_id} not found")
        return project

    def list(self, *, page: int = 1, page_size: int = 10) -> tuple[list[Project], int]:
        return _page(self.db, Project, page, page_size)

    def update(self, project_id: UUID, data: dict[str, Any]) -> Project:
        project = self.get(project_id)
        start = data.get("start_date", project.start_date)
        end = data.get("end_date", project.end_date)
        if start > end:
            raise ValidationError("end_date must not be before start_date", field="end_date")

        for field, value in _values(data).items():
            setattr(project, field, value)
        self.db.commit()
        return project

    def remove(self, project_id: UUID) -> None:
        project = self.get(project_id)
        self.db.delete(project)
        self.db.commit()
