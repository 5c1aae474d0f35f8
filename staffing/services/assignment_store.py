# staffing/services/assignment_store.py
from __future__ import annotations

import logging
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator, Protocol
from uuid import UUID

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, joinedload

from staffing.core.config import Settings, settings as default_settings
from staffing.models.assignment import Assignment, AssignmentStatus, TERMINAL_STATUSES
from staffing.models.base import utcnow
from staffing.models.consultant import Consultant
from staffing.services.errors import (
    ConflictError,
    NotFoundError,
    ReferentialError,
    TransientStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = frozenset(
    {"consultant_id", "project_id", "start_time", "end_time", "status", "notes"}
)

# PostgreSQL exclusion constraint installed by the migration (see alembic/versions).
NO_OVERLAP_CONSTRAINT = "ex_assignments_consultant_no_overlap"

# sqlstate codes
_PG_EXCLUSION_VIOLATION = "23P01"
_PG_FOREIGN_KEY_VIOLATION = "23503"
_PG_CHECK_VIOLATION = "23514"


def window_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


@dataclass(frozen=True)
class AssignmentPage:
    items: list[Assignment]
    total: int


class AssignmentStore(Protocol):
    """Persistence seam for assignments.

    Every conflict-checked write runs as
    ``with store.transaction(): store.lock_consultant(...); store.find_overlapping(...); store.insert/update(...)``
    so the read and the write share one atomic unit.
    """

    def transaction(self) -> AbstractContextManager[None]: ...

    def lock_consultant(self, consultant_id: UUID) -> None: ...

    def insert(
        self,
        *,
        consultant_id: UUID,
        project_id: UUID,
        start_time: datetime,
        end_time: datetime,
        status: str = AssignmentStatus.scheduled.value,
        notes: str | None = None,
    ) -> Assignment: ...

    def find_overlapping(
        self,
        consultant_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: UUID | None = None,
    ) -> list[Assignment]: ...

    def get(self, assignment_id: UUID, *, refresh: bool = False) -> Assignment: ...

    def update(self, assignment_id: UUID, patch: dict[str, Any]) -> Assignment: ...

    def remove(self, assignment_id: UUID) -> None: ...

    def list(
        self,
        *,
        consultant_id: UUID | None = None,
        project_id: UUID | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> AssignmentPage: ...


def normalize_status(value: Any) -> str:
    if isinstance(value, AssignmentStatus):
        return value.value
    try:
        return AssignmentStatus(str(value)).value
    except ValueError:
        allowed = ", ".join(s.value for s in AssignmentStatus)
        raise ValidationError(f"Unknown status '{value}'. Allowed: {allowed}", field="status")


def check_patch_fields(patch: dict[str, Any]) -> None:
    unknown = sorted(set(patch) - PATCHABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}", field=unknown[0])


def check_page(page: int, page_size: int) -> None:
    if page < 1:
        raise ValidationError("page must be >= 1", field="page")
    if page_size < 1:
        raise ValidationError("page_size must be >= 1", field="page_size")


def _sqlstate(exc: Exception) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_integrity_error(exc: IntegrityError) -> Exception:
    code = _sqlstate(exc)
    msg = str(exc.orig)

    if code == _PG_EXCLUSION_VIOLATION or NO_OVERLAP_CONSTRAINT in msg:
        return ConflictError("Consultant already assigned to a project during this time period")
    if code == _PG_FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in msg:
        return ReferentialError("Consultant or project not found")
    if code == _PG_CHECK_VIOLATION or "CHECK constraint failed" in msg:
        return ValidationError(f"Assignment violates a table constraint: {msg}")
    return exc


class SqlAssignmentStore:
    """AssignmentStore over a SQLAlchemy session (one session per request)."""

    def __init__(self, db: Session, cfg: Settings | None = None):
        self.db = db
        self.cfg = cfg or default_settings

    # ------------------------------------------------------------------
    # atomic unit
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            with self.db.begin():
                self._apply_timeouts()
                yield
        except IntegrityError as e:
            translated = translate_integrity_error(e)
            if translated is e:
                raise
            raise translated from e
        except OperationalError as e:
            # lock timeout, busy database, serialization failure, deadlock
            logger.warning("assignment store transient failure: %s", e.orig)
            raise TransientStoreError(f"Assignment store unavailable: {e.orig}") from e

    def _apply_timeouts(self) -> None:
        if self.db.get_bind().dialect.name != "postgresql":
            # sqlite: busy timeout is set per connection (staffing.core.db)
            return
        self.db.execute(
            text("SELECT set_config('lock_timeout', :v, true)"),
            {"v": f"{self.cfg.db_lock_timeout_ms}ms"},
        )
        self.db.execute(
            text("SELECT set_config('statement_timeout', :v, true)"),
            {"v": f"{self.cfg.db_statement_timeout_ms}ms"},
        )

    def lock_consultant(self, consultant_id: UUID) -> None:
        # Row write on the consultant: row lock on PostgreSQL, database write lock on
        # SQLite. Either way it is held until the surrounding transaction ends.
        res = self.db.execute(
            update(Consultant)
            .where(Consultant.id == consultant_id)
            .values(schedule_version=Consultant.schedule_version + 1)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 0:
            raise ReferentialError(f"Consultant with ID {consultant_id} not found")

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def find_overlapping(
        self,
        consultant_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: UUID | None = None,
    ) -> list[Assignment]:
        if not self.db.in_transaction():
            raise RuntimeError("find_overlapping must run inside store.transaction()")

        stmt = select(Assignment).where(
            Assignment.consultant_id == consultant_id,
            Assignment.status.not_in(sorted(TERMINAL_STATUSES)),
            Assignment.start_time < end,
            Assignment.end_time > start,
        )
        if exclude_id is not None:
            stmt = stmt.where(Assignment.id != exclude_id)

        stmt = stmt.order_by(Assignment.start_time.asc()).execution_options(populate_existing=True)
        return list(self.db.execute(stmt).scalars())

    def get(self, assignment_id: UUID, *, refresh: bool = False) -> Assignment:
        row = self.db.get(Assignment, assignment_id, populate_existing=refresh)
        if row is None:
            raise NotFoundError(f"Assignment with ID {assignment_id} not found")
        return row

    def list(
        self,
        *,
        consultant_id: UUID | None = None,
        project_id: UUID | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> AssignmentPage:
        check_page(page, page_size)

        stmt = select(Assignment)
        count_stmt = select(func.count()).select_from(Assignment)

        if consultant_id is not None:
            stmt = stmt.where(Assignment.consultant_id == consultant_id)
            count_stmt = count_stmt.where(Assignment.consultant_id == consultant_id)
        if project_id is not None:
            stmt = stmt.where(Assignment.project_id == project_id)
            count_stmt = count_stmt.where(Assignment.project_id == project_id)

        total = self.db.execute(count_stmt).scalar_one()
        rows = (
            self.db.execute(
                stmt.options(joinedload(Assignment.consultant), joinedload(Assignment.project))
                .order_by(Assignment.start_time.desc(), Assignment.id.asc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            .scalars()
            .all()
        )
        return AssignmentPage(items=list(rows), total=total)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def insert(
        self,
        *,
        consultant_id: UUID,
        project_id: UUID,
        start_time: datetime,
        end_time: datetime,
        status: str = AssignmentStatus.scheduled.value,
        notes: str | None = None,
    ) -> Assignment:
        now = utcnow()
        row = Assignment(
            consultant_id=consultant_id,
            project_id=project_id,
            start_time=start_time,
            end_time=end_time,
            hours=window_hours(start_time, end_time),
            status=normalize_status(status),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        # flush now so FK / constraint failures surface inside the caller's unit
        self.db.flush()
        return row

    def update(self, assignment_id: UUID, patch: dict[str, Any]) -> Assignment:
        check_patch_fields(patch)
        row = self.get(assignment_id)

        for field, value in patch.items():
            if field == "status":
                value = normalize_status(value)
            setattr(row, field, value)

        if "start_time" in patch or "end_time" in patch:
            row.hours = window_hours(row.start_time, row.end_time)

        row.updated_at = utcnow()
        self.db.flush()
        return row

    def remove(self, assignment_id: UUID) -> None:
        row = self.get(assignment_id)
        self.db.delete(row)
        self.db.flush()
