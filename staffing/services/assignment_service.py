# staffing/services/assignment_service.py
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from staffing.core.config import Settings, settings as default_settings
from staffing.models.assignment import Assignment
from staffing.services.assignment_store import AssignmentPage, AssignmentStore, SqlAssignmentStore
from staffing.services.retry import run_with_retry
from staffing.services.schedule_validator import ScheduleValidator


class AssignmentService:
    """Inbound boundary for assignments: conflict-checked writes plus plain reads.

    Transient store failures are retried here with the configured backoff;
    everything else goes straight back to the caller.
    """

    def __init__(self, db: Session, cfg: Settings | None = None, store: AssignmentStore | None = None):
        self.cfg = cfg or default_settings
        self.store = store or SqlAssignmentStore(db, self.cfg)
        self.validator = ScheduleValidator(self.store)

    def _retry(self, fn):
        return run_with_retry(fn, delays=self.cfg.schedule_retry_delays)

    def create_assignment(
        self,
        *,
        consultant_id: UUID,
        project_id: UUID,
        start_time: datetime,
        end_time: datetime,
        notes: str | None = None,
    ) -> Assignment:
        return self._retry(
            lambda: self.validator.propose_create(
                consultant_id=consultant_id,
                project_id=project_id,
                start=start_time,
                end=end_time,
                notes=notes,
            )
        )

    def update_assignment(self, assignment_id: UUID, fields: dict[str, Any]) -> Assignment:
        return self._retry(lambda: self.validator.propose_update(assignment_id, fields))

    def delete_assignment(self, assignment_id: UUID) -> None:
        # removal only frees time, no overlap check
        def _remove() -> None:
            with self.store.transaction():
                self.store.remove(assignment_id)

        self._retry(_remove)

    def get_assignment(self, assignment_id: UUID) -> Assignment:
        with self.store.transaction():
            return self.store.get(assignment_id)

    def list_assignments(
        self,
        *,
        consultant_id: UUID | None = None,
        project_id: UUID | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> AssignmentPage:
        page_size = min(page_size or self.cfg.default_page_size, self.cfg.max_page_size)
        with self.store.transaction():
            return self.store.list(
                consultant_id=consultant_id,
                project_id=project_id,
                page=page,
                page_size=page_size,
            )
