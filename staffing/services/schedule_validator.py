# staffing/services/schedule_validator.py
"""Double-booking guard.

Every create and every update that can put time on a consultant's calendar
goes through ScheduleValidator. The overlap read and the write happen inside
one store.transaction(), after the consultant's scheduling lock is taken, so
two racing requests for the same consultant cannot both observe "no conflict".

Windows are half-open [start, end): back-to-back bookings are allowed, an
identical window is a conflict, zero-length windows never reach the search.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from staffing.models.assignment import Assignment, AssignmentStatus, TERMINAL_STATUSES
from staffing.services.assignment_store import AssignmentStore, check_patch_fields, normalize_status
from staffing.services.errors import ConflictError, TransientStoreError, ValidationError

logger = logging.getLogger(__name__)

# Presence of any of these in a patch re-runs the overlap check, even when the
# value equals the stored one.
SCHEDULE_FIELDS = frozenset({"consultant_id", "start_time", "end_time"})


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def validate_window(start: datetime, end: datetime) -> None:
    if start >= end:
        raise ValidationError("end before start", field="end_time")


def _conflict(blocking: Assignment) -> ConflictError:
    return ConflictError(
        "Consultant already assigned to a project during this time period "
        f"(blocking assignment {blocking.id}: "
        f"{blocking.start_time.isoformat()} - {blocking.end_time.isoformat()})",
        conflicting_id=blocking.id,
    )


class ScheduleValidator:
    def __init__(self, store: AssignmentStore):
        self.store = store

    def _ensure_free(
        self,
        consultant_id: UUID,
        start: datetime,
        end: datetime,
        *,
        exclude_id: UUID | None = None,
    ) -> None:
        overlapping = self.store.find_overlapping(consultant_id, start, end, exclude_id=exclude_id)
        if overlapping:
            blocking = overlapping[0]
            logger.info(
                "schedule conflict: consultant=%s window=[%s, %s) blocked_by=%s",
                consultant_id, start.isoformat(), end.isoformat(), blocking.id,
            )
            raise _conflict(blocking)

    def propose_create(
        self,
        *,
        consultant_id: UUID,
        project_id: UUID,
        start: datetime,
        end: datetime,
        notes: str | None = None,
    ) -> Assignment:
        start, end = as_utc(start), as_utc(end)

        # 1) window sanity, before touching the store
        validate_window(start, end)

        with self.store.transaction():
            # 2) serialize against other writers for this consultant, then check
            self.store.lock_consultant(consultant_id)
            self._ensure_free(consultant_id, start, end)

            # 3) write in the same unit
            row = self.store.insert(
                consultant_id=consultant_id,
                project_id=project_id,
                start_time=start,
                end_time=end,
                status=AssignmentStatus.scheduled.value,
                notes=notes,
            )

        logger.info(
            "assignment created: id=%s consultant=%s window=[%s, %s)",
            row.id, consultant_id, start.isoformat(), end.isoformat(),
        )
        return row

    def propose_update(self, assignment_id: UUID, patch: dict[str, Any]) -> Assignment:
        patch = dict(patch)
        check_patch_fields(patch)

        for key in ("start_time", "end_time"):
            if key in patch:
                if patch[key] is None:
                    raise ValidationError(f"{key} cannot be null", field=key)
                patch[key] = as_utc(patch[key])
        if "consultant_id" in patch and patch["consultant_id"] is None:
            raise ValidationError("consultant_id cannot be null", field="consultant_id")
        if "project_id" in patch and patch["project_id"] is None:
            raise ValidationError("project_id cannot be null", field="project_id")
        if "status" in patch:
            patch["status"] = normalize_status(patch["status"])

        with self.store.transaction():
            # 1) current record
            current = self.store.get(assignment_id)

            if self._may_occupy_time(patch):
                # 2) lock every consultant the record moves between, then re-read:
                #    status and owner seen before the lock may already be stale
                locked = self._lock_consultants(current, patch)
                current = self.store.get(assignment_id, refresh=True)
                if current.consultant_id not in locked:
                    raise TransientStoreError(
                        f"Assignment {assignment_id} changed consultant concurrently"
                    )

                if self._needs_check(current, patch):
                    # 3) effective values: patch if present, else stored
                    consultant_id = patch.get("consultant_id", current.consultant_id)
                    start = patch.get("start_time", current.start_time)
                    end = patch.get("end_time", current.end_time)

                    validate_window(start, end)

                    status = patch.get("status", current.status)
                    if status not in TERMINAL_STATUSES:
                        # overlap check without the record itself
                        self._ensure_free(consultant_id, start, end, exclude_id=assignment_id)

            # 4) apply in the same unit
            row = self.store.update(assignment_id, patch)

        logger.info("assignment updated: id=%s fields=%s", assignment_id, sorted(patch))
        return row

    def _lock_consultants(self, current: Assignment, patch: dict[str, Any]) -> set[UUID]:
        # sorted so two moves in opposite directions take the locks in the same order
        ids = {current.consultant_id, patch.get("consultant_id", current.consultant_id)}
        for consultant_id in sorted(ids):
            self.store.lock_consultant(consultant_id)
        return ids

    @staticmethod
    def _may_occupy_time(patch: dict[str, Any]) -> bool:
        if SCHEDULE_FIELDS & patch.keys():
            return True
        status = patch.get("status")
        return status is not None and status not in TERMINAL_STATUSES

    @staticmethod
    def _needs_check(current: Assignment, patch: dict[str, Any]) -> bool:
        if SCHEDULE_FIELDS & patch.keys():
            return True

        # terminal -> non-terminal puts the window back on the consultant's calendar
        new_status = patch.get("status")
        return (
            new_status is not None
            and new_status not in TERMINAL_STATUSES
            and current.status in TERMINAL_STATUSES
        )
