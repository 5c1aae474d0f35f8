from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from staffing.core.config import Settings, settings
from staffing.core.db import SessionLocal
from staffing.core.logging import configure_logging
from staffing.models.consultant import Consultant
from staffing.models.project import Project
from staffing.services.assignment_service import AssignmentService
from staffing.services.directory_service import ConsultantService, ProjectService
from staffing.services.errors import SchedulingError

CONSULTANTS: list[dict[str, Any]] = [
    {"name": "John Smith", "email": "john.smith@tynpu.com", "skills": ["React", "TypeScript", "Node.js"], "hourly_rate": 75, "availability": "available"},
    {"name": "Sarah Johnson", "email": "sarah.johnson@tynpu.com", "skills": ["Python", "Django", "PostgreSQL"], "hourly_rate": 80, "availability": "available"},
    {"name": "Mike Chen", "email": "mike.chen@tynpu.com", "skills": ["Java", "Spring Boot", "AWS"], "hourly_rate": 85, "availability": "busy"},
    {"name": "Emily Davis", "email": "emily.davis@tynpu.com", "skills": ["Vue.js", "JavaScript", "MongoDB"], "hourly_rate": 70, "availability": "available"},
    {"name": "David Wilson", "email": "david.wilson@tynpu.com", "skills": ["C#", ".NET", "Azure"], "hourly_rate": 90, "availability": "unavailable"},
]

PROJECTS: list[dict[str, Any]] = [
    {"name": "E-commerce Platform", "client": "TechCorp Inc.", "description": "Building a modern e-commerce platform with React and Node.js", "start_date": date(2024, 3, 1), "end_date": date(2024, 6, 30), "status": "active", "budget": 150000},
    {"name": "Mobile Banking App", "client": "FinanceFirst", "description": "Native mobile banking application for iOS and Android", "start_date": date(2024, 4, 15), "end_date": date(2024, 8, 15), "status": "planning", "budget": 200000},
    {"name": "Data Analytics Dashboard", "client": "DataInsights", "description": "Real-time analytics dashboard with Python and React", "start_date": date(2024, 2, 1), "end_date": date(2024, 5, 31), "status": "completed", "budget": 100000},
    {"name": "Healthcare Management System", "client": "MediCare Plus", "description": "Comprehensive healthcare management system", "start_date": date(2024, 5, 1), "end_date": date(2024, 10, 31), "status": "active", "budget": 300000},
    {"name": "IoT Monitoring Platform", "client": "SmartTech Solutions", "description": "IoT device monitoring and management platform", "start_date": date(2024, 6, 1), "end_date": date(2024, 9, 30), "status": "planning", "budget": 180000},
]

# (consultant index, project index, hours from now to start, length in hours, notes)
ASSIGNMENTS = [
    (0, 0, 24, 2, "Kickoff meeting and initial setup"),
    (1, 1, 48, 2, "Architecture review session"),
]


def _consultant(db: Session, data: dict[str, Any]) -> Consultant:
    existing = db.execute(select(Consultant).where(Consultant.email == data["email"])).scalar_one_or_none()
    if existing is not None:
        print(f"[SKIP] Consultant {data['name']} already exists")
        return existing
    consultant = ConsultantService(db).create(data)
    print(f"[OK] Created consultant: {consultant.name}")
    return consultant


def _project(db: Session, data: dict[str, Any]) -> Project:
    existing = db.execute(
        select(Project).where(Project.name == data["name"], Project.client == data["client"])
    ).scalar_one_or_none()
    if existing is not None:
        print(f"[SKIP] Project {data['name']} already exists")
        return existing
    project = ProjectService(db).create(data)
    print(f"[OK] Created project: {project.name}")
    return project


def seed(db: Session, *, cfg: Settings | None = None, now: datetime | None = None) -> dict[str, int]:
    """
    Loads demo consultants, projects and two non-overlapping assignments.
    Safe to re-run: existing consultants and projects are kept, and an
    assignment whose slot is already booked is skipped.
    """
    now = now or datetime.now(timezone.utc)
    counts = {"consultants": 0, "projects": 0, "assignments": 0}

    consultants = [_consultant(db, data) for data in CONSULTANTS]
    projects = [_project(db, data) for data in PROJECTS]
    # scheduling opens its own transaction on this session
    db.commit()

    counts["consultants"] = len(consultants)
    counts["projects"] = len(projects)

    svc = AssignmentService(db, cfg)
    for ci, pi, offset, length, notes in ASSIGNMENTS:
        consultant, project = consultants[ci], projects[pi]
        start = now + timedelta(hours=offset)
        try:
            svc.create_assignment(
                consultant_id=consultant.id,
                project_id=project.id,
                start_time=start,
                end_time=start + timedelta(hours=length),
                notes=notes,
            )
        except SchedulingError as e:
            print(f"[SKIP] Assignment for {consultant.name} on {project.name}: {e.message}")
            continue
        counts["assignments"] += 1
        print(f"[OK] Created assignment for {consultant.name} on {project.name}")

    return counts


def main() -> None:
    configure_logging(settings)
    print("Seeding data...")
    db = SessionLocal()
    try:
        seed(db)
    except Exception as e:
        print(f"[ERROR] Seeding failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
    print("Seeding completed!")


if __name__ == "__main__":
    main()
