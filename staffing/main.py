# staffing/main.py
from fastapi import FastAPI

from staffing.api.assignments import router as assignments_router
from staffing.api.consultants import router as consultants_router
from staffing.api.errors import install_error_handlers
from staffing.api.health import router as health_router
from staffing.api.projects import router as projects_router
from staffing.core.config import settings
from staffing.core.logging import configure_logging

configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    description=settings.api_description,
    debug=settings.debug,
)

install_error_handlers(app)

app.include_router(health_router, tags=["health"])
app.include_router(consultants_router)
app.include_router(projects_router)
app.include_router(assignments_router)
