"""
FastAPI application entry point.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from liftlog.api.v1 import (
    achievements,
    challenges,
    exercises,
    leaderboards,
    metrics,
    sessions,
    sets,
)
from liftlog.domain.errors import (
    ConflictError,
    EngineError,
    ForbiddenError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from liftlog.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

app = FastAPI(
    title="Liftlog Workout API",
    description="Workout sessions, personal records, achievements and challenges",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


def custom_openapi():
    """Custom OpenAPI schema with security schemes."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "Bearer": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT issued by the identity service.",
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    """Map engine errors to HTTP responses."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    log = logger.error if status_code >= 500 else logger.info
    log(f"[API] {request.method} {request.url.path} -> {status_code} {exc.error_code}: {exc.detail}")

    content = {"detail": exc.detail, "error_code": exc.error_code}
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=status_code, content=content)


app.include_router(exercises.router, prefix="/api/v1", tags=["exercises"])
app.include_router(sessions.router, prefix="/api/v1", tags=["sessions"])
app.include_router(sets.router, prefix="/api/v1", tags=["sets"])
app.include_router(achievements.router, prefix="/api/v1", tags=["achievements"])
app.include_router(achievements.admin_router, prefix="/api/v1/admin", tags=["admin"])
app.include_router(challenges.router, prefix="/api/v1", tags=["challenges"])
app.include_router(leaderboards.router, prefix="/api/v1", tags=["leaderboards"])
app.include_router(metrics.router, prefix="/api/v1", tags=["metrics"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Liftlog Workout API"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}
