from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timegrid.api.routes import (
    activity,
    auth,
    health,
    periods,
    placement,
    schedules,
    students,
    subjects,
    teachers,
    year_groups,
)
from timegrid.core.config import get_settings
from timegrid.core.exceptions import AppError
from timegrid.core.logging_config import setup_logging
from timegrid.core.middleware import RequestIdMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from timegrid.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
logger = logging.getLogger(__name__)

# (router, path below the API prefix, OpenAPI tag)
ROUTERS = (
    (health.router, "", "health"),
    (auth.router, "/auth", "auth"),
    (periods.router, "", "periods"),
    (teachers.router, "/teachers", "teachers"),
    (subjects.router, "/subjects", "subjects"),
    (year_groups.router, "/year-groups", "year-groups"),
    (students.router, "/students", "students"),
    (schedules.router, "/schedules", "schedules"),
    (placement.router, "", "placement"),
    (activity.router, "", "activity"),
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(level=settings.log_level)
    ensure_runtime_schema_compatibility()
    logger.info("%s ready, API under %s", settings.project_name, settings.api_prefix)
    yield


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "details": exc.details})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, handle_app_error)

# Added last runs first: CORS, request id, security headers, size limit.
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

for router, path, tag in ROUTERS:
    app.include_router(router, prefix=f"{settings.api_prefix}{path}", tags=[tag])
