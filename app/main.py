"""FastAPI entrypoint wiring services together."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.database import Database
from app.dependencies import applicant_service
from app.schemas import (
    ApplicantListResponse,
    ApplicantSubmission,
    ContactResponse,
    ErrorResponse,
    HealthResponse,
    StatsResponse,
    StatusUpdate,
    StatusUpdateResponse,
    SubmissionResponse,
)
from services import ApplicantService
from services.errors import ApplicantError, ValidationError
from services.query import parse_filter, parse_page

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, details: list[dict[str, str]] | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApplicantError)
    async def _applicant_error(request: Request, exc: ApplicantError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            return _error(exc.status_code, exc.message, [error.as_dict() for error in exc.errors])
        if exc.status_code >= 500:
            logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": ".".join(str(part) for part in error.get("loc", ())[1:]), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        return _error(400, "Invalid request body", details)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error(404, "API endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)
    database = Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s v%s (%s)", settings.app_name, settings.version, settings.environment)
        await database.init_models()
        yield
        await database.dispose()
        logger.info("Shutting down %s", settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="OK",
            message=f"{settings.app_name} is running",
            timestamp=datetime.now(timezone.utc),
        )

    @app.post("/api/applicants", response_model=SubmissionResponse, status_code=201)
    async def submit_application(
        payload: ApplicantSubmission,
        service: ApplicantService = Depends(applicant_service),
    ) -> SubmissionResponse:
        anonymous_id = await service.submit(payload.model_dump())
        return SubmissionResponse(anonymous_id=anonymous_id, message="Application submitted successfully")

    @app.get("/api/applicants", response_model=ApplicantListResponse)
    async def list_applicants(
        position: str | None = None,
        min_experience: str | None = Query(default=None, alias="minExperience"),
        max_experience: str | None = Query(default=None, alias="maxExperience"),
        skills: str | None = None,
        page: str | None = None,
        limit: str | None = None,
        service: ApplicantService = Depends(applicant_service),
    ) -> ApplicantListResponse:
        applicant_filter = parse_filter(
            position=position,
            min_experience=min_experience,
            max_experience=max_experience,
            skills=skills,
        )
        page_request = parse_page(
            page,
            limit,
            default_limit=settings.default_page_size,
            max_limit=settings.max_page_size,
        )
        items, pagination = await service.list_applicants(applicant_filter, page_request)
        return ApplicantListResponse(data=items, pagination=pagination)

    @app.get("/api/applicants/{anonymous_id}", response_model=ContactResponse)
    async def reveal_contact(
        anonymous_id: str,
        service: ApplicantService = Depends(applicant_service),
    ) -> ContactResponse:
        return ContactResponse(data=await service.reveal_contact(anonymous_id))

    @app.patch("/api/applicants/{anonymous_id}/status", response_model=StatusUpdateResponse)
    async def update_status(
        anonymous_id: str,
        payload: StatusUpdate,
        service: ApplicantService = Depends(applicant_service),
    ) -> StatusUpdateResponse:
        view = await service.update_status(anonymous_id, payload.status)
        return StatusUpdateResponse(data=view, message="Status updated successfully")

    @app.get("/api/stats", response_model=StatsResponse)
    async def stats(service: ApplicantService = Depends(applicant_service)) -> StatsResponse:
        return StatsResponse(data=await service.stats())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    current = get_settings()
    uvicorn.run("app.main:app", host=current.host, port=current.port)
