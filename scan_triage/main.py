"""
Scan Triage Dashboard API

Serves the imaging worklist for a single-site triage dashboard.

This API provides:
- Scan records enriched with a rule-based AI priority
- A worklist ordered by priority level, score and scan date
- Status updates for scans under review
- Dashboard counters for the header and charts
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scan_triage.config.config import Settings, get_settings
from scan_triage.config.logging_config import (
    bind_scan_context,
    configure_logging,
    get_logger,
    log_request_context,
)
from scan_triage.database.scan_repository import InMemoryScanRepository, ScanRepository
from scan_triage.exceptions import InvalidInputError, ScanNotFoundError
from scan_triage.models.models import (
    DashboardStats,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    Scan,
    ScanStatus,
    StatusUpdateRequest,
)
from scan_triage.services.dashboard_stats import compute_stats, filter_scans
from scan_triage.services.data_loader import load_scans
from scan_triage.services.enrichment import enrich_scans
from scan_triage.services.rule_store import RuleStore, load_rule_store
from scan_triage.services.worklist_sorter import sort_worklist

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events with proper logging.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        config=settings.get_safe_config_dict(),
        rule_count=len(app.state.rule_store),
        scan_count=len(app.state.repository.get_all()),
    )

    yield

    # Shutdown
    logger.info("Application shutting down")


def load_worklist(settings: Settings) -> tuple[RuleStore, InMemoryScanRepository]:
    """
    Load seed data and build the enriched repository.

    Rules and AI analysis are loaded first, scans are enriched once, and the
    result is handed to the repository.
    """
    rule_store = load_rule_store(settings.priority_rules_path, settings.ai_analysis_path)
    scans = enrich_scans(load_scans(settings.scans_path), rule_store)
    return rule_store, InMemoryScanRepository(scans)


def get_scan_repository(request: Request) -> ScanRepository:
    """Resolve the process-wide scan repository."""
    return request.app.state.repository


def get_rule_store(request: Request) -> RuleStore:
    return request.app.state.rule_store


def _error_response(request: Request, status_code: int, error: str, code: str, details: dict | None = None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            code=code,
            details=details,
            request_id=getattr(request.state, "request_id", None),
        ).model_dump(mode="json"),
    )


def create_app(
    settings: Settings | None = None,
    repository: ScanRepository | None = None,
    rule_store: RuleStore | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.
        repository: Optional pre-built repository; seed files are loaded when omitted.
        rule_store: Rule store matching ``repository``; only reported by /health.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    if repository is None:
        rule_store, repository = load_worklist(settings)

    app = FastAPI(
        title=settings.app_name,
        description=__doc__,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.repository = repository
    app.state.rule_store = rule_store or RuleStore()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and context."""
        request_id = str(uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        # Bind request context for all logs in this request
        log_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        processing_time = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(processing_time)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            processing_time_ms=processing_time,
        )

        return response

    # Exception handlers
    @app.exception_handler(ScanNotFoundError)
    async def scan_not_found_handler(request: Request, exc: ScanNotFoundError):
        logger.info("Scan not found", scan_id=exc.scan_id)
        return _error_response(request, 404, "Scan not found", "SCAN_NOT_FOUND")

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.info("Invalid input", field=exc.field, error=exc.message)
        return _error_response(request, 400, exc.message, "INVALID_INPUT")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and query parameters are client errors."""
        return _error_response(
            request,
            400,
            "Invalid request",
            "VALIDATION_ERROR",
            details={"errors": [str(error.get("msg")) for error in exc.errors()]},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with structured response."""
        return _error_response(request, exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", error=str(exc))
        return _error_response(request, 500, "An unexpected error occurred", "INTERNAL_ERROR")

    # Register routes
    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all API routes."""

    @app.get("/", tags=["Root"])
    async def root(request: Request):
        """Root endpoint with API information."""
        settings: Settings = request.app.state.settings
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": "/docs" if settings.debug else "disabled",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(
        request: Request,
        repository: ScanRepository = Depends(get_scan_repository),
        rule_store: RuleStore = Depends(get_rule_store),
    ) -> HealthResponse:
        """
        Health check endpoint for monitoring.

        Empty seed stores degrade the service but do not take it down: the
        scorer falls back to routine priority for every scan.
        """
        settings: Settings = request.app.state.settings
        checks = {
            "api": True,
            "priority_rules_loaded": len(rule_store) > 0,
            "ai_analysis_loaded": rule_store.analysis_count > 0,
            "scans_loaded": len(repository.get_all()) > 0,
        }

        if all(checks.values()):
            status = HealthStatus.HEALTHY
        elif checks["api"]:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return HealthResponse(
            status=status,
            version=settings.app_version,
            environment=settings.environment,
            checks=checks,
        )

    @app.get("/api/scans", response_model=list[Scan], tags=["Scans"])
    async def list_scans(
        status: str | None = None,
        search: str | None = None,
        repository: ScanRepository = Depends(get_scan_repository),
    ) -> list[Scan]:
        """
        Get the worklist, most pressing scans first.

        Args:
            status: Only scans in this review status ("all" disables the filter).
            search: Case-insensitive match on scan id, patient id/name or body part.
        """
        status_filter = None
        if status and status.lower() != "all":
            status_filter = ScanStatus.from_label(status)
            if status_filter is None:
                raise InvalidInputError(f"Invalid status: {status}", field="status")

        worklist = sort_worklist(repository.get_all())
        return filter_scans(worklist, status=status_filter, search=search)

    @app.get("/api/scans/{scan_id}", response_model=Scan, tags=["Scans"])
    async def get_scan(
        scan_id: str,
        repository: ScanRepository = Depends(get_scan_repository),
    ) -> Scan:
        """Get a single scan by id."""
        bind_scan_context(scan_id)
        return repository.get_by_id(scan_id)

    @app.patch("/api/scans/{scan_id}", response_model=Scan, tags=["Scans"])
    async def update_scan_status(
        scan_id: str,
        payload: StatusUpdateRequest | None = Body(default=None),
        repository: ScanRepository = Depends(get_scan_repository),
    ) -> Scan:
        """
        Update the review status of a scan.

        Returns 404 for an unknown scan and 400 when the status is missing.
        """
        new_status = payload.status if payload is not None else None
        bind_scan_context(scan_id)
        return repository.update_status(scan_id, new_status)

    @app.get("/api/stats", response_model=DashboardStats, tags=["Dashboard"])
    async def get_stats(
        repository: ScanRepository = Depends(get_scan_repository),
    ) -> DashboardStats:
        """Header counters and chart series for the dashboard."""
        return compute_stats(repository.get_all())


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "scan_triage.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    main()
