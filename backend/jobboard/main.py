from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard.api.api import api_router
from jobboard.core.config import Settings, settings as default_settings
from jobboard.core.errors import InvalidInput, JobBoardError
from jobboard.core.logger import configure_logging, get_logger
from jobboard.db.store import RecordStore
from jobboard.services import EmailSender, Services, VerificationProvider, build_services
from jobboard.services.analytics import utc_now

logger = get_logger("server")


def bootstrap_admin(services: Services) -> None:
    """Run ensure_admin when bootstrap credentials are configured."""
    cfg = services.settings
    if cfg.ADMIN_EMAIL and cfg.ADMIN_PASSWORD:
        services.credentials.ensure_admin(cfg.ADMIN_EMAIL, cfg.ADMIN_PASSWORD)
    else:
        logger.warning("ADMIN_EMAIL / ADMIN_PASSWORD not set - no bootstrap admin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the bootstrap admin on startup."""
    bootstrap_admin(app.state.services)
    yield


def _describe_errors(exc: RequestValidationError) -> str:
    missing, invalid = [], []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(location) or "body"
        if error.get("type") in ("missing", "string_too_short") or error.get("msg", "").endswith("required"):
            missing.append(field)
        else:
            invalid.append(field)

    parts = []
    if missing:
        parts.append(f"{', '.join(missing)} required")
    if invalid:
        parts.append(f"invalid {', '.join(invalid)}")
    return "; ".join(parts) or "invalid request body"


async def jobboard_error_handler(request: Request, exc: JobBoardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidInput(_describe_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    error = JobBoardError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[RecordStore] = None,
    sms_provider: Optional[VerificationProvider] = None,
    email_sender: Optional[EmailSender] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Build the application with its own Services container."""
    settings = settings or default_settings
    configure_logging(settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Job board accounts, sessions and usage analytics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = build_services(
        settings,
        store=store,
        sms_provider=sms_provider,
        email_sender=email_sender,
        clock=clock,
    )

    # CORS Middleware - allowlist from env (comma-separated)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"^http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    app.add_exception_handler(JobBoardError, jobboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"{settings.APP_NAME} API server running",
            "endpoints": ["/api/auth/login", "/api/auth/register", "/api/auth/me", "/api/auth/logout"],
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
