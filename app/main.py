import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import bookings, procedures
from app.core.catalog import load_catalog
from app.core.config import Settings, _ENV_FILE, settings as default_settings
from app.core.errors import ErrorCode
from app.models.booking import BookingResult
from app.services.booking_service import BookingEngine
from app.services.calendar_service import (
    CalendarService,
    GoogleCalendarService,
    InMemoryCalendarService,
)

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


def build_calendar(settings: Settings) -> CalendarService:
    if settings.calendar_backend == "google":
        if settings.google_configured:
            return GoogleCalendarService(settings)
        logger.warning(
            "CALENDAR_BACKEND=google but Google OAuth is NOT configured. Set GOOGLE_CLIENT_ID, "
            "GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN in %s. Using in-memory calendar.",
            _ENV_FILE,
        )
    elif settings.calendar_backend != "memory":
        logger.warning("Unknown CALENDAR_BACKEND %r, using in-memory calendar", settings.calendar_backend)
    return InMemoryCalendarService()


def build_engine(settings: Settings, calendar: CalendarService | None = None) -> BookingEngine:
    return BookingEngine(
        catalog=load_catalog(settings.catalog_file),
        calendar=calendar if calendar is not None else build_calendar(settings),
        buffer_minutes=settings.buffer_minutes,
    )


def _cors_headers(settings: Settings, origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


def create_app(settings: Settings | None = None, engine: BookingEngine | None = None) -> FastAPI:
    settings = settings or default_settings
    booking_engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
        logger.info(
            "Booking engine ready: calendar=%s buffer=%d min procedures=%d",
            type(booking_engine.calendar).__name__,
            booking_engine.buffer_minutes,
            len(booking_engine.catalog.procedures()),
        )
        yield
        aclose = getattr(booking_engine.calendar, "aclose", None)
        if aclose is not None:
            await aclose()

    app = FastAPI(
        title="Booking API",
        description="Slot booking with per-professional conflict checks against Google Calendar",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.booking_engine = booking_engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(procedures.router, prefix="/api/v1")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Unparseable bodies get the same envelope as any other invalid request."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=BookingResult.error(ErrorCode.INVALID_INPUT).to_response(),
            headers=_cors_headers(settings, request.headers.get("origin")),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Return actual error in JSON; include CORS so 500 responses are not blocked by browser."""
        headers = _cors_headers(settings, request.headers.get("origin"))
        if isinstance(exc, HTTPException):
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail},
                headers=headers,
            )
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": f"{type(exc).__name__}: {str(exc)}"},
            headers=headers,
        )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
