"""
Main FastAPI application for the Lavajato booking API.
Customers book washes, staff manage units, services and appointment status.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from lavajato.config import settings
from lavajato.errors import LavajatoError
from lavajato.logging_config import configure_logging
from lavajato.routes import appointments, auth, catalog, health, reports, users
from lavajato.services.booking_service import BookingService
from lavajato.services.database import close_db, get_session_maker, init_db
from lavajato.services.notification_service import build_notifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""
    # Startup
    configure_logging(settings.LOG_LEVEL)
    await init_db()

    notifier = build_notifier(settings, get_session_maker())
    app.state.booking_service = BookingService(notifier=notifier)
    logger.info(f"Lavajato API started ({settings.APP_ENV})")

    yield
    # Shutdown
    await app.state.booking_service.wait_for_notifications(
        timeout=settings.NOTIFICATION_TIMEOUT_SECONDS
    )
    await close_db()


app = FastAPI(
    title="Lavajato Booking API",
    description="Car-wash booking: vehicles, units, services, appointments and loyalty",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LavajatoError)
async def lavajato_error_handler(request: Request, exc: LavajatoError):
    """Translate domain errors into JSON responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.users_router, prefix="/api/v1/users", tags=["users"])
app.include_router(users.cars_router, prefix="/api/v1/cars", tags=["cars"])
app.include_router(catalog.units_router, prefix="/api/v1/units", tags=["units"])
app.include_router(catalog.services_router, prefix="/api/v1/services", tags=["services"])
app.include_router(appointments.router, prefix="/api/v1/appointments", tags=["appointments"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Lavajato Booking API",
        "version": "1.0.0",
        "status": "running",
    }
