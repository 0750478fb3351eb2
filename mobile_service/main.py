# mobile_service/main.py
"""
FastAPI application entry point.
Includes domain error handlers, request timing, CORS, all routers, and the
reminder job lifecycle.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from mobile_service.routers import (
    appointments, auth, availability, customers, health, technician_portal, technicians,
)
from mobile_service.database import SessionLocal, create_tables
from mobile_service.config import settings
from mobile_service.exceptions import SchedulerError
from mobile_service.services.job_counter import get_job_counter
from mobile_service.services.reminder_job import ReminderJob
from mobile_service.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Mobile Service Scheduler API",
    description="Booking, technician availability and job tracking for a mobile oil-change business.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

reminder_job = ReminderJob()

# ── CORS (booking site and staff portal) ────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(SchedulerError)
async def scheduler_error_handler(request: Request, exc: SchedulerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} → {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": jsonable_encoder(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed input is a plain 400 for the booking and staff clients
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(availability.router,      prefix="/api", tags=["Availability"])
app.include_router(appointments.router,      prefix="/api", tags=["Appointments"])
app.include_router(auth.router,              prefix="/api", tags=["Auth"])
app.include_router(technician_portal.router, prefix="/api", tags=["Technician Portal"])
app.include_router(technicians.router,       prefix="/api", tags=["Technicians"])
app.include_router(customers.router,         prefix="/api", tags=["Customers"])
app.include_router(health.router,            prefix="/api", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Mobile Service Scheduler starting up...")
    create_tables()
    logger.info("Database tables ready")

    counter = get_job_counter()
    if hasattr(counter, "ensure_row"):
        db = SessionLocal()
        try:
            counter.ensure_row(db)
        finally:
            db.close()

    if settings.REMINDERS_ENABLED:
        reminder_job.start()
    else:
        logger.info("[REMINDER] Disabled by REMINDERS_ENABLED=false")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Mobile Service Scheduler shutting down...")
    await reminder_job.stop()
