# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

# Settings and monitoring
from settings import get_settings
settings = get_settings()

# Initialize Sentry error monitoring (if configured)
if settings.SENTRY_DSN:
    import sentry_sdk
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.1,  # 10% sampling for performance (free tier friendly)
    )

# Database initialization
from database import init_db

# Import routers
from routers import centers, holidays

# Import scheduler
from scheduler import holiday_scheduler, start_scheduler, shutdown_scheduler
from schemas import HealthResponse

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    logger.info(f"Sentry initialized for {settings.ENVIRONMENT} environment")

app = FastAPI(title=settings.APP_NAME, version="1.0.0")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred. Please try again later."}
    )


# Initialize database and scheduler on startup
@app.on_event("startup")
async def startup_event():
    init_db()
    start_scheduler()

@app.on_event("shutdown")
async def shutdown_event():
    shutdown_scheduler()
    logger.info("Background scheduler stopped")

# CORS configuration - use environment-specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include API routers
app.include_router(centers.router, prefix="/api")
app.include_router(holidays.router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Service and scheduler health"""
    job = holiday_scheduler.job
    next_run = getattr(job, "next_run_time", None) if job else None
    return HealthResponse(
        status="ok",
        scheduler_running=holiday_scheduler.running,
        holiday_sync_job=job.id if job else None,
        next_holiday_sync=next_run.isoformat() if next_run else None,
    )


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} backend running"}
