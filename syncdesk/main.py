import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import models so every table is registered with Base before create_all
from . import models  # noqa: F401
from .auth import api_auth_gate
from .config import AUTH_REQUIRED, ENVIRONMENT, get_server_settings
from .database import Base, engine, get_db
from .domain.calendar import router as calendar_router
from .domain.contacts import router as contacts_router
from .domain.deals import income_router, router as deals_router
from .domain.payments import router as payments_router
from .domain.pitches import router as pitches_router
from .domain.songs import router as songs_router
from .rate_limiter import RateLimitMiddleware, get_redis_client, reset_rate_limits
from .request_logging import RequestLoggingMiddleware
from .routes.ai import router as ai_router
from .routes.auth import router as auth_router
from .routes.dashboard import router as dashboard_router
from .routes.playlists import playlist_songs_router, router as playlists_router
from .routes.saved_searches import router as saved_searches_router
from .routes.templates import email_router as email_templates_router
from .routes.templates import router as templates_router
from .routes.upload import attachments_router, router as upload_router
from .routes.workflow_automation import router as workflow_automation_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

settings = get_server_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application starting up ({ENVIRONMENT})...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    reset_rate_limits()
    if settings.rate_limit_enabled and get_redis_client() is not None:
        logger.info("Redis connection established for rate limiting")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="SyncDesk API", version="1.0.0", lifespan=lifespan)


def _field_path(loc) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path", "header", "cookie", "form"):
        parts = parts[1:]
    return ".".join(parts)


def _error_message(error: dict) -> str:
    message = error.get("msg", "Invalid value")
    # pydantic prefixes errors raised from validators
    return message.removeprefix("Value error, ")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report validation failures as 400 with one entry per offending field"""
    errors = [{"field": _field_path(e.get("loc", ())), "message": _error_message(e)} for e in exc.errors()]
    logger.warning(f"Validation error for {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"error": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Middleware runs in reverse order of registration: request logging is
# outermost, CORS wraps the rate limiter so 429s carry CORS headers
if settings.security_headers_enabled:
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)
else:
    logger.warning("Security headers DISABLED - only use in development!")

if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware, settings=settings)
else:
    logger.warning("Rate limiting DISABLED")

logger.info(f"CORS allowed origins: {settings.allowed_origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)

app.add_middleware(RequestLoggingMiddleware, slow_request_threshold_ms=settings.slow_request_threshold_ms)

# Routes
API_PREFIX = "/api"
if AUTH_REQUIRED:
    logger.info("🔒 Authentication required for /api routes")

app.include_router(auth_router, prefix=API_PREFIX)

for api_router in (
    songs_router,
    contacts_router,
    deals_router,
    income_router,
    pitches_router,
    payments_router,
    calendar_router,
    templates_router,
    email_templates_router,
    upload_router,
    attachments_router,
    playlists_router,
    playlist_songs_router,
    saved_searches_router,
    workflow_automation_router,
    dashboard_router,
    ai_router,
):
    app.include_router(api_router, prefix=API_PREFIX, dependencies=[Depends(api_auth_gate)])


@app.get("/")
def root():
    return {"message": "SyncDesk API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/ready")
def ready(db: Session = Depends(get_db)):
    """Readiness: the database answers a trivial query"""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"❌ Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not ready", "database": "unavailable"})
    return {"status": "ready", "database": "ok"}


@app.get("/live")
def live():
    return {"status": "alive"}
