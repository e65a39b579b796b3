import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./syncdesk.db")

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

# Frontend base URL (CORS default and CSP frame-ancestors)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5000")

# Clerk session verification
# AUTH_REQUIRED=false leaves the /api routers open; /api/auth/user still reports
# whoever presented a valid session
CLERK_JWKS_URL = os.getenv("CLERK_JWKS_URL")
CLERK_ISSUER = os.getenv("CLERK_ISSUER")
AUTH_REQUIRED = os.getenv("AUTH_REQUIRED", "false").lower() == "true"

# OpenAI-compatible chat completions endpoint used by the AI features
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))

# Attachment storage. R2 is used when all credentials are present, otherwise
# files land in UPLOAD_DIR on local disk.
UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path.cwd() / "uploads"))
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "syncdesk")

# Optional Redis mirror for rate-limit counters
REDIS_URL = os.getenv("REDIS_URL")


class ServerSettings(BaseModel):
    """Every recognised server bootstrap option in one place."""

    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = 900
    rate_limit_max_requests: int = 100
    rate_limit_sweep_seconds: int = 300

    allowed_origins: list[str] = []

    security_headers_enabled: bool = True
    strict_transport_security: bool = False
    content_security_policy: str = (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self' 'unsafe-inline'; img-src 'self' data: https:; "
        "connect-src 'self'; font-src 'self' data:; object-src 'none'; "
        "media-src 'self'; frame-src 'none'"
    )
    security_header_exclude_paths: list[str] = ["/health", "/ready", "/live", "/docs", "/openapi.json"]

    max_upload_bytes: int = 10 * 1024 * 1024
    slow_request_threshold_ms: int = 1000


@lru_cache
def get_server_settings() -> ServerSettings:
    """Build ServerSettings from the environment (cached per process)."""
    origins = os.getenv(
        "ALLOWED_ORIGINS",
        f"{FRONTEND_URL},http://localhost:5173",
    )
    settings = ServerSettings(
        rate_limit_enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",
        rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_MS", "900000")) // 1000,
        rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100")),
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
        security_headers_enabled=os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true",
        strict_transport_security=IS_PRODUCTION,
        max_upload_bytes=int(os.getenv("MAX_REQUEST_SIZE", str(10 * 1024 * 1024))),
    )
    custom_csp = os.getenv("CONTENT_SECURITY_POLICY")
    if custom_csp:
        settings.content_security_policy = custom_csp
    return settings
