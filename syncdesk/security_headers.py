"""
Hardening headers for API responses.

Health checks and the API docs are left alone; every other response gets
the static headers below, a CSP that only lets the frontend frame us, and
HSTS when running in production.
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import FRONTEND_URL, ServerSettings

logger = logging.getLogger(__name__)

HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"
NO_STORE = "no-store, no-cache, must-revalidate"

# Browser features an API response never needs
DISABLED_FEATURES = (
    "accelerometer",
    "camera",
    "geolocation",
    "gyroscope",
    "magnetometer",
    "microphone",
    "payment",
    "usb",
    "interest-cohort",
)

STATIC_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin-allow-popups",
    "X-DNS-Prefetch-Control": "off",
}


def get_csp_policy(settings: ServerSettings) -> str:
    """The configured policy, with frame-ancestors added unless it already names them."""
    directives = [d.strip() for d in settings.content_security_policy.split(";") if d.strip()]
    if not any(d.startswith("frame-ancestors") for d in directives):
        directives.append(f"frame-ancestors 'self' {FRONTEND_URL}")
    return "; ".join(directives)


def get_permissions_policy() -> str:
    return ", ".join(f"{feature}=()" for feature in DISABLED_FEATURES)


def get_security_headers_dict(settings: ServerSettings) -> dict[str, str]:
    headers = dict(STATIC_HEADERS)
    headers["Content-Security-Policy"] = get_csp_policy(settings)
    headers["Permissions-Policy"] = get_permissions_policy()
    if settings.strict_transport_security:
        headers["Strict-Transport-Security"] = HSTS_VALUE
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, settings: ServerSettings, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.headers = get_security_headers_dict(settings)
        self.exclude_paths = tuple(settings.security_header_exclude_paths if exclude_paths is None else exclude_paths)
        hsts = "with HSTS" if settings.strict_transport_security else "without HSTS"
        logger.info(f"🔒 Security headers enabled {hsts}, skipping {', '.join(self.exclude_paths) or 'nothing'}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        if request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        # File downloads may choose their own caching
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = NO_STORE
        return response
