import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, log it with its timing and flag slow ones."""

    def __init__(self, app, slow_request_threshold_ms: int = 1000):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        start = time.perf_counter()

        logger.info(f"📥 [{request_id}] {request.method} {request.url.path}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"❌ [{request_id}] {request.method} {request.url.path} - Error: {e}")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"📤 [{request_id}] {request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)"
        )
        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"🐌 [{request_id}] Slow request {request.method} {request.url.path}: "
                f"{duration_ms:.0f}ms (threshold {self.slow_request_threshold_ms}ms)"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
