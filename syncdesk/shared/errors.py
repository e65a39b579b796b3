"""Route-level error translation"""

import logging
from contextlib import contextmanager

from fastapi import HTTPException

logger = logging.getLogger(__name__)


@contextmanager
def route_errors(action: str):
    """
    Turn an unexpected exception inside a route into a 500 response.

    HTTPExceptions pass through untouched; anything else becomes
    ``{"error": "Failed to <action>", "details": "<message>"}``.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Failed to {action}: {e}")
        raise HTTPException(
            status_code=500,
            detail={"error": f"Failed to {action}", "details": str(e)},
        ) from e
