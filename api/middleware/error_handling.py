from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from datetime import datetime, timezone

from core.logging import get_api_logger_safe
from core.utils.exceptions import AliceMirrorException, ConfigurationError, create_error_context
from services.alice.exceptions import FetchError

logger = get_api_logger_safe("api.middleware.error_handling")


def _status_for(error: Exception) -> int:
    if isinstance(error, ConfigurationError):
        return 503
    if isinstance(error, FetchError):
        return 502
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns exceptions that escape a route into a structured JSON error."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            status_code = _status_for(e)
            context = create_error_context(e, "http_request", {
                "path": request.url.path,
                "method": request.method,
                "response_code": status_code,
            })
            logger.error("Unhandled API exception", exc_info=True, **context)

            known = isinstance(e, AliceMirrorException)
            return JSONResponse(
                status_code=status_code,
                content={
                    "error": type(e).__name__ if known else "Internal server error",
                    "message": e.message if known else "An unexpected error occurred",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "path": request.url.path,
                    "request_id": getattr(request.state, "request_id", None),
                }
            )
