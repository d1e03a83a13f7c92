"""
Global Error Handler Middleware.

Catches all unhandled exceptions and returns structured JSON responses.
NEVER leaks stack traces or internal details to clients.
Every error gets a unique error_id for correlation with server logs.
"""

import traceback
import uuid

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from stableguard.errors import StableGuardError

logger = structlog.get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Outermost middleware: catches everything.

    Response body:
    {
      "error": "human-readable message",
      "error_id": "uuid for log correlation",
      "status": 500
    }
    StableGuardError subclasses additionally carry their error_code.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            error_id = str(uuid.uuid4())
            logger.error(
                "unhandled_exception",
                error_id=error_id,
                path=request.url.path,
                method=request.method,
                error=str(exc),
                traceback=traceback.format_exc(),
            )

            status_code = getattr(exc, "status_code", 500)
            body: dict = {
                "error": "An internal error occurred. Please try again later.",
                "error_id": error_id,
                "status": status_code,
            }
            if isinstance(exc, StableGuardError):
                body["error_code"] = exc.error_code.value
            if self.debug:
                body["debug_hint"] = type(exc).__name__

            return JSONResponse(status_code=status_code, content=body)
