"""
Error Sanitization Middleware

Turns unhandled exceptions into a generic JSON error body.
"""

import json
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import logger


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Sanitizes error responses to prevent information leakage.

    The response is the same in every environment; the traceback only
    goes to the server log, tagged with the request ID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled exception in request %s: %s", request_id, exc)

            return Response(
                content=json.dumps({"error": "Internal server error", "request_id": request_id}),
                status_code=500,
                media_type="application/json",
            )
