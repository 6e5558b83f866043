"""
Request ID Middleware

Tags each request with an ID that appears in its response header and in
every log line written while serving it, including job steps running in
worker threads.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import request_id_var
from app.core.security import REQUEST_ID_HEADER, get_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Resolves the request ID and binds it for the rest of the request.

    A well-formed client supplied X-Request-ID is kept so a caller can
    find its own job in the logs; anything else is replaced.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
