"""
Rate Limiting Middleware

Per-client rate limiting for the job-initiating endpoints.
"""

import json
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.security import (
    RATE_LIMIT_MESSAGE,
    RATE_LIMITED_PATHS,
    RateLimiter,
    log_security_event,
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware.

    Only requests whose path is in `paths` count against the limit;
    everything else passes straight through.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.paths = frozenset(paths) if paths is not None else RATE_LIMITED_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.rstrip("/") not in self.paths:
            return await call_next(request)

        key = self.limiter.get_key_for_request(request)
        allowed, remaining, reset = self.limiter.is_allowed(key)

        if not allowed:
            log_security_event(
                "rate_limit_exceeded",
                request=request,
                details={"client": key, "reset_seconds": reset}
            )
            return Response(
                content=json.dumps({"error": RATE_LIMIT_MESSAGE}),
                status_code=429,
                media_type="application/json",
                headers={
                    "Retry-After": str(reset),
                    "X-RateLimit-Limit": str(self.limiter.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                }
            )

        response = await call_next(request)

        # Add rate limit headers to response
        response.headers["X-RateLimit-Limit"] = str(self.limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset)

        return response
