"""
Middleware stack.

Provides:
- Request ID injection
- Rate limiting
- Request/response logging
- Error sanitization
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.error_sanitization import ErrorSanitizationMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "ErrorSanitizationMiddleware",
]
