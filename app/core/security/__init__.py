"""
Security module.

Provides:
- Rate limiting (in-memory)
- Input validation and sanitization
- Request ID tracking
- Security utilities
"""

from app.core.security.constants import (
    CLIP_EXTENSION,
    CLIP_NAME_PREFIX,
    MAX_CLIP_NAME_LENGTH,
    MAX_CLIPS_PER_REQUEST,
    MAX_TITLE_LENGTH,
    MAX_URL_LENGTH,
    DEFAULT_RATE_LIMIT,
    DEFAULT_RATE_WINDOW,
    DEFAULT_TRUSTED_PROXY_HOPS,
    RATE_LIMITED_PATHS,
    RATE_LIMIT_MESSAGE,
    REQUEST_ID_HEADER,
)
from app.core.security.rate_limiting import RateLimiter
from app.core.security.validation import (
    ValidationError,
    validate_video_url,
    validate_clip_name,
    sanitize_text,
)
from app.core.security.utils import (
    generate_request_id,
    get_client_ip,
    get_request_id,
    mask_sensitive_data,
    log_security_event,
)

__all__ = [
    # Constants
    "CLIP_EXTENSION",
    "CLIP_NAME_PREFIX",
    "MAX_CLIP_NAME_LENGTH",
    "MAX_CLIPS_PER_REQUEST",
    "MAX_TITLE_LENGTH",
    "MAX_URL_LENGTH",
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_RATE_WINDOW",
    "DEFAULT_TRUSTED_PROXY_HOPS",
    "RATE_LIMITED_PATHS",
    "RATE_LIMIT_MESSAGE",
    "REQUEST_ID_HEADER",
    # Rate limiting
    "RateLimiter",
    # Validation
    "ValidationError",
    "validate_video_url",
    "validate_clip_name",
    "sanitize_text",
    # Utils
    "generate_request_id",
    "get_client_ip",
    "get_request_id",
    "mask_sensitive_data",
    "log_security_event",
]
