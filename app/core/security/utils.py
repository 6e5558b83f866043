"""
Security Utilities

Request ID tracking, masking, and security event logging.
"""

import re
import secrets
from typing import Any, Dict, Optional

from fastapi import Request

from app.config import logger
from app.core.security.constants import DEFAULT_TRUSTED_PROXY_HOPS, REQUEST_ID_HEADER


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return secrets.token_hex(16)


def get_request_id(request: Request) -> str:
    """Get or generate request ID from request."""
    request_id = request.headers.get(REQUEST_ID_HEADER)
    if request_id and len(request_id) <= 64 and re.match(r"^[a-zA-Z0-9_-]+$", request_id):
        return request_id
    return generate_request_id()


def get_client_ip(request: Request, trusted_hops: int = DEFAULT_TRUSTED_PROXY_HOPS) -> str:
    """
    Client address as seen by the outermost trusted proxy.

    Each trusted proxy appends the address it received the request from,
    so the client is the entry `trusted_hops` places from the right of
    X-Forwarded-For. Entries further left are client supplied and ignored.
    With `trusted_hops=0` the header is not consulted at all.
    """
    peer = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("X-Forwarded-For")
    if not forwarded or trusted_hops <= 0:
        return peer

    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    if not hops:
        return peer
    return hops[max(len(hops) - trusted_hops, 0)]


def mask_sensitive_data(
    data: Dict[str, Any],
    sensitive_keys: frozenset = frozenset({"token", "password", "secret", "key", "authorization"})
) -> Dict[str, Any]:
    """
    Mask sensitive data in dictionaries for safe logging.
    """
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(s in key_lower for s in sensitive_keys):
            masked[key] = "[REDACTED]"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value, sensitive_keys)
        else:
            masked[key] = value
    return masked


def log_security_event(
    event_type: str,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None,
    level: str = "warning"
) -> None:
    """
    Log a security-relevant event with structured data.
    """
    log_data: Dict[str, Any] = {"security_event": event_type}

    if request:
        log_data["client_ip"] = get_client_ip(request)
        log_data["path"] = str(request.url.path)
        log_data["method"] = request.method
        log_data["request_id"] = getattr(request.state, "request_id", None) or get_request_id(request)

    if details:
        log_data["details"] = mask_sensitive_data(details)

    log_func = getattr(logger, level, logger.warning)
    log_func("Security event: %s | %s", event_type, log_data)
