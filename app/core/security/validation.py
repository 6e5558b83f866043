"""
Input Validation Module

Validates and sanitizes user inputs to prevent security issues.
"""

import re
from typing import Optional

from app.core.security.constants import (
    CLIP_EXTENSION,
    CLIP_NAME_PREFIX,
    MAX_CLIP_NAME_LENGTH,
    MAX_URL_LENGTH,
)


class ValidationError(Exception):
    """Raised when input validation fails."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


def validate_video_url(url: str) -> str:
    """
    Check that a video URL is present.

    The URL is handed to the downloader as an opaque value, so its
    contents are not parsed or rewritten here.

    Raises:
        ValidationError: If URL is missing or too long.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("videoUrl is required", field="videoUrl")

    if len(url) > MAX_URL_LENGTH:
        raise ValidationError(f"URL exceeds maximum length of {MAX_URL_LENGTH}", field="videoUrl")

    return url


def validate_clip_name(clip_name: str) -> str:
    """Validate clip name format (prevents path traversal)."""
    if not clip_name or not isinstance(clip_name, str):
        raise ValidationError("Clip name is required", field="filename")

    # Allow alphanumeric, hyphens, underscores, dots only
    if not re.match(r"^[a-zA-Z0-9_.-]+$", clip_name):
        raise ValidationError("Invalid clip name format", field="filename")

    if ".." in clip_name:
        raise ValidationError("Invalid clip name format", field="filename")

    if len(clip_name) > MAX_CLIP_NAME_LENGTH:
        raise ValidationError("Clip name too long", field="filename")

    if not clip_name.startswith(CLIP_NAME_PREFIX):
        raise ValidationError("Not a clip file", field="filename")

    if not clip_name.lower().endswith(CLIP_EXTENSION):
        raise ValidationError(f"Clip name must end with {CLIP_EXTENSION}", field="filename")

    return clip_name


def sanitize_text(text: str, max_length: int = 1000) -> str:
    """
    Sanitize text input by removing potentially dangerous characters.

    Preserves most Unicode for internationalization.
    """
    if not text:
        return ""

    # Remove null bytes and control characters (except newlines/tabs)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)

    # Truncate
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()
