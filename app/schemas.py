"""
Pydantic models for request/response validation.

Provides type-safe, validated data structures for all API endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from app.core.security import (
    MAX_CLIPS_PER_REQUEST,
    MAX_TITLE_LENGTH,
    MAX_URL_LENGTH,
    sanitize_text,
)


# -----------------------------------------------------------------------------
# Base Models
# -----------------------------------------------------------------------------

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        populate_by_name=True,
    )


# -----------------------------------------------------------------------------
# API Request Models
# -----------------------------------------------------------------------------

class ClipSpec(BaseSchema):
    """One requested cut of the source video, in seconds."""
    start: float = Field(..., ge=0, description="Clip start in seconds")
    end: float = Field(..., gt=0, description="Clip end in seconds")
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH, description="Label for logs")

    @field_validator("title")
    @classmethod
    def sanitize_title(cls, v: Optional[str]) -> Optional[str]:
        if v:
            return sanitize_text(v, MAX_TITLE_LENGTH)
        return v

    @model_validator(mode="after")
    def check_range(self) -> "ClipSpec":
        if self.end <= self.start:
            raise ValueError("end must be greater than start")
        return self


class AnalyzeRequest(BaseSchema):
    """Request to transcribe a video and propose highlights."""
    video_url: str = Field(
        ...,
        alias="videoUrl",
        min_length=1,
        max_length=MAX_URL_LENGTH,
        description="Video URL, passed to the downloader as-is",
    )


class ProcessRequest(AnalyzeRequest):
    """Request to transcribe a video and cut it into vertical clips."""
    clips: List[ClipSpec] = Field(..., max_length=MAX_CLIPS_PER_REQUEST, description="Ordered clip ranges")


# -----------------------------------------------------------------------------
# API Response Models
# -----------------------------------------------------------------------------

class Highlight(BaseSchema):
    """A model-proposed viral segment."""
    title: str
    summary: str
    start_time: float
    end_time: float
    viral_score: float = Field(..., ge=1, le=10)


class ProcessResponse(BaseSchema):
    """Transcript plus the filenames of the rendered clips."""
    transcript: str
    clips: List[str]


class AnalyzeResponse(BaseSchema):
    """Transcript plus highlight objects exactly as the model returned them."""
    transcript: str
    highlights: List[Dict[str, Any]]


class ErrorResponse(BaseSchema):
    """Error body shared by every failing endpoint."""
    error: str


class HealthResponse(BaseSchema):
    """Health check response."""
    status: str = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReadinessResponse(BaseSchema):
    """Readiness check response."""
    status: str
    tools: Dict[str, bool]
