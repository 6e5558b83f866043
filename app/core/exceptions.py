"""
Pipeline exceptions.

Every error here is terminal for the job that raised it. The message is
for logs; HTTP responses only ever carry a generic summary.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline step failures."""

    step: str = "pipeline"

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class DownloadError(PipelineError):
    """Raised when the external downloader fails."""
    step = "download"


class TranscriptionError(PipelineError):
    """Raised when the speech-to-text call fails."""
    step = "transcribe"


class TranscodeError(PipelineError):
    """Raised when the external transcoder fails or produces no output."""
    step = "cut"


class RemoteCallError(PipelineError):
    """Raised when the highlight generation call fails in transport."""
    step = "analyze"
