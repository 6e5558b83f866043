"""
Data structures for video processing workflow.

Contains dataclasses for the job, its clip tasks and the services it runs against.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from app.config import Settings
from app.core.artifacts import ArtifactStore

if TYPE_CHECKING:
    from app.core.gemini import HighlightClient
    from app.core.transcription import TranscriptionClient


class JobState(str, Enum):
    CREATED = "created"
    DOWNLOADED = "downloaded"
    TRANSCRIBED = "transcribed"
    CLIPPING = "clipping"
    ANALYZED = "analyzed"
    RESPONDED = "responded"
    CLEANUP_SCHEDULED = "cleanup_scheduled"
    FAILED = "failed"


@dataclass
class ClipSpecData:
    """One requested cut, in seconds."""

    start: float
    end: float
    title: Optional[str] = None


@dataclass
class ClipTask:
    """Represents a single clip rendering task."""

    index: int
    start: float
    end: float
    filename: str
    out_path: Path
    title: Optional[str] = None


@dataclass
class VideoJob:
    """Lifecycle of one request through a workflow."""

    source_url: str
    token: str
    local_path: Path
    clip_specs: List[ClipSpecData] = field(default_factory=list)
    transcript_text: Optional[str] = None
    produced_artifacts: List[Path] = field(default_factory=list)
    # Every path this job may have written, including partial outputs
    artifacts: List[Path] = field(default_factory=list)
    state: JobState = JobState.CREATED
    step: str = "validate"

    @property
    def job_id(self) -> str:
        return self.token

    def set_transcript(self, text: str) -> None:
        if self.transcript_text is not None:
            raise RuntimeError(f"Transcript already recorded for job {self.token}")
        self.transcript_text = text


@dataclass
class PipelineServices:
    """Collaborators shared by every job."""

    settings: Settings
    artifacts: ArtifactStore
    transcriber: "TranscriptionClient"
    highlighter: "HighlightClient"


@dataclass
class ProcessResult:
    job: VideoJob
    transcript: str
    clips: List[str]


@dataclass
class AnalyzeResult:
    job: VideoJob
    transcript: str
    highlights: List[Dict[str, Any]]
