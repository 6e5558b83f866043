"""
Video processing workflow package.

This package orchestrates the request pipelines with:
- Strictly ordered steps per job
- Non-blocking execution of external tools and remote calls
- Cleanup of a job's files on failure
- Delayed cleanup after a successful response

Module Structure:
- context.py: Data structures (VideoJob, ClipTask, PipelineServices)
- prompt.py: Fixed model prompts
- data_processor.py: Highlight parsing and fallback
- steps.py: Download, transcription and highlight steps
- clip_processor.py: Clip task creation and sequential rendering
- processor.py: Workflow orchestration
"""

# Data structures
from app.core.workflow.context import (
    AnalyzeResult,
    ClipSpecData,
    ClipTask,
    JobState,
    PipelineServices,
    ProcessResult,
    VideoJob,
)

# Prompts
from app.core.workflow.prompt import (
    HIGHLIGHT_SYSTEM_PROMPT,
    TRANSCRIPTION_PROMPT,
    build_highlight_message,
)

# Data processing
from app.core.workflow.data_processor import (
    FALLBACK_HIGHLIGHT,
    fallback_highlights,
    parse_highlights,
)

# Steps
from app.core.workflow.steps import (
    run_in_worker,
    download_source,
    transcribe_source,
    generate_highlights,
)

# Clip processing
from app.core.workflow.clip_processor import (
    create_clip_tasks,
    process_clips_sequential,
)

# Main workflows
from app.core.workflow.processor import (
    analyze_video_workflow,
    create_job,
    normalize_clip_specs,
    process_video_workflow,
    reclaim_job_files,
    schedule_job_cleanup,
)

__all__ = [
    # Data structures
    "AnalyzeResult",
    "ClipSpecData",
    "ClipTask",
    "JobState",
    "PipelineServices",
    "ProcessResult",
    "VideoJob",
    # Prompts
    "HIGHLIGHT_SYSTEM_PROMPT",
    "TRANSCRIPTION_PROMPT",
    "build_highlight_message",
    # Data processing
    "FALLBACK_HIGHLIGHT",
    "fallback_highlights",
    "parse_highlights",
    # Steps
    "run_in_worker",
    "download_source",
    "transcribe_source",
    "generate_highlights",
    # Clip processing
    "create_clip_tasks",
    "process_clips_sequential",
    # Main workflows
    "analyze_video_workflow",
    "create_job",
    "normalize_clip_specs",
    "process_video_workflow",
    "reclaim_job_files",
    "schedule_job_cleanup",
]
