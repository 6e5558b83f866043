"""
Main video processing workflows.

Two linear pipelines share the same failure policy: the first failing step
ends the job, everything the job wrote so far is deleted, and a
PipelineError reaches the caller. Successful jobs hand their artifacts to
`schedule_job_cleanup` once the response has gone out.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Iterable, List, Optional

from app.core.artifacts import generate_job_token
from app.core.exceptions import PipelineError
from app.core.security import ValidationError, validate_video_url
from app.core.workflow.clip_processor import create_clip_tasks, process_clips_sequential
from app.core.workflow.context import (
    AnalyzeResult,
    ClipSpecData,
    JobState,
    PipelineServices,
    ProcessResult,
    VideoJob,
)
from app.core.workflow.steps import download_source, generate_highlights, transcribe_source

logger = logging.getLogger(__name__)


def normalize_clip_specs(clip_specs: Optional[Iterable[Any]]) -> List[ClipSpecData]:
    """
    Convert request clip entries into ClipSpecData.

    Raises:
        ValidationError: If the list is missing or an entry has a bad range
    """
    if clip_specs is None or isinstance(clip_specs, (str, bytes, dict)):
        raise ValidationError("clips must be a list", field="clips")

    normalized: List[ClipSpecData] = []
    for index, spec in enumerate(clip_specs):
        if isinstance(spec, dict):
            start, end, title = spec.get("start"), spec.get("end"), spec.get("title")
        else:
            start = getattr(spec, "start", None)
            end = getattr(spec, "end", None)
            title = getattr(spec, "title", None)

        try:
            start, end = float(start), float(end)
        except (TypeError, ValueError):
            raise ValidationError(f"clips[{index}] needs numeric start and end", field="clips")

        if start < 0 or end <= start:
            raise ValidationError(f"clips[{index}] end must exceed start", field="clips")

        normalized.append(ClipSpecData(start=start, end=end, title=title))

    return normalized


def create_job(
    services: PipelineServices,
    video_url: str,
    clip_specs: Optional[List[ClipSpecData]] = None,
) -> VideoJob:
    token = generate_job_token()
    local_path = services.artifacts.reserve_path("video", token=token)
    return VideoJob(
        source_url=video_url,
        token=token,
        local_path=local_path,
        clip_specs=clip_specs or [],
        artifacts=[local_path],
    )


def reclaim_job_files(services: PipelineServices, job: VideoJob) -> None:
    """Delete every file the job wrote, including tool intermediates."""
    services.artifacts.delete_many(job.artifacts)
    services.artifacts.delete_job_files(job.token)


@asynccontextmanager
async def job_failure_cleanup(services: PipelineServices, job: VideoJob):
    """Delete the job's files and mark it failed if the wrapped steps raise."""
    try:
        yield
    except asyncio.CancelledError:
        job.state = JobState.FAILED
        logger.warning(f"[{job.job_id}] Job cancelled during {job.step}")
        # A worker thread may still be writing; run_in_worker deletes again once it exits
        reclaim_job_files(services, job)
        raise
    except PipelineError as e:
        job.state = JobState.FAILED
        logger.error(
            f"[{job.job_id}] Job failed during {job.step}: {e.message}"
            + (f"\n{e.details}" if e.details else "")
        )
        reclaim_job_files(services, job)
        raise
    except Exception as e:
        job.state = JobState.FAILED
        logger.exception(f"[{job.job_id}] Unexpected error during {job.step}: {e}")
        reclaim_job_files(services, job)
        raise PipelineError(f"Unexpected failure during {job.step}") from e


async def process_video_workflow(
    services: PipelineServices,
    video_url: str,
    clip_specs: Optional[Iterable[Any]],
) -> ProcessResult:
    """
    Download, transcribe and cut a video into vertical clips.

    Steps:
    1. Validate input (no external calls on failure)
    2. Download the source video
    3. Transcribe it
    4. Cut each requested clip in order, stopping at the first failure

    Args:
        services: Shared clients and artifact store
        video_url: Source URL, passed to the downloader untouched
        clip_specs: Ordered {start, end, title?} entries

    Returns:
        ProcessResult with transcript and clip filenames in request order

    Raises:
        ValidationError: On missing or malformed input
        PipelineError: On any step failure, after the job's files are deleted
    """
    validate_video_url(video_url)
    specs = normalize_clip_specs(clip_specs)

    job = create_job(services, video_url, specs)
    logger.info(f"[{job.job_id}] 🚀 Starting process job with {len(specs)} clip(s)")

    async with job_failure_cleanup(services, job):
        await download_source(services, job)
        transcript = await transcribe_source(services, job)

        tasks = create_clip_tasks(job, services.artifacts)
        clips = await process_clips_sequential(
            job,
            tasks,
            services.artifacts,
            services.settings.transcode_timeout_seconds,
        )

    logger.info(f"[{job.job_id}] ✨ Process job complete ({len(clips)} clip(s))")
    return ProcessResult(job=job, transcript=transcript, clips=clips)


async def analyze_video_workflow(
    services: PipelineServices,
    video_url: str,
) -> AnalyzeResult:
    """
    Download and transcribe a video, then ask the model for highlights.

    Raises:
        ValidationError: On missing input
        PipelineError: On any step failure, after the job's files are deleted
    """
    validate_video_url(video_url)

    job = create_job(services, video_url)
    logger.info(f"[{job.job_id}] 🚀 Starting analyze job")

    async with job_failure_cleanup(services, job):
        await download_source(services, job)
        transcript = await transcribe_source(services, job)
        highlights = await generate_highlights(services, job)

    logger.info(f"[{job.job_id}] ✨ Analyze job complete ({len(highlights)} highlight(s))")
    return AnalyzeResult(job=job, transcript=transcript, highlights=highlights)


async def schedule_job_cleanup(services: PipelineServices, job: VideoJob) -> None:
    """
    Reclaim a finished job's files after the grace period.

    Must run on the event loop; it only schedules the deletion and returns.
    """
    job.state = JobState.RESPONDED
    services.artifacts.schedule_delete(
        list(job.artifacts),
        services.settings.cleanup_delay_seconds,
    )
    job.state = JobState.CLEANUP_SCHEDULED
