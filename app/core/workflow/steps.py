"""
Individual pipeline steps.

Each blocking call runs in a worker thread so the event loop keeps
serving other requests while one job waits on a tool or remote API.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, TypeVar

from app.core import clipper
from app.core.artifacts import ArtifactStore
from app.core.exceptions import RemoteCallError, TranscriptionError
from app.core.workflow.context import JobState, PipelineServices, VideoJob

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_in_worker(artifacts: ArtifactStore, job: VideoJob, func: Callable[..., T], *args) -> T:
    """
    Run a blocking call in a worker thread on behalf of `job`.

    Cancelling the caller does not stop the thread. If that happens, the
    job's files are deleted again once the thread exits, since it may have
    written output after the failure cleanup ran.
    """
    worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(worker)
    except asyncio.CancelledError:
        def reclaim(done: asyncio.Future) -> None:
            if not done.cancelled() and done.exception() is not None:
                logger.debug(f"[{job.job_id}] Abandoned worker failed: {done.exception()}")
            artifacts.delete_many(job.artifacts)
            artifacts.delete_job_files(job.token)

        worker.add_done_callback(reclaim)
        raise


async def download_source(services: PipelineServices, job: VideoJob) -> None:
    """
    Download the job's source video to its reserved local path.

    Raises:
        DownloadError: If the downloader fails
    """
    job.step = "download"
    logger.info(f"[{job.job_id}] 📥 Downloading video...")
    await run_in_worker(
        services.artifacts,
        job,
        clipper.download_video,
        job.source_url,
        job.local_path,
        services.settings.download_timeout_seconds,
    )
    job.state = JobState.DOWNLOADED
    logger.info(f"[{job.job_id}] ✅ Download complete.")


async def transcribe_source(services: PipelineServices, job: VideoJob) -> str:
    """
    Transcribe the downloaded video.

    Raises:
        TranscriptionError: If the speech-to-text call fails
    """
    job.step = "transcribe"
    logger.info(f"[{job.job_id}] 📝 Transcribing video...")
    try:
        text = await run_in_worker(services.artifacts, job, services.transcriber.transcribe, job.local_path)
    except TranscriptionError:
        raise
    except Exception as e:
        raise TranscriptionError(f"Transcription failed: {e}") from e

    job.set_transcript(text)
    job.state = JobState.TRANSCRIBED
    logger.info(f"[{job.job_id}] ✅ Transcription complete.")
    return text


async def generate_highlights(services: PipelineServices, job: VideoJob) -> List[Dict[str, Any]]:
    """
    Ask the highlight model for viral segments of the transcript.

    Raises:
        RemoteCallError: If the remote call fails
    """
    job.step = "analyze"
    logger.info(f"[{job.job_id}] 🤖 Analyzing transcript with AI...")
    try:
        highlights = await run_in_worker(
            services.artifacts,
            job,
            services.highlighter.find_highlights,
            job.transcript_text or "",
        )
    except RemoteCallError:
        raise
    except Exception as e:
        raise RemoteCallError(f"Highlight generation failed: {e}") from e

    job.state = JobState.ANALYZED
    logger.info(f"[{job.job_id}] ✅ AI analysis complete.")
    return highlights
