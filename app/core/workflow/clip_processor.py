"""
Clip processing for video workflow.

Handles clip task creation and sequential rendering.
"""

import logging
from typing import List

from app.core import clipper
from app.core.artifacts import ArtifactStore
from app.core.workflow.context import ClipTask, JobState, VideoJob
from app.core.workflow.steps import run_in_worker

logger = logging.getLogger(__name__)


def create_clip_tasks(job: VideoJob, artifacts: ArtifactStore) -> List[ClipTask]:
    """
    Create one rendering task per requested clip, in request order.

    Args:
        job: Job whose clip specs are rendered
        artifacts: Store that names the output files

    Returns:
        List of ClipTask objects
    """
    tasks: List[ClipTask] = []

    for index, spec in enumerate(job.clip_specs):
        out_path = artifacts.reserve_path("clip", index=index, token=job.token)
        tasks.append(
            ClipTask(
                index=index,
                start=float(spec.start),
                end=float(spec.end),
                filename=out_path.name,
                out_path=out_path,
                title=spec.title,
            )
        )

    return tasks


async def process_clips_sequential(
    job: VideoJob,
    tasks: List[ClipTask],
    artifacts: ArtifactStore,
    timeout: float,
) -> List[str]:
    """
    Render clips one after another against the job's source video.

    The first failure propagates immediately; later clips are never started.

    Returns:
        Filenames of the rendered clips, in task order

    Raises:
        TranscodeError: If any clip fails
    """
    job.state = JobState.CLIPPING
    filenames: List[str] = []

    for task in tasks:
        job.step = f"cut[{task.index}]"
        label = f" ({task.title})" if task.title else ""
        logger.info(
            f"[{job.job_id}] 🎬 Rendering clip {task.index + 1}/{len(tasks)}{label}: "
            f"{task.start:.2f}s-{task.end:.2f}s"
        )

        # Tracked before rendering so a partial file is reclaimed on failure
        job.artifacts.append(task.out_path)
        await run_in_worker(
            artifacts,
            job,
            clipper.run_ffmpeg_clip,
            job.local_path,
            task.out_path,
            task.start,
            task.end,
            timeout,
        )

        job.produced_artifacts.append(task.out_path)
        filenames.append(task.filename)

    return filenames
