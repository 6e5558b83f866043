from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.config import logger
from app.core.exceptions import PipelineError
from app.core.security import ValidationError
from app.core.workflow import (
    PipelineServices,
    analyze_video_workflow,
    process_video_workflow,
    schedule_job_cleanup,
)
from app.routers.deps import get_services
from app.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    ProcessRequest,
    ProcessResponse,
)

router = APIRouter(tags=["Processing"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/process", response_model=ProcessResponse, responses=ERROR_RESPONSES)
async def process_video(
    payload: ProcessRequest,
    background_tasks: BackgroundTasks,
    services: PipelineServices = Depends(get_services),
) -> ProcessResponse:
    """Download, transcribe and cut a video into vertical clips."""
    try:
        result = await process_video_workflow(services, payload.video_url, payload.clips)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except PipelineError as e:
        # Details were logged by the workflow; keep them out of the response
        logger.warning("Process request failed at %s", e.step)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Processing failed",
        )

    # Runs once the response has been sent
    background_tasks.add_task(schedule_job_cleanup, services, result.job)

    return ProcessResponse(transcript=result.transcript, clips=result.clips)


@router.post("/analyze", response_model=AnalyzeResponse, responses=ERROR_RESPONSES)
async def analyze_video(
    payload: AnalyzeRequest,
    background_tasks: BackgroundTasks,
    services: PipelineServices = Depends(get_services),
) -> AnalyzeResponse:
    """Download and transcribe a video, then propose viral highlights."""
    try:
        result = await analyze_video_workflow(services, payload.video_url)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except PipelineError as e:
        logger.warning("Analyze request failed at %s", e.step)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Analyze failed",
        )

    background_tasks.add_task(schedule_job_cleanup, services, result.job)

    return AnalyzeResponse(transcript=result.transcript, highlights=result.highlights)
