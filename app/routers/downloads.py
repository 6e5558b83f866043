from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from app.core.workflow import PipelineServices
from app.routers.deps import get_services
from app.schemas import ErrorResponse

router = APIRouter(tags=["Downloads"])


@router.get(
    "/download/{filename}",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}},
)
async def download_clip(
    filename: str,
    services: PipelineServices = Depends(get_services),
) -> FileResponse:
    """Stream a rendered clip while it is still inside its grace period."""
    # Validates the name and keeps the lookup inside the artifact directory
    path = services.artifacts.resolve_clip(filename)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    # Cleanup can delete the clip after it was resolved; a vanished file is a 404
    try:
        stat_result = path.stat()
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(
        path,
        stat_result=stat_result,
        media_type="video/mp4",
        filename=path.name,
    )
