from fastapi import Request

from app.core.workflow import PipelineServices


def get_services(request: Request) -> PipelineServices:
    """Pipeline services attached to the application at start-up."""
    return request.app.state.services
