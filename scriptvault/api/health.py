"""Health/status probe: online status and active session count."""

from typing import Annotated

from fastapi import APIRouter, Depends

from scriptvault.api.deps import get_dispatcher
from scriptvault.schemas.health import HealthResponse
from scriptvault.services.dispatcher import ActionDispatcher

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def get_health(
    dispatcher: Annotated[ActionDispatcher, Depends(get_dispatcher)],
) -> HealthResponse:
    """
    Return service status. Read-only apart from the opportunistic admin
    bootstrap. Used by load balancers and monitoring.
    """
    return await dispatcher.health()
