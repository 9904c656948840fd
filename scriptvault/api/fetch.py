"""Script fetch endpoint for deployed clients (no session, auth_key only)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scriptvault.api.deps import get_action_body, get_dispatcher
from scriptvault.core.errors import validation_error
from scriptvault.services.dispatcher import ActionDispatcher

router = APIRouter()


@router.post("/script")
async def post_fetch_script(
    body: Annotated[dict[str, Any], Depends(get_action_body)],
    dispatcher: Annotated[ActionDispatcher, Depends(get_dispatcher)],
) -> JSONResponse:
    """
    Return a script body by auth_key.

    Body: `{"action": "fetch_script", "auth_key": "...", "user_data": {...}}`.
    The action may be omitted; any other action is rejected.
    """
    action = body.setdefault("action", "fetch_script")
    if action != "fetch_script":
        raise validation_error("Invalid request")
    result = await dispatcher.fetch_script(body)
    return JSONResponse(result.model_dump(mode="json", exclude_none=True))
