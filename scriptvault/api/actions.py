"""Action endpoint: every state-changing call is POST {"action": ..., ...}."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from scriptvault.api.deps import get_action_body, get_dispatcher
from scriptvault.services.dispatcher import ActionDispatcher

router = APIRouter()


@router.post("")
async def post_action(
    body: Annotated[dict[str, Any], Depends(get_action_body)],
    dispatcher: Annotated[ActionDispatcher, Depends(get_dispatcher)],
) -> JSONResponse:
    """
    Dispatch one action.

    Supported actions: login, register_user, generate_access_code,
    list_access_codes, create_user, list_users, verify_session, logout,
    upload_script, fetch_script, list_scripts.

    Responses always carry `success`; failures add a `message`.
    """
    result = await dispatcher.dispatch(body)
    return JSONResponse(result.model_dump(mode="json", exclude_none=True))
