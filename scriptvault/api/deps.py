"""Request dependencies: the app-owned dispatcher and the JSON action body."""

import json
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scriptvault.core.errors import validation_error
from scriptvault.services.dispatcher import ActionDispatcher

security = HTTPBearer(auto_error=False)


def get_dispatcher(request: Request) -> ActionDispatcher:
    """The dispatcher created in the app lifespan (one session map per process)."""
    return request.app.state.dispatcher


async def get_action_body(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict[str, Any]:
    """
    Parse the JSON object body. A Bearer token fills in session_token when the
    body does not carry one.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise validation_error("Request body must be valid JSON.") from e
    if not isinstance(body, dict):
        raise validation_error("Request body must be a JSON object.")
    if credentials is not None and not body.get("session_token"):
        body["session_token"] = credentials.credentials
    return body
