"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scriptvault.api import include_routes
from scriptvault.core.config import Settings, get_settings
from scriptvault.core.errors import ServiceError
from scriptvault.core.object_store import ObjectStore
from scriptvault.core.storage import build_object_store
from scriptvault.services.dispatcher import build_dispatcher
from scriptvault.services.sessions import run_session_sweeper

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError as {"success": false, "message": ...}; internals stay in logs."""
    if exc.cause is not None and exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={
                "path": request.url.path,
                "error_kind": exc.kind.value,
                "cause": type(exc.cause).__name__,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"success": False, "message": "Server error"})


def create_app(settings: Settings | None = None, store: ObjectStore | None = None) -> FastAPI:
    """Build the app; tests pass their own settings and store."""
    settings = settings or get_settings()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        object_store = store if store is not None else build_object_store(settings)
        app.state.dispatcher = build_dispatcher(settings, object_store)
        sweeper: asyncio.Task | None = None
        if settings.SESSION_SWEEP_ENABLED:
            sweeper = asyncio.create_task(
                run_session_sweeper(
                    app.state.dispatcher.sessions, settings.SESSION_SWEEP_INTERVAL_SEC
                )
            )
        logger.info(
            "Script vault started",
            extra={"environment": settings.APP_ENV, "storage": settings.STORAGE_BACKEND},
        )
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
            if store is None:
                await object_store.aclose()

    app = FastAPI(
        title="Script Vault API",
        debug=settings.DEBUG,
        version="0.1.0",
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    include_routes(app, settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Script Vault API"}

    return app


configure_logging(get_settings().LOG_LEVEL)
app = create_app()
