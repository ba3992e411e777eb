"""FastAPI application for the workflow gateway -- workflow REST endpoints,
artifact downloads and SSE log streaming."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from gateway.artifacts import ArtifactFetcher, CredentialResolver
from gateway.config.settings import Settings
from gateway.errors import GatewayError
from gateway.kube import ControlPlaneClient
from gateway.storage import S3Storage
from gateway.streaming import adapt_text, stream_server_events
from gateway.ui import SPAStaticFiles

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    code: str
    message: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_control_plane(request: Request) -> ControlPlaneClient:
    control_plane = getattr(request.app.state, "control_plane", None)
    if control_plane is None:
        raise RuntimeError("Control plane client is not initialized (lifespan not executed).")
    return control_plane


def get_artifact_fetcher(
    request: Request, control_plane: ControlPlaneClient = Depends(get_control_plane)
) -> ArtifactFetcher:
    return ArtifactFetcher(
        workflows=control_plane,
        credentials=CredentialResolver(control_plane),
        storage=request.app.state.storage,
    )


router = APIRouter()


@router.get("/api/workflows")
async def list_workflows(
    status: list[str] = Query(default=[]),
    settings: Settings = Depends(get_settings),
    control_plane: ControlPlaneClient = Depends(get_control_plane),
) -> dict[str, Any]:
    """List workflows in the configured namespace, newest first."""
    return await control_plane.list_workflows(settings.namespace, phases=status)


@router.get("/api/workflows/{namespace}/{name}")
async def get_workflow(
    namespace: str,
    name: str,
    control_plane: ControlPlaneClient = Depends(get_control_plane),
) -> dict[str, Any]:
    return await control_plane.get_workflow(namespace, name)


@router.get("/api/workflows/{namespace}/{name}/artifacts/{node_name}/{artifact_name}")
async def download_artifact(
    namespace: str,
    name: str,
    node_name: str,
    artifact_name: str,
    fetcher: ArtifactFetcher = Depends(get_artifact_fetcher),
) -> Response:
    download = await fetcher.fetch(namespace, name, node_name, artifact_name)
    return Response(
        content=download.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": download.content_disposition},
    )


@router.get("/api/steps/{namespace}/{name}/logs")
async def stream_step_logs(
    namespace: str,
    name: str,
    settings: Settings = Depends(get_settings),
    control_plane: ControlPlaneClient = Depends(get_control_plane),
):
    """SSE endpoint -- streams the step pod's log as it is written."""
    stream = await control_plane.stream_pod_log(
        namespace, name, container=settings.log_container, follow=True
    )
    return stream_server_events(adapt_text(stream), formatter=str)


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    # Backend failures are logged where they are raised, with their cause.
    body = ErrorResponse(code=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    body = ErrorResponse(code="INTERNAL_ERROR", message="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump())


def create_app(
    settings: Optional[Settings] = None,
    control_plane: Optional[ControlPlaneClient] = None,
    storage: Optional[S3Storage] = None,
) -> FastAPI:
    """Build the application.

    Collaborators that are not passed in are created once per process:
    the storage client here, the control-plane client in the lifespan
    handler (connecting needs the event loop).
    """
    settings = settings or Settings()
    logging.getLogger("gateway").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        owned: Optional[ControlPlaneClient] = None
        if app.state.control_plane is None:
            owned = await ControlPlaneClient.connect(settings)
            app.state.control_plane = owned
        try:
            yield
        finally:
            if owned is not None:
                await owned.close()
                app.state.control_plane = None

    app = FastAPI(title="Workflow Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.control_plane = control_plane
    app.state.storage = storage or S3Storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)

    if settings.ui_dist:
        app.mount("/", SPAStaticFiles(directory=settings.ui_dist), name="ui")

    return app


app = create_app()
