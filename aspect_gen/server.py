"""
Module: aspect_gen.server
Purpose: FastAPI REST server exposing one re-composition session
Dependencies: fastapi, uvicorn, pydantic

The server holds a single AspectSession. Clients upload a data URI, pick a
ratio, trigger generation, switch views and download the active image.
"""

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
import logging

from aspect_gen import __version__
from aspect_gen.core import AspectSession
from aspect_gen.config import get_config
from aspect_gen.errors import AspectGenError, MalformedImageError, UploadRejectedError
from aspect_gen.schemas import AppStatus, AspectRatio, ImageView, available_ratios
from aspect_gen.utils.uploads import blob_from_data_uri, image_size

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AspectRatioAI API",
    description="Re-compose an uploaded image to a new aspect ratio with Gemini",
    version=__version__,
)

# Global session instance (lazy-created)
_session: Optional[AspectSession] = None


def get_session() -> AspectSession:
    """Get or create the global session."""
    global _session
    if _session is None:
        logger.info("Creating AspectSession...")
        _session = AspectSession()
    return _session


def set_session(session: Optional[AspectSession]) -> None:
    """Replace the global session (None drops it)."""
    global _session
    _session = session


# Request/Response models
class UploadRequest(BaseModel):
    """Request model for selecting a source image."""
    image: str = Field(..., description="Combined image string: data:<type>;base64,<payload>")

    model_config = ConfigDict(json_schema_extra={
        "example": {"image": "data:image/png;base64,iVBORw0KGgo..."}
    })


class RatioRequest(BaseModel):
    ratio: AspectRatio = Field(..., description="Target aspect ratio")


class GenerateRequest(BaseModel):
    """Request model for generation. Omit ratio to use the selected one."""
    ratio: Optional[AspectRatio] = Field(None, description="Target aspect ratio (default: selected ratio)")

    model_config = ConfigDict(json_schema_extra={"example": {"ratio": "16:9"}})


class ViewRequest(BaseModel):
    view: ImageView


class ResetRequest(BaseModel):
    confirm: bool = Field(False, description="Must be true to discard the current images")


class ImageInfo(BaseModel):
    data_uri: str
    width: Optional[int] = None
    height: Optional[int] = None


class StateResponse(BaseModel):
    """Snapshot of the session."""
    status: AppStatus
    active_view: ImageView
    selected_ratio: AspectRatio
    error_message: Optional[str] = None
    original: Optional[ImageInfo] = None
    generated: Optional[ImageInfo] = None


class HealthResponse(BaseModel):
    status: str
    model_id: str
    credential_configured: bool


def _image_info(blob) -> Optional[ImageInfo]:
    if blob is None:
        return None
    size = image_size(blob)
    return ImageInfo(
        data_uri=blob.data_uri,
        width=size[0] if size else None,
        height=size[1] if size else None,
    )


def _state_response(session: AspectSession) -> StateResponse:
    state = session.state
    return StateResponse(
        status=state.status,
        active_view=state.active_view,
        selected_ratio=session.selected_ratio,
        error_message=state.error_message,
        original=_image_info(state.original),
        generated=_image_info(state.generated),
    )


# API Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "AspectRatioAI API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """
    Health check endpoint.

    Reports whether a credential is configured; uploads and viewing work
    without one, only generation needs it.
    """
    config = get_config()
    return HealthResponse(
        status="healthy",
        model_id=config.get_model_id(),
        credential_configured=config.get_api_key() is not None,
    )


@app.get("/ratios", response_model=List[str])
async def ratios():
    return [r.value for r in available_ratios()]


@app.get("/state", response_model=StateResponse)
async def state():
    return _state_response(get_session())


@app.post("/image", response_model=StateResponse)
async def upload_image(request: UploadRequest):
    """
    Select a new source image.

    Clears any generated image and error.
    """
    try:
        blob = blob_from_data_uri(request.image)
    except UploadRejectedError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except MalformedImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = get_session()
    session.select_image(blob)
    return _state_response(session)


@app.post("/ratio", response_model=StateResponse)
async def select_ratio(request: RatioRequest):
    session = get_session()
    if not session.select_ratio(request.ratio):
        raise HTTPException(status_code=409, detail="Cannot change ratio while generating")
    return _state_response(session)


@app.post("/generate", response_model=StateResponse)
async def generate(request: Optional[GenerateRequest] = None):
    """
    Re-compose the source image to the requested ratio.

    Generation failures are reported in the returned state (status ERROR),
    not as HTTP errors.

    Example:
        POST /generate
        {"ratio": "16:9"}
    """
    session = get_session()
    if session.state.original is None:
        raise HTTPException(status_code=409, detail="Upload an image first")
    if session.is_loading:
        raise HTTPException(status_code=409, detail="Generation already in progress")

    ratio = request.ratio if request is not None else None
    await session.start_generation(ratio)
    return _state_response(session)


@app.post("/view", response_model=StateResponse)
async def set_view(request: ViewRequest):
    session = get_session()
    if not session.set_active_view(request.view):
        raise HTTPException(status_code=409, detail=f"No {request.view.value} image to show")
    return _state_response(session)


@app.get("/download")
async def download():
    """
    Download the active image as image-<view>-<timestamp>.png.

    Images Pillow cannot convert (e.g. SVG) are answered with 422.
    """
    session = get_session()
    blob = session.select_download_target()
    if blob is None:
        raise HTTPException(status_code=404, detail="No image to download")

    manager = session.output_manager
    filename = manager.filename_for(session.state.active_view)
    try:
        content = manager.to_png(blob)
    except AspectGenError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return Response(
        content=content,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/reset", response_model=StateResponse)
async def reset(request: ResetRequest):
    """Clear the session. Requires {"confirm": true}."""
    session = get_session()
    if not session.reset(request.confirm):
        raise HTTPException(status_code=400, detail="Reset requires confirmation")
    return _state_response(session)


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False
):
    """
    Run the FastAPI server.

    Args:
        host: Host to bind to
        port: Port to listen on
        reload: Enable auto-reload for development
    """
    import uvicorn

    logger.info(f"Starting AspectRatioAI API server on {host}:{port}")

    uvicorn.run(
        "aspect_gen.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level=get_config().api.get("log_level", "info"),
    )


if __name__ == "__main__":
    import sys

    port = 8000
    if len(sys.argv) > 1:
        port = int(sys.argv[1])

    run_server(port=port, reload=True)
