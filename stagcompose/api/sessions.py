"""Session-scoped editor API endpoints.

All operations use the URL pattern /sessions/{session_id}/...
where session_id is a session UUID or "current" for the most recently
used session.
"""

import io
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field

from stagcompose.config import settings
from stagcompose.exceptions import (
    ImportDecodeError,
    SessionNotFoundError,
    UnsupportedExportFormatError,
)
from stagcompose.sessions import EditorSession, session_manager

router = APIRouter(tags=["sessions"])


# --- Helper Functions ---


def _resolve_session(session_id: str) -> EditorSession:
    """Resolve session_id or raise a 404."""
    try:
        return session_manager.resolve(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _state(session: EditorSession) -> dict:
    return session.editor.to_api_dict()


# --- Request Models ---


class SessionCreateRequest(BaseModel):
    """Request body for creating a session."""

    width: int = Field(default=settings.CANVAS_WIDTH, ge=1)
    height: int = Field(default=settings.CANVAS_HEIGHT, ge=1)


class CanvasResizeRequest(BaseModel):
    """Request body for resizing the canvas."""

    width: int = Field(ge=1)
    height: int = Field(ge=1)


class SelectionRequest(BaseModel):
    """Request body for selecting a layer by index (null clears)."""

    index: int | None = None


class TransformUpdateRequest(BaseModel):
    """Request body for a numeric transform edit of the selected layer."""

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    rotation: float | None = None


class VisibilityRequest(BaseModel):
    """Request body for showing or hiding a layer."""

    visible: bool


class PointerEventRequest(BaseModel):
    """Pointer event in canvas coordinates."""

    type: Literal["down", "move", "up", "leave"]
    x: float | None = None
    y: float | None = None


class TouchEventRequest(BaseModel):
    """Touch event with concurrent contact points."""

    type: Literal["start", "move", "end"]
    touches: list[tuple[float, float]] = []


class WheelEventRequest(BaseModel):
    """Wheel event; negative delta_y zooms in."""

    delta_y: float
    x: float = 0.0
    y: float = 0.0


# --- Session Endpoints ---


@router.get("/sessions")
async def list_sessions() -> dict:
    """List all sessions."""
    return {"sessions": [s.to_summary() for s in session_manager.get_all()]}


@router.post("/sessions", status_code=201)
async def create_session(request: SessionCreateRequest | None = None) -> dict:
    """Create a session with an empty canvas."""
    request = request or SessionCreateRequest()
    session = session_manager.create(request.width, request.height)
    return session.to_detail()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> dict:
    """Get session details including the ordered layer list."""
    return _resolve_session(session_id).to_detail()


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    """Close a session."""
    session = _resolve_session(session_id)
    session_manager.unregister(session.id)
    return {"success": True}


# --- Canvas ---


@router.put("/sessions/{session_id}/canvas")
async def resize_canvas(session_id: str, request: CanvasResizeRequest) -> dict:
    """Change the canvas extent; layers are kept."""
    session = _resolve_session(session_id)
    async with session.lock:
        session.editor.resize_canvas(request.width, request.height)
        return _state(session)


@router.post("/sessions/{session_id}/canvas/reset")
async def reset_canvas(session_id: str) -> dict:
    """Remove all layers and the selection."""
    session = _resolve_session(session_id)
    async with session.lock:
        session.editor.reset_canvas()
        return _state(session)


# --- Layers ---


@router.post("/sessions/{session_id}/layers", status_code=201)
async def import_layer(
    session_id: str,
    request: Request,
    filename: str = Query(default="Layer"),
) -> dict:
    """Import an image or SVG file sent as the raw request body."""
    session = _resolve_session(session_id)
    body = await request.body()

    if not body:
        raise HTTPException(status_code=400, detail="Empty body")
    if len(body) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload too large")

    async with session.lock:
        try:
            layer = await session.editor.import_file_async(body, filename)
        except ImportDecodeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {
            "layer": layer.to_api_dict(include_content=False),
            **_state(session),
        }


@router.post("/sessions/{session_id}/selection")
async def select_layer(session_id: str, request: SelectionRequest) -> dict:
    """Select a layer by index or clear the selection."""
    session = _resolve_session(session_id)
    async with session.lock:
        if not session.editor.select(request.index):
            raise HTTPException(status_code=400, detail=f"Invalid layer index {request.index}")
        return _state(session)


@router.patch("/sessions/{session_id}/layers/selected/transform")
async def update_transform(session_id: str, request: TransformUpdateRequest) -> dict:
    """Edit position, size or rotation of the selected layer."""
    session = _resolve_session(session_id)
    async with session.lock:
        if not session.editor.update_selected_transform(**request.model_dump()):
            raise HTTPException(status_code=409, detail="No layer selected")
        return _state(session)


@router.put("/sessions/{session_id}/layers/{layer_id}/visibility")
async def set_visibility(session_id: str, layer_id: str, request: VisibilityRequest) -> dict:
    """Show or hide a layer."""
    session = _resolve_session(session_id)
    async with session.lock:
        if not session.editor.set_visibility(layer_id, request.visible):
            raise HTTPException(status_code=404, detail=f"Layer '{layer_id}' not found")
        return _state(session)


@router.post("/sessions/{session_id}/layers/selected/move-up")
async def move_up(session_id: str) -> dict:
    """Move the selected layer one step toward the top."""
    session = _resolve_session(session_id)
    async with session.lock:
        moved = session.editor.move_selected_up()
        return {"moved": moved, **_state(session)}


@router.post("/sessions/{session_id}/layers/selected/move-down")
async def move_down(session_id: str) -> dict:
    """Move the selected layer one step toward the bottom."""
    session = _resolve_session(session_id)
    async with session.lock:
        moved = session.editor.move_selected_down()
        return {"moved": moved, **_state(session)}


@router.delete("/sessions/{session_id}/layers/selected")
async def remove_selected(session_id: str) -> dict:
    """Delete the selected layer."""
    session = _resolve_session(session_id)
    async with session.lock:
        removed = session.editor.remove_selected()
        if removed is None:
            raise HTTPException(status_code=409, detail="No layer selected")
        return {"removed": removed.id, **_state(session)}


# --- Input Events ---


@router.post("/sessions/{session_id}/events/pointer")
async def pointer_event(session_id: str, request: PointerEventRequest) -> dict:
    """Feed a pointer event to the gesture controller."""
    session = _resolve_session(session_id)
    editor = session.editor
    async with session.lock:
        if request.type == "down":
            changed = editor.pointer_down(request.x, request.y)
        elif request.type == "move":
            changed = editor.pointer_move(request.x, request.y)
        elif request.type == "up":
            changed = editor.pointer_up()
        else:
            changed = editor.pointer_leave()
        return {"changed": changed, **_state(session)}


@router.post("/sessions/{session_id}/events/touch")
async def touch_event(session_id: str, request: TouchEventRequest) -> dict:
    """Feed a touch event to the gesture controller."""
    session = _resolve_session(session_id)
    editor = session.editor
    async with session.lock:
        if request.type == "start":
            changed = editor.touch_start(request.touches)
        elif request.type == "move":
            changed = editor.touch_move(request.touches)
        else:
            changed = editor.touch_end()
        return {"changed": changed, **_state(session)}


@router.post("/sessions/{session_id}/events/wheel")
async def wheel_event(session_id: str, request: WheelEventRequest) -> dict:
    """Feed a wheel step to the gesture controller."""
    session = _resolve_session(session_id)
    async with session.lock:
        changed = session.editor.wheel(request.delta_y, request.x, request.y)
        return {"changed": changed, **_state(session)}


# --- Output ---


@router.get("/sessions/{session_id}/frame")
async def get_frame(session_id: str) -> Response:
    """The live editor surface, including selection decoration, as PNG."""
    session = _resolve_session(session_id)
    async with session.lock:
        buffer = io.BytesIO()
        session.editor.surface.save(buffer, format='PNG')
    return Response(content=buffer.getvalue(), media_type="image/png")


@router.get("/sessions/{session_id}/export")
async def export_composite(session_id: str, format: str = Query(default="png")) -> Response:
    """Export the composition as a raster image or SVG document."""
    session = _resolve_session(session_id)
    async with session.lock:
        try:
            artifact = session.editor.export_composite(format)
        except UnsupportedExportFormatError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(
        content=artifact.data,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
