"""Main API router."""

from fastapi import APIRouter

from stagcompose import __version__
from stagcompose.export import supported_formats

from .sessions import router as sessions_router

api_router = APIRouter()


@api_router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@api_router.get("/formats")
async def export_formats():
    """Export formats accepted by /sessions/{id}/export."""
    return {"formats": supported_formats()}


api_router.include_router(sessions_router)
