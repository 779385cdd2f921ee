"""FastAPI application factory."""

from fastapi import FastAPI

from stagcompose.api import api_router


def create_api_app() -> FastAPI:
    """Create the API application with all routes mounted at the root."""
    app = FastAPI(title="Stagcompose API")
    app.include_router(api_router)
    return app
