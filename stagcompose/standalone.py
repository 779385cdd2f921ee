"""Standalone entry point for the Stagcompose API.

Run:
    python -m stagcompose.standalone

Environment variables:
    STAGCOMPOSE_HOST: Interface to bind (default: 0.0.0.0)
    STAGCOMPOSE_PORT: Port to run on (default: 8080)
"""

import logging

import uvicorn
from fastapi import FastAPI

from .app import create_api_app
from .config import settings


def create_standalone_app() -> FastAPI:
    """Create the standalone application with the API under /api."""
    app = FastAPI(title="Stagcompose")
    app.mount("/api", create_api_app())
    return app


def main() -> None:
    """Run the standalone server."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    uvicorn.run(create_standalone_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
