"""HTTP API for remote-controlled composition sessions."""

from .router import api_router

__all__ = ['api_router']
