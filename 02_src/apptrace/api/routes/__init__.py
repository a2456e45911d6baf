"""API routes."""

from .status import StatusResponse, create_status_router

__all__ = ["StatusResponse", "create_status_router"]
