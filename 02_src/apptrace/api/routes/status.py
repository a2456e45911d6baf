"""Status API routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from ...app import Monitor


class StatusResponse(BaseModel):
    """Response model for monitor status."""

    active: bool
    environment: str
    open_transactions: int
    queued_records: int


def create_status_router(monitor: Monitor) -> APIRouter:
    """Create status router."""
    router = APIRouter(prefix="/api/apptrace", tags=["apptrace"])

    @router.get("/status", response_model=StatusResponse)
    async def get_status() -> dict:
        """Report open transactions and pending records."""
        return {
            "active": monitor.config.is_active,
            "environment": monitor.config.environment,
            "open_transactions": len(monitor.registry),
            "queued_records": monitor.agent.queue_length,
        }

    return router
