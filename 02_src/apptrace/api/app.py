"""FastAPI application wiring."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..app import Monitor
from ..integrations import ApptraceMiddleware
from .routes import create_status_router


def monitor_lifespan(monitor: Monitor):
    """Lifespan handler starting and stopping the monitor with the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await monitor.start()
        yield
        await monitor.stop()

    return lifespan


def instrument_app(app: FastAPI, monitor: Monitor) -> FastAPI:
    """Install the request middleware and the status routes."""
    app.add_middleware(ApptraceMiddleware, monitor=monitor)
    app.include_router(create_status_router(monitor))
    return app
