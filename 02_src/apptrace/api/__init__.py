"""FastAPI integration module."""

from .app import instrument_app, monitor_lifespan

__all__ = ["instrument_app", "monitor_lifespan"]
