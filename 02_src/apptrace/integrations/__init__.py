"""Framework integrations."""

from .asgi import ApptraceMiddleware
from .deploy import notify_deploy

__all__ = ["ApptraceMiddleware", "notify_deploy"]
