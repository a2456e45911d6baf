"""ASGI middleware opening one transaction per HTTP request."""

import uuid
from typing import Any, Awaitable, Callable, MutableMapping

from ..app import IMonitor, Monitor
from ..errors import ApptraceError
from ..logging_config import get_logger

logger = get_logger(__name__)

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

PROCESS_EVENT_NAME = "process_action.asgi"
REQUEST_ID_HEADER = b"x-request-id"


class ApptraceMiddleware:
    """Pure ASGI middleware, so the app runs in the task that owns the transaction."""

    def __init__(self, app: ASGIApp, monitor: Monitor):
        self.app = app
        self.monitor: IMonitor = monitor

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        transaction_id = _request_id(scope) or str(uuid.uuid4())
        try:
            transaction = self.monitor.create_transaction(transaction_id, _environ(scope))
        except ApptraceError as e:
            logger.warning("Request not monitored: %s", e)
            await self.app(scope, receive, send)
            return

        try:
            payload = {"path": scope.get("path"), "method": scope.get("method")}
            with self.monitor.instrument(PROCESS_EVENT_NAME, payload):

                async def send_wrapper(message: Message) -> None:
                    if message["type"] == "http.response.start":
                        payload["status"] = message["status"]
                    await send(message)

                try:
                    await self.app(scope, receive, send_wrapper)
                finally:
                    # Routing has filled in the endpoint by now
                    payload.update(_endpoint_labels(scope))
        except Exception as e:
            transaction.add_exception(e)
            raise
        finally:
            transaction.complete()


def _request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER:
            return value.decode("latin-1").strip() or None
    return None


def _environ(scope: Scope) -> dict[str, str]:
    """WSGI-style environ for the request view."""
    environ = {
        "REQUEST_METHOD": scope.get("method", "GET"),
        "PATH_INFO": scope.get("path", "/"),
        "QUERY_STRING": scope.get("query_string", b"").decode("latin-1"),
    }
    if scope.get("server"):
        environ["SERVER_NAME"] = str(scope["server"][0])
    if scope.get("client"):
        environ["REMOTE_ADDR"] = str(scope["client"][0])

    for name, value in scope.get("headers", []):
        key = name.decode("latin-1").upper().replace("-", "_")
        if key not in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            key = f"HTTP_{key}"
        environ[key] = value.decode("latin-1")
    return environ


def _endpoint_labels(scope: Scope) -> dict[str, str]:
    endpoint = scope.get("endpoint")
    if endpoint is None:
        return {}
    return {
        "controller": getattr(endpoint, "__module__", None) or "app",
        "action": getattr(endpoint, "__name__", None) or type(endpoint).__name__,
    }
