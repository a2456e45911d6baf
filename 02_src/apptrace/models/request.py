"""Structured view of an incoming request environment."""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from ..errors import MalformedEnvironment

# WSGI keys that carry headers without the HTTP_ prefix
_UNPREFIXED_HEADERS = {"CONTENT_TYPE": "content-type", "CONTENT_LENGTH": "content-length"}


class RequestView(BaseModel):
    """Request context attached to a transaction."""

    model_config = ConfigDict(frozen=True)

    method: StrictStr = "GET"
    path: StrictStr = "/"
    query_string: StrictStr = ""
    server_name: StrictStr | None = None
    remote_addr: StrictStr | None = None
    headers: dict[StrictStr, StrictStr] = Field(default_factory=dict)

    @property
    def fullpath(self) -> str:
        """Path including the query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path


def build_request_view(environment: Mapping) -> RequestView:
    """Build a RequestView from a WSGI-style environ mapping.

    Keys that are not part of the CGI/WSGI vocabulary are ignored. Raises
    MalformedEnvironment when the input is not a mapping or a known key holds
    a value of the wrong type.
    """
    if not isinstance(environment, Mapping):
        raise MalformedEnvironment(
            f"Request environment must be a mapping, got {type(environment).__name__}"
        )

    headers = {}
    for key, value in environment.items():
        if not isinstance(key, str):
            continue
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
        elif key in _UNPREFIXED_HEADERS:
            headers[_UNPREFIXED_HEADERS[key]] = value

    fields = {
        "method": environment.get("REQUEST_METHOD"),
        "path": environment.get("PATH_INFO"),
        "query_string": environment.get("QUERY_STRING"),
        "server_name": environment.get("SERVER_NAME"),
        "remote_addr": environment.get("REMOTE_ADDR"),
    }
    try:
        return RequestView(
            headers=headers,
            **{name: value for name, value in fields.items() if value is not None},
        )
    except ValidationError as e:
        raise MalformedEnvironment(str(e)) from e
