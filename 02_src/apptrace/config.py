"""Configuration loading and path helpers."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Union

from dotenv import load_dotenv

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "https://push.apptrace.dev"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_FLUSH_INTERVAL = 60.0
DEFAULT_LOG_DIR = "log"
DEFAULT_LOG_FILE = "apptrace.log"

ENV_PREFIX = "APPTRACE_"

PathLike = Union[str, Path]

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Runtime settings for one process."""

    root_path: Path
    environment: str = DEFAULT_ENVIRONMENT
    push_api_key: str | None = None
    endpoint: str = DEFAULT_ENDPOINT
    active: bool = False
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    log_path: Path | None = None

    @property
    def is_active(self) -> bool:
        """Reporting is enabled and a push key is present."""
        return self.active and bool(self.push_api_key)

    def resolved_log_path(self) -> Path:
        """Absolute log file path."""
        return resolve_log_path(self.root_path, self.log_path)


def resolve_log_path(root_path: PathLike, log_path: PathLike | None = None) -> Path:
    """Resolve a log file path against the project root."""
    root = Path(root_path)
    if not log_path:
        return root / DEFAULT_LOG_DIR / DEFAULT_LOG_FILE

    candidate = Path(log_path)
    return candidate if candidate.is_absolute() else root / candidate


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def load_config(
    root_path: PathLike | None = None,
    environment: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """
    Build a Config from .env, APPTRACE_* variables and explicit overrides.

    Args:
        root_path: Project root holding the optional .env file.
                   Defaults to PWD or the current directory.
        environment: Application environment name. Defaults to APPTRACE_ENV.
        overrides: Values that win over everything read from the environment.
                   Unknown keys are logged and ignored.

    Returns:
        Config instance
    """
    root = Path(root_path or os.getenv("PWD") or os.getcwd()).resolve()
    load_dotenv(root / ".env")

    values: dict[str, Any] = {
        "environment": environment or os.getenv(f"{ENV_PREFIX}ENV", DEFAULT_ENVIRONMENT),
        "push_api_key": os.getenv(f"{ENV_PREFIX}PUSH_API_KEY"),
        "endpoint": os.getenv(f"{ENV_PREFIX}ENDPOINT", DEFAULT_ENDPOINT),
        "active": os.getenv(f"{ENV_PREFIX}ACTIVE", "false"),
        "flush_interval": os.getenv(f"{ENV_PREFIX}FLUSH_INTERVAL", DEFAULT_FLUSH_INTERVAL),
        "log_path": os.getenv(f"{ENV_PREFIX}LOG_PATH"),
    }

    known = {f.name for f in fields(Config)}
    for key, value in (overrides or {}).items():
        if key in known:
            values[key] = value
        else:
            logger.warning("Ignoring unknown config option %s", key)

    return Config(
        root_path=root,
        environment=values["environment"],
        push_api_key=values["push_api_key"] or None,
        endpoint=str(values["endpoint"]).rstrip("/"),
        active=_parse_bool(values["active"]),
        flush_interval=float(values["flush_interval"]),
        log_path=Path(values["log_path"]) if values["log_path"] else None,
    )
