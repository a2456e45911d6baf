"""Deploy hook: announces a deploy to the collector when reporting is active."""

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from ..config import Config, load_config
from ..logging_config import get_logger, setup_logging
from ..marker import Marker


def notify_deploy(
    revision: str,
    repository: str,
    environment: str | None = None,
    root_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    logger: logging.Logger | None = None,
    config: Config | None = None,
) -> bool:
    """
    Transmit a deploy marker if the configuration for environment is active.

    A preloaded config skips loading from root_path, environment and overrides.
    Returns True when the collector accepted the marker.
    """
    logger = logger or get_logger(__name__)
    user = os.getenv("USER") or os.getenv("USERNAME")

    config = config or load_config(root_path, environment, overrides)
    if not config.is_active:
        logger.info(
            "apptrace not active for %s, skipping deploy marker", config.environment
        )
        return False

    marker_data = {
        "revision": revision,
        "repository": repository,
        "user": user,
    }
    return Marker(marker_data, config, logger).transmit()


def main(argv: list[str] | None = None) -> int:
    """Command line entry point for apptrace-deploy."""
    parser = argparse.ArgumentParser(
        prog="apptrace-deploy", description="Notify apptrace of a deploy"
    )
    parser.add_argument("--revision", default=os.getenv("APPTRACE_REVISION"))
    parser.add_argument("--repository", default=os.getenv("APPTRACE_REPOSITORY"))
    parser.add_argument("--environment", default=None)
    parser.add_argument("--root-path", default=None)
    args = parser.parse_args(argv)

    if not args.revision or not args.repository:
        parser.error("--revision and --repository are required")

    config = load_config(args.root_path, args.environment)
    setup_logging(log_file=config.resolved_log_path())
    ok = notify_deploy(
        revision=args.revision,
        repository=args.repository,
        config=config,
    )
    return 0 if ok else 1
