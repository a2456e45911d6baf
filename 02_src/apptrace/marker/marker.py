"""Deploy marker transmission."""

import logging

import httpx

from ..config import Config
from ..logging_config import get_logger

MARKERS_PATH = "/1/markers"
REQUEST_TIMEOUT = 10.0


class Marker:
    """Announces one deploy (revision, repository, user) to the collector."""

    def __init__(
        self,
        marker_data: dict,
        config: Config,
        logger: logging.Logger | None = None,
        client: httpx.Client | None = None,
    ):
        self.marker_data = marker_data
        self._config = config
        self._logger = logger or get_logger(__name__)
        self._client = client

    def transmit(self) -> bool:
        """Post the marker once. Returns True when the collector accepted it."""
        self._logger.info("Notifying apptrace of deploy...")
        try:
            response = self._post()
        except httpx.HTTPError as e:
            self._logger.error(
                "Something went wrong while trying to notify apptrace: %s", e
            )
            return False

        if response.status_code == 200:
            self._logger.info("apptrace has been notified of this deploy!")
            return True

        self._logger.error(
            "Something went wrong while trying to notify apptrace: %s",
            response.status_code,
        )
        return False

    def _post(self) -> httpx.Response:
        url = f"{self._config.endpoint}{MARKERS_PATH}"
        params = {
            "api_key": self._config.push_api_key,
            "environment": self._config.environment,
        }
        if self._client is not None:
            return self._client.post(url, params=params, json=self.marker_data)
        with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
            return client.post(url, params=params, json=self.marker_data)
