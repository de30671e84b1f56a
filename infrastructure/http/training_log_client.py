"""
HTTP client the device uses to sync finalized sessions to the training API.

Implements the TrainingLogWriter port by POSTing to /training-logs. Transport
failures and 5xx responses are retried with exponential backoff (tenacity);
whatever still fails surfaces as a PersistenceError so the session lands in
the offline queue.
"""

import logging
from typing import List, Optional

import httpx
import pydantic
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from application.exceptions import PersistenceError
from domain.models import LoggedSet, TrainingLog

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT_SECONDS = 1
DEFAULT_MAX_WAIT_SECONDS = 10


class SyncUnavailable(PersistenceError):
    """Raised when the training API cannot be reached or answers 5xx."""


class SyncRejected(PersistenceError):
    """Raised when the training API refuses the log (4xx)."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class HttpTrainingLogClient:
    """
    TrainingLogWriter that syncs over HTTP.

    The server dedups on session id, so a retry after a lost response is safe.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the sync client.

        Args:
            base_url: Base URL of the training API (e.g., "http://localhost:8001")
            api_key: Value for the X-API-Key header ("key:user_id")
            timeout: Request timeout in seconds
            max_attempts: Attempts before giving up on one log
            min_wait_seconds: First backoff delay
            max_wait_seconds: Backoff ceiling
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._min_wait = min_wait_seconds
        self._max_wait = max_wait_seconds
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        return headers

    def _post_once(self, payload: dict) -> TrainingLog:
        url = f"{self._base_url}/training-logs"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            logger.error(f"Training API unavailable: {e}")
            raise SyncUnavailable(f"Training API is not available at {self._base_url}") from e

        if response.status_code >= 500:
            raise SyncUnavailable(
                f"Training API error {response.status_code}: {response.text}"
            )
        if response.status_code >= 400:
            logger.error(f"Training API rejected log: {response.status_code} - {response.text}")
            raise SyncRejected(
                f"Training API rejected log: {response.text}",
                response.status_code,
            )
        try:
            return TrainingLog.model_validate(response.json()["training_log"])
        except (ValueError, KeyError, TypeError, pydantic.ValidationError) as e:
            # Write outcome unknown; the server dedups on session id so a retry is safe
            logger.warning(f"Unreadable response from training API: {e}")
            raise SyncUnavailable(
                f"Training API returned an unreadable response ({response.status_code})"
            ) from e

    def record(self, training_log: TrainingLog, logged_sets: List[LoggedSet]) -> TrainingLog:
        """
        POST one finalized session.

        Raises:
            SyncUnavailable: If every attempt failed on transport or 5xx
            SyncRejected: If the server refused the payload
        """
        payload = {
            "training_log": training_log.model_dump(mode="json"),
            "logged_sets": [s.model_dump(mode="json") for s in logged_sets],
        }
        retrying = Retrying(
            retry=retry_if_exception_type(SyncUnavailable),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=1, min=self._min_wait, max=self._max_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._post_once, payload)
