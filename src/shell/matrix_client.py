"""Matrix Client - Imperative Shell.

This module handles HTTP communication with a Matrix homeserver.
All I/O is contained here; message formatting is in the core module.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from src.core.config import MatrixConfig


logger = logging.getLogger(__name__)


@dataclass
class MatrixResponse:
    """Response from a Matrix send attempt.

    Attributes:
        success: Whether the message was sent successfully
        status_code: HTTP status code of the last attempt (0 if none)
        error: Error message if failed
        attempts: Number of HTTP attempts made
    """
    success: bool
    status_code: int
    error: str | None = None
    attempts: int = 0


class MatrixClient:
    """Client for posting messages to a Matrix room.

    This is part of the imperative shell - it handles HTTP I/O.
    Failed sends are retried in place with a backoff of attempt²
    seconds, up to config.max_attempts attempts.
    """

    def __init__(
        self,
        config: MatrixConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize Matrix client.

        Args:
            config: Homeserver, room and credentials
            sleep: Sleep function used between retries
        """
        self.config = config or MatrixConfig()
        self.sleep = sleep

    def build_url(self, txn_id: str) -> str:
        """Build the m.room.message send URL for a transaction."""
        return (
            f"{self.config.base_url.rstrip('/')}/_matrix/client/v3/rooms/"
            f"{quote(self.config.room_id, safe='')}/send/m.room.message/"
            f"{quote(txn_id, safe='')}"
        )

    def send_message(self, payload: dict[str, Any]) -> MatrixResponse:
        """Send a message to the configured room.

        This method performs HTTP I/O and never raises.

        Args:
            payload: m.room.message content (from formatter)

        Returns:
            MatrixResponse indicating success or failure
        """
        if not self.config.is_configured:
            logger.error("Missing Matrix configuration, message not sent")
            return MatrixResponse(
                success=False,
                status_code=0,
                error="Missing Matrix configuration",
            )

        # Same transaction ID for every retry so the homeserver dedups it
        txn_id = str(time.time_ns() // 1_000_000)
        url = self.build_url(txn_id)
        headers = {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }

        status_code = 0
        error = None
        max_attempts = max(1, self.config.max_attempts)

        for attempt in range(1, max_attempts + 1):
            try:
                response = requests.put(
                    url,
                    json=payload,
                    headers=headers,
                    timeout=self.config.timeout_seconds,
                )
                status_code = response.status_code

                if status_code < 300:
                    logger.info("Message sent to Matrix room (attempt %d)", attempt)
                    return MatrixResponse(
                        success=True,
                        status_code=status_code,
                        attempts=attempt,
                    )

                error = f"HTTP {status_code}: {response.text.strip()}"
                logger.warning(
                    "Matrix send attempt %d failed (HTTP %d): %s",
                    attempt,
                    status_code,
                    response.text.strip(),
                )

            except requests.Timeout:
                error = "Request timed out"
                logger.warning("Matrix send attempt %d timed out", attempt)
            except requests.RequestException as e:
                error = str(e)
                logger.warning("Matrix send attempt %d failed (network error): %s", attempt, e)

            if attempt < max_attempts:
                self.sleep(attempt * attempt)

        logger.error("Matrix send failed after %d attempts: %s", max_attempts, error)
        return MatrixResponse(
            success=False,
            status_code=status_code,
            error=error,
            attempts=max_attempts,
        )
