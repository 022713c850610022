"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components for one poll cycle:
fetch, resolve, classify, notify, persist.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from src.core.classifier import Classification, ClassificationResult, classify_batch
from src.core.config import Config
from src.core.dedup import changed_fields
from src.core.earthquake import QuakeRecord
from src.core.formatter import format_matrix_message, format_quake_summary
from src.core.ledger import coarse_key, fine_key
from src.core.temporal import local_now
from src.shell.ledger_store import JsonLedgerStore
from src.shell.matrix_client import MatrixClient
from src.shell.phivolcs_client import PhivolcsClient


logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Result of sending a single notification.

    Attributes:
        classification: The classified record that was announced
        success: Whether the notification was sent successfully
        error: Error message if failed
    """
    classification: ClassificationResult
    success: bool
    error: str | None = None


@dataclass
class ProcessingResult:
    """Result of a complete poll cycle.

    Attributes:
        quakes_fetched: Records scraped this cycle
        counts: Number of records per classification
        notifications_sent: Successfully sent notifications
        notifications_failed: Failed notification attempts
        errors: Any errors that occurred
        fetch_failed: True if the cycle was skipped because fetching failed
    """
    quakes_fetched: int = 0
    counts: dict[Classification, int] = field(default_factory=dict)
    notifications_sent: list[NotificationResult] = field(default_factory=list)
    notifications_failed: list[NotificationResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    fetch_failed: bool = False

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    def count(self, kind: Classification) -> int:
        """Number of records with the given classification."""
        return self.counts.get(kind, 0)

    @property
    def summary(self) -> str:
        """Human-readable summary of the processing result."""
        return (
            f"Fetched {self.quakes_fetched} quakes, "
            f"{self.count(Classification.NEW)} new, "
            f"{self.count(Classification.REVISED)} revised, "
            f"{self.count(Classification.DUPLICATE)} duplicate, "
            f"{self.count(Classification.INSIGNIFICANT)} insignificant, "
            f"{len(self.notifications_sent)} notifications sent, "
            f"{len(self.notifications_failed)} failed"
        )


class Orchestrator:
    """Coordinates quake monitoring and notification.

    This class wires together:
    - PHIVOLCS client (fetches the quake table)
    - Core functions (identity resolution, classification, formatting)
    - Ledger stores (last-poll and notified snapshots)
    - Matrix client (sends notifications)
    """

    def __init__(
        self,
        config: Config,
        phivolcs_client: PhivolcsClient | None = None,
        matrix_client: MatrixClient | None = None,
        last_poll_store: JsonLedgerStore | None = None,
        notified_store: JsonLedgerStore | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            phivolcs_client: PHIVOLCS client (created if not provided)
            matrix_client: Matrix client (created if not provided)
            last_poll_store: Last-poll ledger store (created if not provided)
            notified_store: Notified ledger store (created if not provided)
        """
        self.config = config
        self.phivolcs_client = phivolcs_client or PhivolcsClient(
            base_url=config.source_url,
            timeout=config.fetch_timeout_seconds,
            verify_tls=config.verify_tls,
        )
        self.matrix_client = matrix_client or MatrixClient(config.matrix)

        data_dir = Path(config.data_dir)
        self.last_poll_store = last_poll_store or JsonLedgerStore(
            data_dir / config.last_poll_file
        )
        self.notified_store = notified_store or JsonLedgerStore(
            data_dir / config.notified_file
        )

    def _fetch_quakes(self) -> list[QuakeRecord]:
        """Fetch and parse the latest quakes."""
        return self.phivolcs_client.fetch_quakes(limit=self.config.parse_limit)

    def _send_notification(self, result: ClassificationResult) -> NotificationResult:
        """Send a notification for a new or revised quake.

        Args:
            result: Classification to announce

        Returns:
            NotificationResult indicating success or failure
        """
        # Format message (pure core function)
        payload = format_matrix_message(
            result.quake,
            is_revision=result.is_revision,
            previous=result.previous,
        )

        # Send via shell
        response = self.matrix_client.send_message(payload)

        return NotificationResult(
            classification=result,
            success=response.success,
            error=response.error,
        )

    def _notify(self, results: list[ClassificationResult]) -> list[NotificationResult]:
        """Announce new quakes first, then revisions, oldest first.

        Scraped batches are newest first, so each group is walked in
        reverse to post in chronological order.
        """
        new = [r for r in results if r.kind == Classification.NEW]
        revised = [r for r in results if r.kind == Classification.REVISED]
        outcomes = []

        for result in list(reversed(new)) + list(reversed(revised)):
            if result.is_revision:
                changed = changed_fields(result.previous, result.quake) if result.previous else []
                logger.info(
                    "🔁 Earthquake bulletin update: %s | M%s → M%s | %s (changed: %s)",
                    result.quake.timestamp,
                    result.previous.magnitude if result.previous else "?",
                    result.quake.magnitude,
                    result.quake.location,
                    ", ".join(changed) or "none",
                )
            else:
                logger.info("🆕 New quake detected: %s", format_quake_summary(result.quake))

            outcome = self._send_notification(result)
            outcomes.append(outcome)

            if not outcome.success:
                logger.error(
                    "Failed to send notification for %s: %s",
                    format_quake_summary(result.quake),
                    outcome.error,
                )

        return outcomes

    def process(self, now: datetime | None = None) -> ProcessingResult:
        """Run a complete poll cycle.

        This is the main entry point that:
        1. Fetches the latest quakes from PHIVOLCS
        2. Loads the last-poll and notified ledgers
        3. Classifies each quake (new / revised / duplicate / insignificant)
        4. Sends notifications
        5. Persists the updated ledgers

        Args:
            now: Current local time (defaults to Philippine time now)

        Returns:
            ProcessingResult with details of what happened
        """
        now = now or local_now()
        errors: list[str] = []

        # Step 1: Fetch quakes
        try:
            quakes = self._fetch_quakes()
        except Exception as e:
            error_msg = f"Failed to fetch quakes: {e}"
            logger.error(error_msg)
            return ProcessingResult(errors=[error_msg], fetch_failed=True)

        # Step 2: Load ledgers
        last_poll = self.last_poll_store.load(coarse_key)
        notified = self.notified_store.load(fine_key)

        # Step 3: Classify (pure core function)
        outcome = classify_batch(
            quakes,
            last_poll,
            notified,
            self.config.thresholds,
            self.config.matching,
            now=now,
            retention_months=self.config.retention_months,
        )

        counts = {kind: len(outcome.of_kind(kind)) for kind in Classification}

        # Step 4: Send notifications
        sent: list[NotificationResult] = []
        failed: list[NotificationResult] = []

        if outcome.to_notify:
            for result in self._notify(outcome.to_notify):
                (sent if result.success else failed).append(result)
        else:
            logger.info("No new or updated earthquakes detected")

        # Step 5: Persist ledgers
        if outcome.notified_changed:
            if not self.notified_store.save(outcome.notified_snapshot):
                errors.append("Failed to save notified ledger")

        if not self.last_poll_store.save(outcome.last_poll_snapshot):
            errors.append("Failed to save last-poll ledger")

        return ProcessingResult(
            quakes_fetched=len(quakes),
            counts=counts,
            notifications_sent=sent,
            notifications_failed=failed,
            errors=errors,
        )
