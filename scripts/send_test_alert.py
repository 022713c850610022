#!/usr/bin/env python3
"""Send a test alert to the configured Matrix room.

⚠️  WARNING: This script sends a REAL message to the configured room!

This script creates a synthetic quake and sends it using the same
formatting as production alerts. A [TEST] marker is added.

Usage:
    # Dry run (print the message only, no send)
    python scripts/send_test_alert.py --dry-run

    # Send a new-quake alert
    python scripts/send_test_alert.py

    # Send a bulletin revision alert (magnitude 5.5 revised to 5.8)
    python scripts/send_test_alert.py --revision --revised-magnitude 5.8

Environment:
    CONFIG_PATH: Path to a YAML config file (optional)
    MATRIX_BASE_URL, MATRIX_ROOM_ID, MATRIX_ACCESS_TOKEN: Matrix target
"""

import argparse
import dataclasses
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.earthquake import QuakeRecord, make_record
from src.core.formatter import format_matrix_message
from src.core.temporal import format_timestamp, local_now
from src.shell.config_loader import load_config, load_config_from_env
from src.shell.matrix_client import MatrixClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_quake(
    magnitude: float = 5.5,
    location: str = "015 km N 45° W of Tabuelan (Cebu)",
    latitude: float = 10.92,
    longitude: float = 123.79,
) -> QuakeRecord:
    """Create a synthetic test quake.

    Args:
        magnitude: Quake magnitude
        location: Location description
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Synthetic QuakeRecord
    """
    return make_record(
        date_text=format_timestamp(local_now()),
        latitude=f"{latitude:.2f}",
        longitude=f"{longitude:.2f}",
        depth="010",
        magnitude=f"{magnitude:.1f}",
        location=location,
        bulletin="https://earthquake.phivolcs.dost.gov.ph/",
    )


def _load_config():
    config_path = os.environ.get("CONFIG_PATH")
    if config_path:
        return load_config(config_path)
    return load_config_from_env()


def main():
    parser = argparse.ArgumentParser(
        description="Send a test alert to the configured Matrix room",
        epilog="⚠️  WARNING: This sends a REAL message! Use --dry-run first.",
    )
    parser.add_argument(
        "--magnitude",
        type=float,
        default=5.5,
        help="Quake magnitude for test (default: 5.5)",
    )
    parser.add_argument(
        "--location",
        type=str,
        default="015 km N 45° W of Tabuelan (Cebu)",
        help="Location description",
    )
    parser.add_argument(
        "--latitude",
        type=float,
        default=10.92,
        help="Epicenter latitude (default: 10.92)",
    )
    parser.add_argument(
        "--longitude",
        type=float,
        default=123.79,
        help="Epicenter longitude (default: 123.79)",
    )
    parser.add_argument(
        "--revision",
        action="store_true",
        help="Send a bulletin revision alert instead of a new-quake alert",
    )
    parser.add_argument(
        "--revised-magnitude",
        type=float,
        default=None,
        help="Magnitude after revision (default: magnitude + 0.3)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )
    args = parser.parse_args()

    quake = create_test_quake(
        magnitude=args.magnitude,
        location=args.location,
        latitude=args.latitude,
        longitude=args.longitude,
    )
    previous = None

    if args.revision:
        revised = args.revised_magnitude
        if revised is None:
            revised = args.magnitude + 0.3
        previous = quake
        quake = dataclasses.replace(quake, magnitude=f"{revised:.1f}")

    payload = format_matrix_message(
        quake,
        is_revision=args.revision,
        previous=previous,
        is_test=True,
    )

    logger.info("")
    logger.info("Test message:")
    for line in payload["body"].splitlines():
        logger.info("  %s", line)
    logger.info("")

    if args.dry_run:
        logger.info("DRY RUN - message not sent")
        return 0

    config = _load_config()
    if not config.matrix.is_configured:
        logger.error("Matrix is not configured (MATRIX_BASE_URL, MATRIX_ROOM_ID, MATRIX_ACCESS_TOKEN)")
        return 1

    response = MatrixClient(config.matrix).send_message(payload)

    if response.success:
        logger.info("✓ Test alert sent (%d attempt(s))", response.attempts)
        return 0

    logger.error("✗ Failed to send test alert: %s", response.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
