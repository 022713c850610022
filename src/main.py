"""Process Entry Point.

This module provides the long-running poll loop. It's a thin wrapper
that loads configuration, validates it, and invokes the orchestrator
once per poll interval.
"""

import logging
import os
import time
from collections.abc import Callable

from src.core.config import Config, ConfigurationError, validate_config
from src.orchestrator import Orchestrator, ProcessingResult
from src.shell.config_loader import load_config, load_config_from_env


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    return load_config_from_env()


def check_config(config: Config) -> None:
    """Log validation warnings and fail fast on errors.

    Raises:
        ConfigurationError: If the configuration has critical errors
    """
    result = validate_config(config)

    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)

    if not result.valid:
        for error in result.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        raise ConfigurationError(
            "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        )


def run_cycle(orchestrator: Orchestrator) -> ProcessingResult:
    """Run one poll cycle, turning unexpected exceptions into a failed result."""
    try:
        result = orchestrator.process()
    except Exception as e:
        logger.exception("Unexpected error in poll cycle")
        return ProcessingResult(errors=[str(e)], fetch_failed=True)

    logger.info("Completed: %s", result.summary)
    for error in result.errors:
        logger.error("Error: %s", error)

    return result


def run_forever(
    orchestrator: Orchestrator,
    poll_interval: int,
    error_interval: int,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: int | None = None,
) -> None:
    """Run poll cycles back to back.

    Cycles never overlap. A cycle that could not fetch is retried after
    error_interval; every other cycle waits poll_interval.

    Args:
        orchestrator: Configured orchestrator
        poll_interval: Seconds to sleep after a completed cycle
        error_interval: Seconds to sleep after a failed fetch
        sleep: Sleep function
        max_cycles: Stop after this many cycles (None runs forever)
    """
    cycles = 0

    while max_cycles is None or cycles < max_cycles:
        result = run_cycle(orchestrator)
        cycles += 1

        delay = error_interval if result.fetch_failed else poll_interval
        logger.info("Sleeping for %d seconds before next poll...", delay)
        sleep(delay)


def main() -> None:
    """Start the monitor and poll until the process is stopped."""
    configure_logging()

    config = _get_config()
    check_config(config)

    logger.info("🌋 PHIVOLCS earthquake monitor started")
    logger.info("Parsing up to %d quake entries from %s", config.parse_limit, config.source_url)

    orchestrator = Orchestrator(config)

    try:
        run_forever(
            orchestrator,
            poll_interval=config.poll_interval_seconds,
            error_interval=config.error_retry_seconds,
        )
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
