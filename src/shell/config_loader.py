"""Configuration Loader - Imperative Shell.

This module handles loading configuration from environment variables
and YAML files. All I/O is contained here.

Models (Config, MatrixConfig) are defined in src/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml

from src.core.config import Config, MatrixConfig
from src.core.geo import ThresholdPolicy
from src.core.identity import MatchPolicy


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _resolve_value(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place.

    Args:
        value: Value to resolve
        environ: Environment mapping (os.environ if None)

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    environ = os.environ if environ is None else environ

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _convert(
    raw: Any,
    convert: Callable[[Any], T],
    default: T,
    name: str,
    positive: bool = False,
) -> T:
    """Convert a raw setting, falling back to the default when invalid."""
    if raw is None or raw == "":
        return default

    try:
        value = convert(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid %s value (%s), using default %s", name, raw, default)
        return default

    if positive and value <= 0:
        logger.warning("Invalid %s value (%s), using default %s", name, raw, default)
        return default

    return value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Not a boolean: {value}")


def _parse_thresholds(data: Mapping[str, Any]) -> ThresholdPolicy:
    """Parse the distance-aware magnitude thresholds."""
    defaults = ThresholdPolicy()
    return ThresholdPolicy(
        reference_latitude=_convert(
            data.get("reference_latitude"), float,
            defaults.reference_latitude, "reference_latitude",
        ),
        reference_longitude=_convert(
            data.get("reference_longitude"), float,
            defaults.reference_longitude, "reference_longitude",
        ),
        radius_km=_convert(
            data.get("radius_km"), float,
            defaults.radius_km, "radius_km", positive=True,
        ),
        local_threshold=_convert(
            data.get("local_threshold"), float,
            defaults.local_threshold, "local_threshold", positive=True,
        ),
        global_threshold=_convert(
            data.get("global_threshold"), float,
            defaults.global_threshold, "global_threshold", positive=True,
        ),
    )


def _parse_matching(data: Mapping[str, Any]) -> MatchPolicy:
    """Parse the identity heuristic settings."""
    defaults = MatchPolicy()
    return MatchPolicy(
        similarity_threshold=_convert(
            data.get("similarity_threshold"), float,
            defaults.similarity_threshold, "similarity_threshold", positive=True,
        ),
        time_window_minutes=_convert(
            data.get("time_window_minutes"), int,
            defaults.time_window_minutes, "time_window_minutes",
        ),
    )


def _parse_matrix(data: Mapping[str, Any]) -> MatrixConfig:
    """Parse the Matrix notification target."""
    defaults = MatrixConfig()
    return MatrixConfig(
        base_url=_resolve_value(data.get("base_url") or ""),
        room_id=_resolve_value(data.get("room_id") or ""),
        access_token=_resolve_value(data.get("access_token") or ""),
        max_attempts=_convert(
            data.get("max_attempts"), int,
            defaults.max_attempts, "max_attempts", positive=True,
        ),
        timeout_seconds=_convert(
            data.get("timeout_seconds"), int,
            defaults.timeout_seconds, "timeout_seconds", positive=True,
        ),
    )


def load_config_from_dict(data: Mapping[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()

    return Config(
        source_url=_resolve_value(data.get("source_url") or defaults.source_url),
        verify_tls=_convert(
            data.get("verify_tls"), _parse_bool, defaults.verify_tls, "verify_tls",
        ),
        fetch_timeout_seconds=_convert(
            data.get("fetch_timeout_seconds"), int,
            defaults.fetch_timeout_seconds, "fetch_timeout_seconds", positive=True,
        ),
        parse_limit=_convert(
            data.get("parse_limit"), int,
            defaults.parse_limit, "parse_limit", positive=True,
        ),
        poll_interval_seconds=_convert(
            data.get("poll_interval_seconds"), int,
            defaults.poll_interval_seconds, "poll_interval_seconds", positive=True,
        ),
        error_retry_seconds=_convert(
            data.get("error_retry_seconds"), int,
            defaults.error_retry_seconds, "error_retry_seconds", positive=True,
        ),
        retention_months=_convert(
            data.get("retention_months"), int,
            defaults.retention_months, "retention_months", positive=True,
        ),
        data_dir=str(data.get("data_dir") or defaults.data_dir),
        last_poll_file=str(data.get("last_poll_file") or defaults.last_poll_file),
        notified_file=str(data.get("notified_file") or defaults.notified_file),
        thresholds=_parse_thresholds(data.get("thresholds") or {}),
        matching=_parse_matching(data.get("matching") or {}),
        matrix=_parse_matrix(data.get("matrix") or {}),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: source %s, reference (%.2f, %.2f) within %.0f km",
        config.source_url,
        config.thresholds.reference_latitude,
        config.thresholds.reference_longitude,
        config.thresholds.radius_km,
    )

    return config


def load_config_from_env(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from environment variables.

    Environment variables:
        PHIVOLCS_URL: Source page URL
        PHIVOLCS_VERIFY_TLS: Verify the source TLS certificate (true/false)
        PARSE_LIMIT: Maximum table rows to parse
        REF_POINT_LAT / REF_POINT_LON: Reference point coordinates
        REF_RADIUS_KM: Reference area radius
        LOCAL_MAG_THRESHOLD / GLOBAL_MAG_THRESHOLD: Magnitude thresholds
        SIMILARITY_THRESHOLD: Fuzzy origin match threshold (0-100)
        SIMILARITY_WINDOW_MINUTES: Time window for the fuzzy fallback
        POLL_INTERVAL_SECONDS / ERROR_RETRY_SECONDS: Loop timing
        RETENTION_MONTHS: Notified ledger retention
        DATA_DIR: Directory for ledger files
        MATRIX_BASE_URL / MATRIX_ROOM_ID / MATRIX_ACCESS_TOKEN: Matrix target
        MATRIX_MAX_ATTEMPTS: Send attempts per message

    Invalid values log a warning and fall back to defaults.

    Args:
        environ: Environment mapping (os.environ if None)

    Returns:
        Config object from environment
    """
    env = os.environ if environ is None else environ

    data = {
        "source_url": env.get("PHIVOLCS_URL"),
        "verify_tls": env.get("PHIVOLCS_VERIFY_TLS"),
        "parse_limit": env.get("PARSE_LIMIT"),
        "poll_interval_seconds": env.get("POLL_INTERVAL_SECONDS"),
        "error_retry_seconds": env.get("ERROR_RETRY_SECONDS"),
        "retention_months": env.get("RETENTION_MONTHS"),
        "data_dir": env.get("DATA_DIR"),
        "thresholds": {
            "reference_latitude": env.get("REF_POINT_LAT"),
            "reference_longitude": env.get("REF_POINT_LON"),
            "radius_km": env.get("REF_RADIUS_KM"),
            "local_threshold": env.get("LOCAL_MAG_THRESHOLD"),
            "global_threshold": env.get("GLOBAL_MAG_THRESHOLD"),
        },
        "matching": {
            "similarity_threshold": env.get("SIMILARITY_THRESHOLD"),
            "time_window_minutes": env.get("SIMILARITY_WINDOW_MINUTES"),
        },
        "matrix": {
            "base_url": env.get("MATRIX_BASE_URL"),
            "room_id": env.get("MATRIX_ROOM_ID"),
            "access_token": env.get("MATRIX_ACCESS_TOKEN"),
            "max_attempts": env.get("MATRIX_MAX_ATTEMPTS"),
        },
    }

    config = load_config_from_dict(data)

    if not config.matrix.is_configured:
        logger.warning("Matrix environment variables not set; notifications will fail")

    return config
