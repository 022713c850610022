"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from src.core.geo import ThresholdPolicy
from src.core.identity import MatchPolicy
from src.core.ledger import DEFAULT_RETENTION_MONTHS


PHIVOLCS_BASE_URL = "https://earthquake.phivolcs.dost.gov.ph"


class ConfigurationError(ValueError):
    """Raised at startup when configuration cannot be used."""


@dataclass
class MatrixConfig:
    """Matrix room to post notifications to.

    Attributes:
        base_url: Homeserver URL, e.g. https://matrix.example.org
        room_id: Room ID, e.g. !roomid:example.org
        access_token: Bot access token
        max_attempts: Send attempts before giving up
        timeout_seconds: Per-request timeout
    """
    base_url: str = ""
    room_id: str = ""
    access_token: str = ""
    max_attempts: int = 5
    timeout_seconds: int = 30

    @property
    def is_configured(self) -> bool:
        """Returns True if all credentials are present."""
        return bool(self.base_url and self.room_id and self.access_token)


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        source_url: PHIVOLCS page listing the latest quakes
        verify_tls: Verify the source site's TLS certificate
        fetch_timeout_seconds: Timeout for fetching the source page
        parse_limit: Maximum number of table rows to parse
        poll_interval_seconds: Sleep after a completed cycle
        error_retry_seconds: Sleep after a failed fetch
        retention_months: Notified ledger retention window
        data_dir: Directory holding the ledger files
        last_poll_file: Last-poll ledger file name
        notified_file: Notified ledger file name
        thresholds: Distance-aware magnitude thresholds
        matching: Identity heuristic settings
        matrix: Notification target
    """
    source_url: str = PHIVOLCS_BASE_URL
    verify_tls: bool = True
    fetch_timeout_seconds: int = 30
    parse_limit: int = 500
    poll_interval_seconds: int = 150
    error_retry_seconds: int = 30
    retention_months: int = DEFAULT_RETENTION_MONTHS
    data_dir: str = "."
    last_poll_file: str = "last_quakes.json"
    notified_file: str = "posted_quakes.json"
    thresholds: ThresholdPolicy = field(default_factory=ThresholdPolicy)
    matching: MatchPolicy = field(default_factory=MatchPolicy)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def _require_positive(value: float, field_name: str) -> list[ValidationError]:
    if value > 0:
        return []
    return [ValidationError(
        field=field_name,
        message=f"Must be positive, got {value}",
    )]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Missing Matrix credentials are only a warning: classification still
    runs and each attempted send reports the problem.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []
    thresholds = config.thresholds

    errors.extend(validate_coordinates(
        thresholds.reference_latitude,
        thresholds.reference_longitude,
        "thresholds.reference",
    ))
    errors.extend(_require_positive(thresholds.radius_km, "thresholds.radius_km"))

    if thresholds.local_threshold > thresholds.global_threshold:
        errors.append(ValidationError(
            field="thresholds",
            message=(
                f"local_threshold ({thresholds.local_threshold}) > "
                f"global_threshold ({thresholds.global_threshold})"
            ),
            severity="warning",
        ))

    if not 0 <= config.matching.similarity_threshold <= 100:
        errors.append(ValidationError(
            field="matching.similarity_threshold",
            message=(
                f"Similarity threshold {config.matching.similarity_threshold} "
                "out of range [0, 100]"
            ),
        ))

    if config.matching.time_window_minutes < 0:
        errors.append(ValidationError(
            field="matching.time_window_minutes",
            message=f"Time window must not be negative, got {config.matching.time_window_minutes}",
        ))

    errors.extend(_require_positive(config.parse_limit, "parse_limit"))
    errors.extend(_require_positive(config.poll_interval_seconds, "poll_interval_seconds"))
    errors.extend(_require_positive(config.error_retry_seconds, "error_retry_seconds"))
    errors.extend(_require_positive(config.retention_months, "retention_months"))
    errors.extend(_require_positive(config.matrix.max_attempts, "matrix.max_attempts"))

    if not config.source_url:
        errors.append(ValidationError(
            field="source_url",
            message="Source URL is empty",
        ))

    if not config.matrix.is_configured:
        errors.append(ValidationError(
            field="matrix",
            message="Matrix credentials incomplete; notifications will fail",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
