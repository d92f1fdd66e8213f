"""Domain errors and failure typing."""


class SpatError(Exception):
    """Base class for service failures."""

    error_code = "SPAT_ERROR"


class ConfigError(SpatError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ValidationError(SpatError):
    """Raised for caller input that cannot be served (blank id, bad coordinates)."""

    error_code = "VALIDATION_ERROR"


class UpstreamError(SpatError):
    """Raised when an upstream feed cannot be fetched or used."""

    error_code = "UPSTREAM_ERROR"


class UpstreamShapeError(UpstreamError):
    error_code = "UPSTREAM_SHAPE_ERROR"
