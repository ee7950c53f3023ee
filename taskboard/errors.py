"""
Exception hierarchy for the taskboard package.

Domain commands never raise: they report REJECTED / NOT_FOUND outcomes.
These exceptions cover configuration, import parsing and upstream I/O.
"""


class TaskboardError(Exception):
    """Base class for all taskboard errors."""
    pass


class ConfigError(TaskboardError):
    """Raised when configuration is invalid or incomplete."""
    pass


class ImportFormatError(TaskboardError):
    """Raised when an import file is not JSON or carries no tasks array."""
    pass


class WeatherError(TaskboardError):
    """Raised when weather data cannot be produced."""
    pass


class UpstreamError(WeatherError):
    """The forecast upstream failed or returned a non-OK status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
