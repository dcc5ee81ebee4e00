"""Application exception classes."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class WeatherProviderError(Exception):
    """Raised when one weather provider request or normalization fails."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class WeatherServiceUnavailableError(WeatherProviderError):
    """Raised when every provider in the fallback chain failed."""

    def __init__(self, operation: str, failures: list[tuple[str, str]]) -> None:
        detail = ". ".join(f"{name}: {message}" for name, message in failures)
        super().__init__(f"{operation} unavailable. {detail}")
        self.operation = operation
        self.failures = failures


class GeolocationError(Exception):
    """Raised by a geolocation source that cannot produce a position."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
    UNSUPPORTED = 0

    def __init__(self, message: str, *, code: int = POSITION_UNAVAILABLE) -> None:
        super().__init__(message)
        self.code = code


class LocationError(Exception):
    """Raised when no location could be determined, with a user-facing hint."""

    def __init__(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.suggestion = suggestion
        self.code = code
        self.original_error = original_error


class NewsFeedError(Exception):
    """Raised when a single news feed cannot be fetched or parsed."""

    def __init__(self, message: str, *, feed: str | None = None) -> None:
        super().__init__(message)
        self.feed = feed
