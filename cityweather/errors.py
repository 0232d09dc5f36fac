"""
City weather exceptions

This module defines the exception hierarchy for the city weather library.
All errors inherit from CityWeatherError base class.
"""


class CityWeatherError(Exception):
    """
    Base exception for all city weather errors.

    Catch this to handle any cache, provider or configuration error generically.
    """

    pass


class InvalidArgumentError(CityWeatherError, ValueError):
    """
    Exception raised when a caller passes an unusable argument.

    This exception is raised when:
    - City name is missing, not a string or empty
    - API key is missing or empty
    - Cache mode is missing or unknown
    - Cache limits are out of range
    """

    pass


class StaleHandleError(CityWeatherError):
    """
    Exception raised when an operation is attempted on a deactivated cache.

    A deactivated cache never becomes active again, the caller has to
    request a new one from the CacheRegistry.
    """

    pass


class ProviderError(CityWeatherError):
    """
    Base exception for failures of the weather provider boundary.

    Args:
        message: Description of the failure
        cause: The original exception that caused this error (optional)
    """

    def __init__(self, message: str, cause: Exception | None = None):
        """
        Initialize ProviderError with message and optional original error.

        Args:
            message: Description of the failure
            cause: The original exception that caused this error
        """
        super().__init__(message)
        self.cause = cause


class LookupFailedError(ProviderError):
    """
    Exception raised when a city name cannot be resolved to coordinates.

    Covers network errors, unexpected HTTP statuses, malformed responses
    and the case when the provider knows no city with the given name.
    """

    pass


class FetchFailedError(ProviderError):
    """
    Exception raised when current weather cannot be fetched for coordinates.

    Covers network errors, unexpected HTTP statuses and malformed responses.
    """

    pass


class ConfigError(CityWeatherError):
    """
    Exception raised when configuration cannot be loaded or lacks required values.

    This exception is raised when:
    - Configuration file does not exist and no config directories are given
    - TOML file cannot be parsed
    - OpenWeatherMap API key is missing or its placeholder was not substituted
    """

    pass
