"""
cityweather - current weather per city with a bounded, self-refreshing cache.

Example usage:
    from cityweather import CacheMode, CacheRegistry

    cache = CacheRegistry.getInstance().getCache("your_api_key", CacheMode.POLLING)
    weather = cache.lookup("Moscow")
"""

from .city_cache import CacheMode, CityCache, CityEntry, Coordinates, WeatherRecord
from .errors import (
    CityWeatherError,
    ConfigError,
    FetchFailedError,
    InvalidArgumentError,
    LookupFailedError,
    ProviderError,
    StaleHandleError,
)
from .registry import CacheRegistry

__all__ = [
    "CacheRegistry",
    "CityCache",
    "CacheMode",
    "CityEntry",
    "Coordinates",
    "WeatherRecord",
    "CityWeatherError",
    "InvalidArgumentError",
    "StaleHandleError",
    "ProviderError",
    "LookupFailedError",
    "FetchFailedError",
    "ConfigError",
]
