"""
City Weather Cache Library

This module provides a bounded, thread-safe cache of current weather per city
with lazy (on lookup) and eager (background polling) refresh.

Example usage:
    from cityweather.city_cache import CacheMode, CityCache
    from cityweather.openweathermap import OpenWeatherMapClient

    client = OpenWeatherMapClient(apiKey="your_api_key")
    cache = CityCache("your_api_key", CacheMode.POLLING, client, client)

    weather = cache.lookup("Moscow")
    print(f"Temperature: {weather['temperature']['temp']}K")
"""

from .cache import DEFAULT_FRESHNESS_WINDOW, DEFAULT_MAX_CITIES, DEFAULT_POLLING_INTERVAL, CityCache
from .interface import GeoResolverInterface, WeatherFetcherInterface
from .models import (
    CacheMode,
    CityEntry,
    Coordinates,
    SunTimes,
    Temperature,
    WeatherConditions,
    WeatherRecord,
    Wind,
)

__all__ = [
    "CityCache",
    "CacheMode",
    "CityEntry",
    "Coordinates",
    "WeatherRecord",
    "WeatherConditions",
    "Temperature",
    "Wind",
    "SunTimes",
    "GeoResolverInterface",
    "WeatherFetcherInterface",
    "DEFAULT_MAX_CITIES",
    "DEFAULT_FRESHNESS_WINDOW",
    "DEFAULT_POLLING_INTERVAL",
]
