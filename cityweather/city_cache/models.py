"""
Data models for the city weather cache

This module defines the normalized weather record (TypedDict), the cache mode
enum and the per-city cache entry.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, TypedDict


class CacheMode(StrEnum):
    """Refresh discipline of a CityCache"""

    ON_DEMAND = "on_demand"  # Weather is refreshed only by lookups
    POLLING = "polling"  # Background thread refreshes all cities, lookups refresh too

    @classmethod
    def fromStr(cls, value: str) -> "CacheMode":
        """Parse mode from string (case-insensitive, "-" and "_" are equal)"""
        normalized = value.strip().lower().replace("-", "_")
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(f"Unknown cache mode '{value}'")


class WeatherConditions(TypedDict):
    """Weather condition group and its description"""

    main: str  # Weather group (Rain, Snow, Clear, etc.)
    description: str  # Weather description (e.g. "scattered clouds")


class Temperature(TypedDict):
    """Temperature block (provider units, Kelvin by default)"""

    temp: float  # Temperature
    feels_like: float  # Feels like temperature


class Wind(TypedDict):
    """Wind block"""

    speed: float  # Wind speed


class SunTimes(TypedDict):
    """Sunrise and sunset"""

    sunrise: int  # Sunrise time (Unix timestamp)
    sunset: int  # Sunset time (Unix timestamp)


class WeatherRecord(TypedDict):
    """Normalized current weather"""

    weather: WeatherConditions
    temperature: Temperature
    visibility: int  # Visibility (meters) max 10Km
    wind: Wind
    datetime: int  # Time of data calculation (Unix timestamp)
    sys: SunTimes
    timezone: int  # Shift in seconds from UTC
    name: str  # City name as known by the provider


@dataclass(frozen=True, slots=True)
class Coordinates:
    """Geographic point of a city"""

    lat: float
    lon: float


@dataclass
class CityEntry:
    """
    Cached weather of a single city.

    Coordinates are resolved once, before the entry is stored, and never
    change afterwards. ``weather`` and ``lastUpdate`` are replaced together
    after every successful fetch.
    """

    name: str
    coordinates: Coordinates
    lastUpdate: Optional[float] = None  # Monotonic time of last successful fetch, None - never
    weather: Optional[WeatherRecord] = None

    def isStale(self, now: float, freshnessWindow: float) -> bool:
        """Check if weather has to be fetched again"""
        if self.lastUpdate is None:
            return True
        return now - self.lastUpdate >= freshnessWindow

    def applyWeather(self, weather: WeatherRecord, fetchedAt: float) -> None:
        """Store freshly fetched weather"""
        self.weather = weather
        self.lastUpdate = fetchedAt
