"""
Raw response models for OpenWeatherMap API

This module defines TypedDict classes for the parts of API responses the
client reads. The normalized output lives in cityweather.city_cache.models.
"""

from typing import Dict, List, TypedDict


class GeocodingResult(TypedDict, total=False):
    """Single item of geocoding API response"""

    # https://openweathermap.org/api/geocoding-api#direct_name_fields

    name: str  # City name
    local_names: Dict[str, str]  # Names in different languages {"ru": "Москва", "en": "Moscow"}
    lat: float  # Latitude
    lon: float  # Longitude
    country: str  # Country code (e.g., "RU")
    state: str  # State/region name (if available)


class WeatherConditionItem(TypedDict, total=False):
    """Item of "weather" array"""

    id: int  # Weather condition ID
    main: str  # Weather group
    description: str  # Weather description
    icon: str  # Icon ID


class MainBlock(TypedDict, total=False):
    """The "main" object of current weather response"""

    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    pressure: int  # hPa
    humidity: int  # %


class WindBlock(TypedDict, total=False):
    """The "wind" object of current weather response"""

    speed: float
    deg: int
    gust: float


class SysBlock(TypedDict, total=False):
    """The "sys" object of current weather response"""

    country: str
    sunrise: int  # Unix timestamp
    sunset: int  # Unix timestamp


class CurrentWeatherResponse(TypedDict, total=False):
    """Current weather API response"""

    # https://openweathermap.org/current#fields_json

    weather: List[WeatherConditionItem]
    main: MainBlock
    visibility: int  # meters, max 10Km
    wind: WindBlock
    dt: int  # Time of data calculation (Unix timestamp)
    sys: SysBlock
    timezone: int  # Shift in seconds from UTC
    id: int  # City ID
    name: str  # City name
    cod: int
