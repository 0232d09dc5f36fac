"""
OpenWeatherMap Client Library

This module provides a client for the OpenWeatherMap API.
Supports geocoding (city name → coordinates) and current weather retrieval.

Example usage:
    from cityweather.openweathermap import OpenWeatherMapClient

    client = OpenWeatherMapClient(apiKey="your_api_key")

    coordinates = client.getCoordinates("Moscow")
    weather = client.getWeather(coordinates.lat, coordinates.lon)
    print(f"Temperature: {weather['temperature']['temp']}K")
"""

from .client import OpenWeatherMapClient
from .models import CurrentWeatherResponse, GeocodingResult

__all__ = [
    "OpenWeatherMapClient",
    "GeocodingResult",
    "CurrentWeatherResponse",
]
