"""
Abstract provider interfaces consumed by CityCache

This module defines the two boundary collaborators of the cache: resolving
a city name to coordinates and fetching current weather for coordinates.
OpenWeatherMapClient implements both of them.
"""

from abc import ABC, abstractmethod

from .models import Coordinates, WeatherRecord


class GeoResolverInterface(ABC):
    """Abstract interface for city name geocoding"""

    @abstractmethod
    def getCoordinates(self, cityName: str) -> Coordinates:
        """
        Resolve city name to coordinates

        Args:
            cityName: City name (e.g., "Moscow", "London")

        Returns:
            Coordinates of the first match

        Raises:
            LookupFailedError: On network, HTTP status or malformed response
                errors, and when nothing matches the name
        """
        pass


class WeatherFetcherInterface(ABC):
    """Abstract interface for current weather retrieval"""

    @abstractmethod
    def getWeather(self, lat: float, lon: float) -> WeatherRecord:
        """
        Fetch current weather by coordinates

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            Normalized weather record

        Raises:
            FetchFailedError: On network, HTTP status or malformed response errors
        """
        pass
