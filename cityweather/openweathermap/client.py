"""
OpenWeatherMap Client

This module provides the OpenWeatherMapClient class which resolves city names
to coordinates and fetches current weather from the OpenWeatherMap API.
It is the default geocoder and weather provider of CityCache.
"""

import logging
from typing import Any, Dict, Optional, Type

import httpx

from ..city_cache.interface import GeoResolverInterface, WeatherFetcherInterface
from ..city_cache.models import Coordinates, WeatherRecord
from ..errors import FetchFailedError, LookupFailedError, ProviderError
from .models import CurrentWeatherResponse, GeocodingResult

logger = logging.getLogger(__name__)


class OpenWeatherMapClient(GeoResolverInterface, WeatherFetcherInterface):
    """
    Client for OpenWeatherMap API without any caching

    Creates a new HTTP session for each request so a single client can be
    shared between threads. Failures are raised, never returned: geocoding
    raises LookupFailedError and weather fetching raises FetchFailedError,
    both carrying the original exception in ``cause``.

    Example usage:
        client = OpenWeatherMapClient(apiKey="your_key", requestTimeout=10)

        # Get coordinates
        coordinates = client.getCoordinates("Moscow")

        # Get weather
        weather = client.getWeather(coordinates.lat, coordinates.lon)
    """

    GEOCODING_API = "https://api.openweathermap.org/geo/1.0/direct"
    WEATHER_API = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        apiKey: str,
        requestTimeout: float = 10,
        units: Optional[str] = None,
        language: Optional[str] = None,
        geocodingUrl: Optional[str] = None,
        weatherUrl: Optional[str] = None,
    ):
        """
        Initialize OpenWeatherMap client

        Args:
            apiKey: OpenWeatherMap API key
            requestTimeout: HTTP request timeout (seconds)
            units: Optional units ("standard", "metric", "imperial"), provider default is Kelvin
            language: Optional language of weather description
            geocodingUrl: Override of geocoding endpoint
            weatherUrl: Override of current weather endpoint
        """
        self.apiKey = apiKey
        self.requestTimeout = requestTimeout
        self.units = units
        self.language = language
        self.geocodingUrl = geocodingUrl or self.GEOCODING_API
        self.weatherUrl = weatherUrl or self.WEATHER_API

    def getCoordinates(self, cityName: str) -> Coordinates:
        """
        Get coordinates by city name

        Uses: https://api.openweathermap.org/geo/1.0/direct

        Args:
            cityName: City name (e.g., "Moscow", "London")

        Returns:
            Coordinates of the first match

        Raises:
            LookupFailedError: On request error or if nothing is found
        """
        params = {"q": cityName, "limit": 1, "appid": self.apiKey}
        responseData = self._makeRequest(self.geocodingUrl, params, LookupFailedError)

        if not isinstance(responseData, list):
            raise LookupFailedError(
                f"The response that should contain the city coordinates is not a list of matches: {responseData}"
            )
        if len(responseData) == 0:
            logger.warning(f"No geocoding results for: {cityName}")
            raise LookupFailedError(f"No city found for name '{cityName}'")

        try:
            apiResult: GeocodingResult = responseData[0]
            coordinates = Coordinates(lat=float(apiResult["lat"]), lon=float(apiResult["lon"]))
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise LookupFailedError(
                f"The response that should contain the city coordinates does not match the expected format: "
                f"{responseData}",
                e,
            ) from e

        logger.debug(f"Resolved {cityName} to {coordinates}")
        return coordinates

    def getWeather(self, lat: float, lon: float) -> WeatherRecord:
        """
        Get current weather by coordinates

        Uses: https://api.openweathermap.org/data/2.5/weather

        Args:
            lat: Latitude
            lon: Longitude

        Returns:
            Normalized weather record

        Raises:
            FetchFailedError: On request error or malformed response
        """
        params: Dict[str, Any] = {"lat": lat, "lon": lon, "appid": self.apiKey}
        if self.units:
            params["units"] = self.units
        if self.language:
            params["lang"] = self.language

        responseData = self._makeRequest(self.weatherUrl, params, FetchFailedError)
        try:
            return self._parseWeather(responseData)
        except (KeyError, IndexError, TypeError, ValueError, OverflowError) as e:
            raise FetchFailedError(
                f"The response that is supposed to contain weather data does not match the expected format: "
                f"{responseData}",
                e,
            ) from e

    def _parseWeather(self, data: CurrentWeatherResponse) -> WeatherRecord:
        """Reshape current weather response into WeatherRecord"""
        conditions = data["weather"][0]
        mainData = data["main"]
        sysData = data["sys"]

        result: WeatherRecord = {
            "weather": {
                "main": str(conditions["main"]),
                "description": str(conditions["description"]),
            },
            "temperature": {
                "temp": float(mainData["temp"]),
                "feels_like": float(mainData["feels_like"]),
            },
            "visibility": int(data["visibility"]),
            "wind": {
                "speed": float(data["wind"]["speed"]),
            },
            "datetime": int(data["dt"]),
            "sys": {
                "sunrise": int(sysData["sunrise"]),
                "sunset": int(sysData["sunset"]),
            },
            "timezone": int(data["timezone"]),
            "name": str(data["name"]),
        }
        return result

    def _makeRequest(self, url: str, params: Dict[str, Any], errorClass: Type[ProviderError]) -> Any:
        """
        Make HTTP GET request to OpenWeatherMap API

        Creates a new session for each request.

        Args:
            url: API endpoint URL
            params: Query parameters (including appid)
            errorClass: Error to raise on failure

        Returns:
            Parsed JSON response

        Raises:
            errorClass: On any transport, status or JSON error
        """
        try:
            logger.debug(f"Making request to {url}")

            with httpx.Client(timeout=self.requestTimeout) as session:
                response = session.get(url, params=params)

            if response.status_code != 200:
                match response.status_code:
                    case 401:
                        logger.error("Invalid API key")
                    case 404:
                        logger.warning("Location not found")
                    case 429:
                        logger.error("Rate limit exceeded")
                    case _:
                        logger.error(f"API request failed: {response.status_code}")
                message = f"Server returned HTTP response code: {response.status_code} for URL: {url}"
                raise errorClass(
                    message, httpx.HTTPStatusError(message, request=response.request, response=response)
                )

            data = response.json()
            logger.debug(f"API request successful: {response.status_code}")
            return data

        except httpx.TimeoutException as e:
            logger.error("Request timeout")
            raise errorClass(f"GET request for URL: {url} timed out", e) from e
        except httpx.RequestError as e:
            logger.error(f"Network error: {e}")
            raise errorClass(f"GET request for URL: {url} failed: {e}", e) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError of a body that is not UTF-8
            logger.error(f"Failed to parse JSON response: {e}")
            raise errorClass(f"Invalid JSON in response from URL: {url}", e) from e
