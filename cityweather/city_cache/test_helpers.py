"""
Test helpers for city cache tests

Provides controllable fakes of the geocoder, the weather provider and the
monotonic clock, so cache behaviour can be checked without network or sleeping.
"""

import threading
import time
from typing import Callable, Dict, List, Optional

from ..errors import FetchFailedError, LookupFailedError
from .interface import GeoResolverInterface, WeatherFetcherInterface
from .models import Coordinates, WeatherRecord


def makeWeatherRecord(
    name: str = "Paris",
    temp: float = 290.1,
    main: str = "Clear",
    description: str = "clear sky",
) -> WeatherRecord:
    """Create complete weather record with given main values"""
    return {
        "weather": {"main": main, "description": description},
        "temperature": {"temp": temp, "feels_like": temp - 1.0},
        "visibility": 10000,
        "wind": {"speed": 3.5},
        "datetime": 1697644800,
        "sys": {"sunrise": 1697600000, "sunset": 1697640000},
        "timezone": 3600,
        "name": name,
    }


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGeoResolver(GeoResolverInterface):
    """Geocoder returning known or generated coordinates and recording calls"""

    def __init__(self, coordinates: Optional[Dict[str, Coordinates]] = None):
        self.coordinates = coordinates or {}
        self.calls: List[str] = []
        self.failingNames: set[str] = set()

    def getCoordinates(self, cityName: str) -> Coordinates:
        self.calls.append(cityName)
        if cityName in self.failingNames:
            raise LookupFailedError(f"No city found for name '{cityName}'")
        if cityName in self.coordinates:
            return self.coordinates[cityName]
        # Stable fake coordinates, distinct per name
        seed = sum(ord(c) for c in cityName)
        return Coordinates(lat=float(seed % 90), lon=float(seed % 180))


class FakeWeatherFetcher(WeatherFetcherInterface):
    """
    Weather provider recording calls

    By default returns a record whose temperature grows with every call,
    so each fetch result is distinguishable.
    """

    def __init__(self, recordFactory: Optional[Callable[[float, float, int], WeatherRecord]] = None):
        self.recordFactory = recordFactory
        self.calls: List[Coordinates] = []
        self.fail = False
        self._lock = threading.Lock()

    @property
    def callCount(self) -> int:
        with self._lock:
            return len(self.calls)

    def getWeather(self, lat: float, lon: float) -> WeatherRecord:
        with self._lock:
            self.calls.append(Coordinates(lat=lat, lon=lon))
            callNumber = len(self.calls)

        if self.fail:
            raise FetchFailedError("Server returned HTTP response code: 503")
        if self.recordFactory is not None:
            return self.recordFactory(lat, lon, callNumber)
        return makeWeatherRecord(temp=270.0 + callNumber)

    def waitForCalls(self, count: int, timeout: float = 2.0) -> bool:
        """Wait until at least ``count`` fetches were made"""
        deadline = time.monotonic() + timeout
        while self.callCount < count:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True
