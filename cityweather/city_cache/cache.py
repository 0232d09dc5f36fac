"""
City cache: bounded, thread-safe store of per-city weather with lazy and eager refresh
"""

import dataclasses
import logging
import threading
import time
from collections import OrderedDict
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, cast

from ..errors import InvalidArgumentError, StaleHandleError
from .interface import GeoResolverInterface, WeatherFetcherInterface
from .models import CacheMode, CityEntry, WeatherRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_CITIES = 10
DEFAULT_FRESHNESS_WINDOW = 595  # seconds
DEFAULT_POLLING_INTERVAL = 1.0  # seconds


class CityCache:
    """
    Weather cache for up to ``maxCities`` cities bound to a single API key, dood!

    Cities are kept in insertion order. When a new city arrives into a full
    cache, the oldest inserted city is dropped (FIFO, repeated lookups do not
    change the order). Weather older than ``freshnessWindow`` is fetched again
    on lookup.

    In ``CacheMode.POLLING`` the first lookup also starts a daemon thread which
    refreshes every cached city each ``pollingInterval`` seconds. Any error
    in that thread deactivates the cache for good.

    A single RLock guards all cache state for the whole duration of a lookup
    or of one refresh cycle, including provider requests.

    Usage:
        >>> client = OpenWeatherMapClient(apiKey="your_key")
        >>> cache = CityCache("your_key", CacheMode.ON_DEMAND, client, client)
        >>> weather = cache.lookup("Moscow")
        >>> print(weather["temperature"]["temp"])
        >>> cache.deactivate()
    """

    def __init__(
        self,
        apiKey: str,
        mode: CacheMode,
        geoResolver: GeoResolverInterface,
        weatherFetcher: WeatherFetcherInterface,
        *,
        maxCities: int = DEFAULT_MAX_CITIES,
        freshnessWindow: float = DEFAULT_FRESHNESS_WINDOW,
        pollingInterval: float = DEFAULT_POLLING_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize active cache without any cities

        Args:
            apiKey: API key this cache belongs to
            mode: Refresh discipline (see CacheMode)
            geoResolver: City name to coordinates resolver
            weatherFetcher: Current weather provider
            maxCities: Maximum number of cached cities (default: 10)
            freshnessWindow: Max age of cached weather in seconds (default: 595)
            pollingInterval: Pause between background refresh cycles in seconds (default: 1)
            clock: Monotonic time source, used for weather age

        Raises:
            InvalidArgumentError: If any argument is out of range
        """
        if not isinstance(apiKey, str) or not apiKey:
            raise InvalidArgumentError("API key must be a non-empty string")
        if not isinstance(mode, CacheMode):
            raise InvalidArgumentError(f"Mode must be a CacheMode, got {mode!r}")
        if maxCities < 1:
            raise InvalidArgumentError(f"maxCities must be positive, got {maxCities}")
        if freshnessWindow < 0:
            raise InvalidArgumentError(f"freshnessWindow must not be negative, got {freshnessWindow}")
        if pollingInterval <= 0:
            raise InvalidArgumentError(f"pollingInterval must be positive, got {pollingInterval}")

        self.apiKey = apiKey
        self.mode = mode
        self.geoResolver = geoResolver
        self.weatherFetcher = weatherFetcher
        self.maxCities = maxCities
        self.freshnessWindow = freshnessWindow
        self.pollingInterval = pollingInterval
        self._clock = clock

        self._lock = RLock()
        self._entries: OrderedDict[str, CityEntry] = OrderedDict()
        self._active = True
        self._pollingStarted = False
        self._pollingThread: Optional[threading.Thread] = None
        self._stopEvent = threading.Event()
        self._lastError: Optional[Exception] = None

        self._fetches = 0
        self._geocodings = 0
        self._evictions = 0

    def __repr__(self) -> str:
        state = "active" if self._active else "deactivated"
        return f"<CityCache mode={self.mode.value} cities={len(self._entries)}/{self.maxCities} {state}>"

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, cityName: object) -> bool:
        with self._lock:
            return cityName in self._entries

    def lookup(self, cityName: str) -> WeatherRecord:
        """
        Get current weather for the city, fetching it if cached data is stale

        Unknown city is geocoded first and added to the cache, evicting the
        oldest inserted city if the cache is full. In polling mode the first
        lookup starts the background refresh thread.

        Args:
            cityName: City name (case-sensitive)

        Returns:
            Weather record of the city

        Raises:
            StaleHandleError: If the cache is deactivated
            InvalidArgumentError: If cityName is not a non-empty string
            LookupFailedError: If the new city cannot be geocoded
            FetchFailedError: If stale weather cannot be refreshed
        """
        with self._lock:
            if not self._active:
                raise StaleHandleError(
                    "Trying to get weather from a cache that has been removed from CacheRegistry "
                    "and/or marked as inactive"
                )
            if not isinstance(cityName, str) or not cityName:
                raise InvalidArgumentError("City name must be a non-empty string")

            entry = self._entries.get(cityName)
            if entry is None:
                entry = self._addCity(cityName)
            else:
                logger.debug(f"Cache hit for city: {cityName}")

            self._refreshEntry(entry)

            if self.mode == CacheMode.POLLING and not self._pollingStarted:
                self._startPolling()

            return cast(WeatherRecord, entry.weather)

    def deactivate(self) -> None:
        """Mark cache as not active and stop background refresh. Cannot be undone."""
        if self._active:
            self._active = False
            logger.info(f"CityCache deactivated: {self!r}")
        self._stopEvent.set()

    def isActive(self) -> bool:
        """Check if cache can serve lookups"""
        return self._active

    def isPolling(self) -> bool:
        """Check if the background refresh thread has ever been started"""
        return self._pollingStarted

    def getApiKey(self) -> str:
        """Get API key this cache belongs to"""
        return self.apiKey

    def getMode(self) -> CacheMode:
        """Get refresh discipline of this cache"""
        return self.mode

    @property
    def lastError(self) -> Optional[Exception]:
        """Error which stopped the background refresh thread, if any"""
        return self._lastError

    def getCityNames(self) -> List[str]:
        """Get cached city names, oldest first"""
        with self._lock:
            return list(self._entries.keys())

    def getEntry(self, cityName: str) -> Optional[CityEntry]:
        """
        Get snapshot of the city entry without refreshing it

        Returns a shallow copy, changing it does not affect the cache. The weather
        record is shared with the cache and must be treated as read-only.
        """
        with self._lock:
            entry = self._entries.get(cityName)
            return None if entry is None else dataclasses.replace(entry)

    def getStats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            return {
                "cities": len(self._entries),
                "maxCities": self.maxCities,
                "fetches": self._fetches,
                "geocodings": self._geocodings,
                "evictions": self._evictions,
                "active": self._active,
                "polling": self._pollingStarted,
            }

    def joinPollingThread(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background refresh thread to exit

        Args:
            timeout: Max seconds to wait, None - forever

        Returns:
            True if no refresh thread is running anymore, False on timeout
        """
        thread = self._pollingThread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _addCity(self, cityName: str) -> CityEntry:
        """Geocode new city and store it, evicting the oldest one if full. Lock must be held."""
        logger.debug(f"Cache miss for city: {cityName}, resolving coordinates")
        coordinates = self.geoResolver.getCoordinates(cityName)
        self._geocodings += 1

        entry = CityEntry(name=cityName, coordinates=coordinates)
        if len(self._entries) >= self.maxCities:
            evictedName, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug(f"Evicted oldest city: {evictedName}")
        self._entries[cityName] = entry
        return entry

    def _refreshEntry(self, entry: CityEntry) -> None:
        """Fetch weather for the entry if it is stale. Lock must be held."""
        if not entry.isStale(self._clock(), self.freshnessWindow):
            return

        coordinates = entry.coordinates
        weather = self.weatherFetcher.getWeather(coordinates.lat, coordinates.lon)
        entry.applyWeather(weather, self._clock())
        self._fetches += 1
        logger.debug(f"Updated weather for city: {entry.name}")

    def _refreshAll(self) -> None:
        """Refresh every stale city cached at the beginning of the cycle"""
        with self._lock:
            if not self._active:
                return
            for entry in list(self._entries.values()):
                self._refreshEntry(entry)

    def _startPolling(self) -> None:
        """Start background refresh thread. Lock must be held."""
        self._pollingStarted = True
        self._pollingThread = threading.Thread(
            target=self._pollingLoop,
            name=f"CityCachePolling-{id(self):x}",
            daemon=True,
        )
        self._pollingThread.start()
        logger.info(f"Started weather polling every {self.pollingInterval}s, dood!")

    def _pollingLoop(self) -> None:
        """Body of the background refresh thread"""
        while self._active:
            try:
                self._refreshAll()
            except Exception as e:
                self._lastError = e
                logger.exception(f"Failed to automatically update weather data, deactivating cache: {e}")
                self.deactivate()
                return

            if self._stopEvent.wait(self.pollingInterval):
                break

        logger.info("Weather polling stopped, dood!")
